from typing import List

from medi360.domain.knowledge import WARNING_SIGNS
from medi360.domain.models import AnalysisResult


def format_analysis(result: AnalysisResult) -> str:
    """Render a classifier result as the plain-text chat reply (no markdown)."""
    if result.emergency_detected:
        return _format_emergency(result)

    lines: List[str] = ["🩺 ANALYSIS"]
    if result.identified_symptoms:
        lines.append(f"I have noted your symptoms: {', '.join(result.identified_symptoms)}.")
    else:
        lines.append("I could not match your message to a known symptom.")
    lines.append(f"Severity level: {result.severity.value.upper()}")

    if result.possible_conditions:
        lines.append("Possible conditions (not a diagnosis):")
        for pc in result.possible_conditions:
            lines.append(f"• {pc.condition} ({pc.likelihood.value} likelihood)")
    lines.append("")

    lines.append("💊 IMMEDIATE ADVICE")
    for rec in result.recommendations:
        lines.append(f"• {rec}")
    lines.append("")

    lines.append("⚠️ WARNING SIGNS")
    for sign in WARNING_SIGNS:
        lines.append(f"• {sign}")
    lines.append("")

    lines.append("---")
    lines.append(f"Disclaimer: {result.disclaimer}")
    return "\n".join(lines)


def _format_emergency(result: AnalysisResult) -> str:
    lines = [
        "🚨 MEDICAL EMERGENCY",
        result.urgent_action or "",
        f"Emergency number: {result.emergency_number}",
        "",
        "🚑 ACTION PLAN",
    ]
    for rec in result.recommendations:
        lines.append(f"• {rec}")
    lines.append("")
    lines.append("---")
    lines.append(result.disclaimer)
    return "\n".join(lines)
