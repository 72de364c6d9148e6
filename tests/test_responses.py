"""Tests for rendering classifier results as chat replies."""
from medi360.application.responses import format_analysis
from medi360.domain.knowledge import DISCLAIMER, EMERGENCY_ACTIONS, EMERGENCY_NUMBER, URGENT_ACTION, WARNING_SIGNS
from medi360.domain.rules import classify


class TestFormatAnalysis:
    def test_regular_reply_sections(self):
        text = format_analysis(classify(["nausea", "vomiting"]))

        assert text.startswith("🩺 ANALYSIS")
        assert "I have noted your symptoms: nausea, vomiting." in text
        assert "Severity level: MODERATE" in text
        assert "• food poisoning (high likelihood)" in text
        for sign in WARNING_SIGNS:
            assert f"• {sign}" in text
        assert text.endswith(f"Disclaimer: {DISCLAIMER}")

    def test_no_markdown(self):
        text = format_analysis(classify(["fever"]))
        assert "**" not in text
        assert "#" not in text

    def test_unmatched_symptoms(self):
        text = format_analysis(classify(["itchy elbow"]))
        assert "Possible conditions" not in text

    def test_emergency_reply(self):
        text = format_analysis(classify(["severe bleeding"]))

        assert text.startswith("🚨 MEDICAL EMERGENCY")
        assert URGENT_ACTION in text
        assert f"Emergency number: {EMERGENCY_NUMBER}" in text
        assert "🩺 ANALYSIS" not in text
        for action in EMERGENCY_ACTIONS:
            assert f"• {action}" in text
