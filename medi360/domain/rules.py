from collections import Counter
from typing import Iterable, List, Optional, Sequence

from .knowledge import (
    COUGH_RECOMMENDATIONS,
    DISCLAIMER,
    EMERGENCY_ACTIONS,
    EMERGENCY_DISCLAIMER,
    EMERGENCY_KEYWORDS,
    EMERGENCY_NUMBER,
    FEVER_RECOMMENDATIONS,
    KNOWN_CONDITION_RECOMMENDATIONS,
    MEDICATION_RECOMMENDATIONS,
    SEVERITY_RECOMMENDATIONS,
    SYMPTOM_TABLE,
    URGENT_ACTION,
)
from .models import (
    AnalysisResult,
    ConditionLikelihood,
    HealthContext,
    Likelihood,
    Severity,
    SymptomRecord,
)


SEVERITY_POINTS = {
    Severity.HIGH: 3,
    Severity.MODERATE: 2,
    Severity.LOW: 1,
}

HIGH_SCORE_THRESHOLD = 5
MODERATE_SCORE_THRESHOLD = 3
ELDERLY_AGE = 65
MAX_CONDITIONS = 5


def normalize_symptoms(symptoms: Optional[Iterable[str]]) -> List[str]:
    """Lower-case and trim each phrase. Blank phrases are dropped, duplicates kept."""
    normalized: List[str] = []
    for symptom in symptoms or []:
        if not isinstance(symptom, str):
            continue
        phrase = symptom.lower().strip()
        if phrase:
            normalized.append(phrase)
    return normalized


def _overlaps(phrase: str, key: str) -> bool:
    return key in phrase or phrase in key


def emergency_result(symptoms: List[str]) -> AnalysisResult:
    return AnalysisResult(
        severity=Severity.EMERGENCY,
        emergency_detected=True,
        identified_symptoms=symptoms,
        possible_conditions=[],
        recommendations=list(EMERGENCY_ACTIONS),
        disclaimer=EMERGENCY_DISCLAIMER,
        urgent_action=URGENT_ACTION,
        emergency_number=EMERGENCY_NUMBER,
    )


class SymptomClassifier:
    """Rule-based severity and emergency classifier over a static symptom table.

    Instances hold only immutable tuples, so a single classifier can be shared
    across threads and requests.
    """

    def __init__(
        self,
        table: Sequence[SymptomRecord] = SYMPTOM_TABLE,
        emergency_keywords: Sequence[str] = EMERGENCY_KEYWORDS,
    ):
        self.table = tuple(table)
        self.emergency_keywords = tuple(k.lower() for k in emergency_keywords)

    def classify(
        self,
        symptoms: Optional[Iterable[str]],
        context: Optional[HealthContext] = None,
    ) -> AnalysisResult:
        normalized = normalize_symptoms(symptoms)

        if self.check_emergency(normalized):
            return emergency_result(normalized)

        severity = self.calculate_severity(normalized, context)
        if severity is Severity.EMERGENCY:
            return emergency_result(normalized)

        return AnalysisResult(
            severity=severity,
            emergency_detected=False,
            identified_symptoms=normalized,
            possible_conditions=self.identify_conditions(normalized),
            recommendations=build_recommendations(normalized, severity, context),
            disclaimer=DISCLAIMER,
        )

    def check_emergency(self, symptoms: List[str]) -> bool:
        return any(
            _overlaps(symptom, keyword)
            for symptom in symptoms
            for keyword in self.emergency_keywords
        )

    def find_record(self, symptom: str) -> Optional[SymptomRecord]:
        for record in self.table:
            if _overlaps(symptom, record.phrase):
                return record
        return None

    def calculate_severity(
        self, symptoms: List[str], context: Optional[HealthContext] = None
    ) -> Severity:
        highest = Severity.LOW
        score = 0

        for symptom in symptoms:
            record = self.find_record(symptom)
            if record is None:
                continue
            if record.severity is Severity.EMERGENCY:
                return Severity.EMERGENCY
            score += SEVERITY_POINTS[record.severity]
            if record.severity.rank > highest.rank:
                highest = record.severity

        if context is not None:
            if context.known_conditions:
                score += 1
            if context.age is not None and context.age > ELDERLY_AGE:
                score += 1

        if score >= HIGH_SCORE_THRESHOLD:
            return Severity.HIGH
        if score >= MODERATE_SCORE_THRESHOLD:
            return Severity.MODERATE
        return highest

    def identify_conditions(self, symptoms: List[str]) -> List[ConditionLikelihood]:
        # Counter preserves insertion order, and sorted() is stable, so ties
        # stay in first-encountered order.
        counts: Counter = Counter()
        for symptom in symptoms:
            record = self.find_record(symptom)
            if record is None:
                continue
            for condition in record.related_conditions:
                counts[condition] += 1

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [
            ConditionLikelihood(
                condition=condition,
                likelihood=Likelihood.HIGH if frequency > 1 else Likelihood.MODERATE,
            )
            for condition, frequency in ranked[:MAX_CONDITIONS]
        ]


def build_recommendations(
    symptoms: List[str],
    severity: Severity,
    context: Optional[HealthContext] = None,
) -> List[str]:
    block = SEVERITY_RECOMMENDATIONS.get(severity, SEVERITY_RECOMMENDATIONS[Severity.LOW])
    recommendations = list(block)

    if any("fever" in s for s in symptoms):
        recommendations.extend(FEVER_RECOMMENDATIONS)
    if any("cough" in s for s in symptoms):
        recommendations.extend(COUGH_RECOMMENDATIONS)

    if context is not None:
        if context.known_conditions:
            recommendations.extend(KNOWN_CONDITION_RECOMMENDATIONS)
        if context.current_medications:
            recommendations.extend(MEDICATION_RECOMMENDATIONS)

    return recommendations


DEFAULT_CLASSIFIER = SymptomClassifier()


def classify(
    symptoms: Optional[Iterable[str]], context: Optional[HealthContext] = None
) -> AnalysisResult:
    return DEFAULT_CLASSIFIER.classify(symptoms, context)
