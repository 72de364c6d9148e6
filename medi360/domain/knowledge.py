"""Static medical knowledge used by the rule-based symptom classifier.

Everything here is module-level constant data. The symptom table is a tuple
in declaration order because lookup is first-match-wins on substrings.
"""
from typing import Dict, Tuple

from .models import Severity, SymptomRecord


SYMPTOM_TABLE: Tuple[SymptomRecord, ...] = (
    # Cardiovascular
    SymptomRecord(
        phrase="chest pain",
        categories=("cardiovascular",),
        severity=Severity.HIGH,
        emergency=True,
        related_conditions=("heart attack", "angina", "pulmonary embolism"),
    ),
    SymptomRecord(
        phrase="shortness of breath",
        categories=("respiratory", "cardiovascular"),
        severity=Severity.MODERATE,
        related_conditions=("asthma", "COPD", "anxiety"),
    ),
    SymptomRecord(
        phrase="irregular heartbeat",
        categories=("cardiovascular",),
        severity=Severity.MODERATE,
        related_conditions=("arrhythmia", "atrial fibrillation"),
    ),
    # Neurological
    SymptomRecord(
        phrase="severe headache",
        categories=("neurological",),
        severity=Severity.MODERATE,
        related_conditions=("migraine", "tension headache", "cluster headache"),
    ),
    SymptomRecord(
        phrase="sudden confusion",
        categories=("neurological",),
        severity=Severity.HIGH,
        emergency=True,
        related_conditions=("stroke", "seizure", "hypoglycemia"),
    ),
    SymptomRecord(
        phrase="dizziness",
        categories=("neurological", "cardiovascular"),
        severity=Severity.LOW,
        related_conditions=("vertigo", "low blood pressure", "dehydration"),
    ),
    # Respiratory
    SymptomRecord(
        phrase="cough",
        categories=("respiratory",),
        severity=Severity.LOW,
        related_conditions=("common cold", "bronchitis", "pneumonia"),
    ),
    SymptomRecord(
        phrase="fever",
        categories=("general", "infection"),
        severity=Severity.MODERATE,
        related_conditions=("infection", "flu", "viral illness"),
    ),
    SymptomRecord(
        phrase="difficulty breathing",
        categories=("respiratory",),
        severity=Severity.HIGH,
        emergency=True,
        related_conditions=("asthma attack", "pneumonia", "allergic reaction"),
    ),
    # Gastrointestinal
    SymptomRecord(
        phrase="nausea",
        categories=("gastrointestinal",),
        severity=Severity.LOW,
        related_conditions=("gastritis", "food poisoning", "pregnancy"),
    ),
    SymptomRecord(
        phrase="abdominal pain",
        categories=("gastrointestinal",),
        severity=Severity.MODERATE,
        related_conditions=("gastritis", "appendicitis", "kidney stones"),
    ),
    SymptomRecord(
        phrase="vomiting",
        categories=("gastrointestinal",),
        severity=Severity.MODERATE,
        related_conditions=("gastroenteritis", "food poisoning", "migraine"),
    ),
    # General
    SymptomRecord(
        phrase="fatigue",
        categories=("general",),
        severity=Severity.LOW,
        related_conditions=("anemia", "depression", "sleep disorder"),
    ),
    SymptomRecord(
        phrase="body aches",
        categories=("general",),
        severity=Severity.LOW,
        related_conditions=("flu", "viral infection", "fibromyalgia"),
    ),
    SymptomRecord(
        phrase="loss of consciousness",
        categories=("neurological",),
        severity=Severity.EMERGENCY,
        emergency=True,
        related_conditions=("seizure", "stroke", "cardiac arrest"),
    ),
)


EMERGENCY_KEYWORDS: Tuple[str, ...] = (
    "chest pain",
    "difficulty breathing",
    "sudden confusion",
    "loss of consciousness",
    "severe bleeding",
    "stroke symptoms",
    "severe allergic reaction",
    "suicidal thoughts",
)


URGENT_ACTION = "CALL EMERGENCY SERVICES IMMEDIATELY"
EMERGENCY_NUMBER = "108 (India) or local emergency number"

EMERGENCY_ACTIONS: Tuple[str, ...] = (
    "🚨 Call emergency services (108) immediately",
    "Do not attempt to drive yourself",
    "Stay calm and follow dispatcher instructions",
    "Have someone stay with you until help arrives",
    "If alone, unlock your front door for emergency responders",
)

EMERGENCY_DISCLAIMER = (
    "This is a medical emergency. Please seek immediate professional medical help."
)

DISCLAIMER = (
    "This system provides general medical guidance and is not a substitute for "
    "professional medical advice, diagnosis, or treatment. Always seek the advice "
    "of your physician or other qualified health provider with any questions you "
    "may have regarding a medical condition."
)


SEVERITY_RECOMMENDATIONS: Dict[Severity, Tuple[str, ...]] = {
    Severity.HIGH: (
        "Consult a healthcare provider within 24 hours",
        "Monitor your symptoms closely",
        "Avoid strenuous activities",
    ),
    Severity.MODERATE: (
        "Consider scheduling a doctor appointment",
        "Track your symptoms over the next few days",
        "Seek care sooner if your symptoms get worse",
    ),
    Severity.LOW: (
        "Monitor symptoms; they may resolve on their own",
        "Maintain proper rest and hydration",
        "See a doctor if symptoms persist beyond a few days",
    ),
}

FEVER_RECOMMENDATIONS: Tuple[str, ...] = (
    "Stay hydrated and rest",
    "Take temperature regularly",
    "Use over-the-counter fever reducers if needed",
)

COUGH_RECOMMENDATIONS: Tuple[str, ...] = (
    "Stay hydrated with warm fluids",
    "Use a humidifier if available",
    "Avoid irritants like smoke",
)

KNOWN_CONDITION_RECOMMENDATIONS: Tuple[str, ...] = (
    "Consider how symptoms may relate to your known conditions",
    "Contact your regular healthcare provider",
)

MEDICATION_RECOMMENDATIONS: Tuple[str, ...] = (
    "Check for potential drug interactions",
    "Consult pharmacist if taking new medications",
)

WARNING_SIGNS: Tuple[str, ...] = (
    "Symptoms that persist for more than 24 hours",
    "Pain that becomes severe or spreads",
    "Difficulty breathing, chest pain or confusion",
)


# Vocabulary scanned in free-text chat messages before classification.
COMMON_SYMPTOMS: Tuple[str, ...] = (
    "fever",
    "headache",
    "pain",
    "cough",
    "nausea",
    "vomiting",
    "dizzy",
    "tired",
    "chest pain",
    "rash",
)
