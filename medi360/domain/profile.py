from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import HealthContext


class Measurement(BaseModel):
    value: Optional[float] = Field(None, gt=0)
    unit: str


class Height(Measurement):
    unit: Literal["cm", "inches"] = "cm"

    def in_meters(self) -> Optional[float]:
        if self.value is None:
            return None
        if self.unit == "inches":
            return self.value * 0.0254
        return self.value / 100


class Weight(Measurement):
    unit: Literal["kg", "lbs"] = "kg"

    def in_kg(self) -> Optional[float]:
        if self.value is None:
            return None
        if self.unit == "lbs":
            return self.value * 0.453592
        return self.value


class KnownCondition(BaseModel):
    name: str
    diagnosed_date: Optional[date] = None
    severity: Literal["mild", "moderate", "severe"] = "moderate"
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Condition name is required")
        return v


class Allergy(BaseModel):
    allergen: str
    reaction: Optional[str] = None
    severity: Literal["mild", "moderate", "severe", "life-threatening"] = "moderate"

    @field_validator("allergen")
    @classmethod
    def allergen_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Allergen name is required")
        return v


class Medication(BaseModel):
    name: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    start_date: Optional[date] = None
    prescribed_by: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Medication name is required")
        return v


class Surgery(BaseModel):
    procedure: Optional[str] = None
    performed_on: Optional[date] = None
    hospital: Optional[str] = None
    notes: Optional[str] = None


class FamilyHistoryEntry(BaseModel):
    relation: Optional[Literal["parent", "sibling", "grandparent", "other"]] = None
    condition: Optional[str] = None
    notes: Optional[str] = None


class Lifestyle(BaseModel):
    smoking_status: Literal["never", "former", "current"] = "never"
    alcohol_consumption: Literal["never", "occasional", "moderate", "heavy"] = "never"
    exercise_frequency: Literal["sedentary", "light", "moderate", "active", "very-active"] = "sedentary"
    diet_type: Literal["vegetarian", "non-vegetarian", "vegan", "other"] = "vegetarian"
    sleep_hours: Optional[float] = Field(None, ge=0, le=24)
    stress_level: Literal["low", "moderate", "high"] = "moderate"


class EmergencyContact(BaseModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone_number: Optional[str] = None


class DataSharing(BaseModel):
    allow_research: bool = False
    allow_analytics: bool = True


class RiskFactor(BaseModel):
    factor: str
    level: str


class MedicationConflict(BaseModel):
    medication: Optional[str] = None
    allergen: Optional[str] = None
    severity: str
    recommendation: str


class MedicationCompatibility(BaseModel):
    safe: bool
    conflicts: List[MedicationConflict] = []


class HealthProfile(BaseModel):
    user_id: str
    age: int = Field(..., ge=0, le=150)
    gender: Literal["male", "female", "other", "prefer-not-to-say"]
    blood_group: Literal["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-", "unknown"] = "unknown"
    height: Height = Field(default_factory=Height)
    weight: Weight = Field(default_factory=Weight)
    bmi: Optional[float] = None
    known_conditions: List[KnownCondition] = []
    allergies: List[Allergy] = []
    current_medications: List[Medication] = []
    surgical_history: List[Surgery] = []
    family_history: List[FamilyHistoryEntry] = []
    lifestyle: Lifestyle = Field(default_factory=Lifestyle)
    emergency_contact: EmergencyContact = Field(default_factory=EmergencyContact)
    data_sharing: DataSharing = Field(default_factory=DataSharing)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    last_reviewed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def compute_bmi(self):
        meters = self.height.in_meters()
        kg = self.weight.in_kg()
        if meters and kg:
            self.bmi = round(kg / (meters * meters), 2)
        return self

    def health_context(self) -> HealthContext:
        return HealthContext(
            age=self.age,
            known_conditions=[c.name for c in self.known_conditions],
            current_medications=[m.name for m in self.current_medications],
        )

    def risk_summary(self) -> List[RiskFactor]:
        risks: List[RiskFactor] = []

        if self.bmi:
            if self.bmi < 18.5:
                risks.append(RiskFactor(factor="Underweight", level="moderate"))
            elif 25 <= self.bmi < 30:
                risks.append(RiskFactor(factor="Overweight", level="moderate"))
            elif self.bmi >= 30:
                risks.append(RiskFactor(factor="Obesity", level="high"))

        if self.lifestyle.smoking_status == "current":
            risks.append(RiskFactor(factor="Smoking", level="high"))
        if self.lifestyle.alcohol_consumption == "heavy":
            risks.append(RiskFactor(factor="Heavy Alcohol Use", level="high"))
        if self.lifestyle.exercise_frequency == "sedentary":
            risks.append(RiskFactor(factor="Sedentary Lifestyle", level="moderate"))

        for condition in self.known_conditions:
            risks.append(RiskFactor(factor=condition.name, level=condition.severity))

        return risks

    def has_critical_allergies(self) -> bool:
        return any(a.severity in {"severe", "life-threatening"} for a in self.allergies)

    def check_medication_compatibility(self, medication_name: str) -> MedicationCompatibility:
        """Rule-based check against current medications and recorded allergies.

        Every current medication is reported as needing a check; there is no
        drug interaction database behind this.
        """
        conflicts: List[MedicationConflict] = []

        for med in self.current_medications:
            conflicts.append(
                MedicationConflict(
                    medication=med.name,
                    severity="check-required",
                    recommendation="Consult healthcare provider",
                )
            )

        lowered = medication_name.lower()
        for allergy in self.allergies:
            if allergy.allergen.lower() in lowered:
                conflicts.append(
                    MedicationConflict(
                        allergen=allergy.allergen,
                        severity=allergy.severity,
                        recommendation="DO NOT USE - Known allergy",
                    )
                )

        return MedicationCompatibility(safe=not conflicts, conflicts=conflicts)
