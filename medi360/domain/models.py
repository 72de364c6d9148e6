from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    EMERGENCY = "emergency"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.LOW, Severity.MODERATE, Severity.HIGH, Severity.EMERGENCY]


class Likelihood(str, Enum):
    MODERATE = "moderate"
    HIGH = "high"


class SymptomRecord(BaseModel):
    """One read-only entry of the symptom knowledge table."""

    model_config = ConfigDict(frozen=True)

    phrase: str
    categories: Tuple[str, ...] = ()
    severity: Severity
    emergency: bool = False
    related_conditions: Tuple[str, ...] = ()


class HealthContext(BaseModel):
    age: Optional[int] = Field(None, ge=0, le=150)
    known_conditions: List[str] = []
    current_medications: List[str] = []

    @field_validator("known_conditions", "current_medications")
    @classmethod
    def drop_blank_names(cls, v: List[str]) -> List[str]:
        return [name.strip() for name in v if name and name.strip()]


class ConditionLikelihood(BaseModel):
    model_config = ConfigDict(frozen=True)

    condition: str
    likelihood: Likelihood


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    emergency_detected: bool = False
    identified_symptoms: List[str] = []
    possible_conditions: List[ConditionLikelihood] = []
    recommendations: List[str] = []
    disclaimer: str
    urgent_action: Optional[str] = None
    emergency_number: Optional[str] = None
