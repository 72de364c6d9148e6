import logging
from datetime import datetime
from typing import List

from pydantic import ValidationError

from medi360.application.errors import ConflictError, InvalidRequestError, NotFoundError
from medi360.application.ports import ProfileStorePort
from medi360.domain.profile import (
    Allergy,
    HealthProfile,
    KnownCondition,
    Medication,
    MedicationCompatibility,
    RiskFactor,
)


logger = logging.getLogger(__name__)

_READ_ONLY_FIELDS = {"user_id", "bmi", "created_at", "updated_at", "last_reviewed_at"}


def _validation_message(e: ValidationError) -> str:
    return ", ".join(err["msg"] for err in e.errors())


class HealthProfileService:
    def __init__(self, store: ProfileStorePort):
        self.store = store

    def create(self, user_id: str, data: dict) -> HealthProfile:
        if self.store.get(user_id) is not None:
            raise ConflictError("Health profile already exists. Use update instead.")
        fields = {k: v for k, v in data.items() if k not in _READ_ONLY_FIELDS}
        try:
            profile = HealthProfile(user_id=user_id, **fields)
        except ValidationError as e:
            raise InvalidRequestError(_validation_message(e)) from e
        self.store.save(profile)
        logger.info("Created health profile for user %s", user_id)
        return profile

    def get(self, user_id: str) -> HealthProfile:
        profile = self.store.get(user_id)
        if profile is None:
            raise NotFoundError("Health profile not found. Please create one first.")
        return profile

    def update(self, user_id: str, changes: dict) -> HealthProfile:
        profile = self.get(user_id)
        merged = profile.model_dump()
        for key, value in changes.items():
            if value is not None and key not in _READ_ONLY_FIELDS:
                merged[key] = value
        merged["bmi"] = None
        merged["updated_at"] = datetime.now()
        merged["last_reviewed_at"] = merged["updated_at"]
        try:
            updated = HealthProfile(**merged)
        except ValidationError as e:
            raise InvalidRequestError(_validation_message(e)) from e
        self.store.save(updated)
        return updated

    def delete(self, user_id: str) -> None:
        if not self.store.delete(user_id):
            raise NotFoundError("Health profile not found")

    def add_condition(self, user_id: str, **fields) -> HealthProfile:
        profile = self.get(user_id)
        try:
            profile.known_conditions.append(KnownCondition(**fields))
        except ValidationError as e:
            raise InvalidRequestError(_validation_message(e)) from e
        return self._touch(profile)

    def add_allergy(self, user_id: str, **fields) -> HealthProfile:
        profile = self.get(user_id)
        try:
            profile.allergies.append(Allergy(**fields))
        except ValidationError as e:
            raise InvalidRequestError(_validation_message(e)) from e
        return self._touch(profile)

    def add_medication(self, user_id: str, **fields) -> HealthProfile:
        profile = self.get(user_id)
        try:
            profile.current_medications.append(Medication(**fields))
        except ValidationError as e:
            raise InvalidRequestError(_validation_message(e)) from e
        return self._touch(profile)

    def risk_summary(self, user_id: str) -> List[RiskFactor]:
        return self.get(user_id).risk_summary()

    def check_medication(self, user_id: str, medication_name: str) -> MedicationCompatibility:
        if not medication_name or not medication_name.strip():
            raise InvalidRequestError("Medication name is required")
        return self.get(user_id).check_medication_compatibility(medication_name.strip())

    def _touch(self, profile: HealthProfile) -> HealthProfile:
        profile.updated_at = datetime.now()
        self.store.save(profile)
        return profile
