"""Patient accounts with bcrypt password hashing, stored in a JSON file."""
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import bcrypt

from medi360.infrastructure.auth.validators import validate_password
from medi360.infrastructure.config import Settings
from medi360.infrastructure.storage.json_store import JsonCollection, StorageError


logger = logging.getLogger(__name__)

PUBLIC_FIELDS = ("id", "full_name", "email", "phone_number", "role", "created_at")


class UserManager:
    """Registers, authenticates and looks up MEDI-360 users (keyed by email)."""

    def __init__(self, storage_path: Optional[str] = None, rounds: int = 12):
        """
        Args:
            storage_path: Path to the users JSON file. Defaults to users.json
                          in the configured data directory.
            rounds: bcrypt cost factor.
        """
        if storage_path is None:
            storage_path = str(Path(Settings().data_dir) / "users.json")
        self.storage_path = storage_path
        self.rounds = rounds
        self._users = JsonCollection(storage_path)

    def _hash_password(self, password: str) -> str:
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def _verify_password(self, password: str, hashed_password: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    @staticmethod
    def _public(user: Dict[str, Any]) -> Dict[str, Any]:
        return {field: user.get(field) for field in PUBLIC_FIELDS}

    def email_exists(self, email: str) -> bool:
        return self._users.get(email.strip().lower()) is not None

    def register_user(
        self,
        full_name: str,
        email: str,
        password: str,
        phone_number: Optional[str] = None,
    ) -> Tuple[bool, str]:
        """
        Register a new patient account.

        Returns:
            Tuple of (success, message)
        """
        email = email.strip().lower()
        if self.email_exists(email):
            return False, "Email already registered"

        user = {
            "id": uuid.uuid4().hex,
            "full_name": full_name.strip(),
            "email": email,
            "phone_number": phone_number.strip() if phone_number else None,
            "role": "patient",
            "password": self._hash_password(password),
            "is_active": True,
            "created_at": datetime.now().isoformat(),
            "last_login": None,
        }

        try:
            with self._users.lock:
                if self.email_exists(email):
                    return False, "Email already registered"
                self._users.put(email, user)
        except (OSError, StorageError) as e:
            logger.exception("Failed to save user %s", email)
            return False, f"Failed to save user: {e}"
        logger.info("Registered user %s", user["id"])
        return True, "Registration successful"

    def authenticate_user(self, email: str, password: str) -> Tuple[bool, Optional[Dict[str, Any]]]:
        """
        Check credentials and stamp the last login time.

        Returns:
            Tuple of (success, public user data or None). The password hash is
            never part of the returned data.
        """
        email = email.strip().lower()
        user = self._users.get(email)
        if user is None or not user.get("is_active", True):
            return False, None
        if not self._verify_password(password, user["password"]):
            return False, None

        user["last_login"] = datetime.now().isoformat()
        self._users.put(email, user)
        return True, self._public(user)

    def get_user(self, email: str) -> Optional[Dict[str, Any]]:
        user = self._users.get(email.strip().lower())
        return self._public(user) if user else None

    def change_password(self, email: str, current_password: str, new_password: str) -> Tuple[bool, str]:
        valid, error = validate_password(new_password)
        if not valid:
            return False, error

        email = email.strip().lower()
        user = self._users.get(email)
        if user is None:
            return False, "User not found"
        if not self._verify_password(current_password, user["password"]):
            return False, "Current password is incorrect"

        user["password"] = self._hash_password(new_password)
        self._users.put(email, user)
        return True, "Password updated successfully"
