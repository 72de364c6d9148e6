"""Input validation for account forms. Each check returns (is_valid, error_message)."""
import re
from typing import Tuple


EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_PATTERN = re.compile(r"^[0-9]{10}$")

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128
MAX_NAME_LENGTH = 100


def validate_email(email: str) -> Tuple[bool, str]:
    if not email or not email.strip():
        return False, "Email is required"

    email = email.strip().lower()
    if len(email) > 254:
        return False, "Email is too long"
    if not EMAIL_PATTERN.match(email):
        return False, "Please provide a valid email address"

    local_part, domain = email.rsplit("@", 1)
    if ".." in email or local_part.startswith(".") or local_part.endswith("."):
        return False, "Please provide a valid email address"
    if domain.startswith(".") or domain.startswith("-"):
        return False, "Please provide a valid email address"

    return True, ""


def validate_password(password: str) -> Tuple[bool, str]:
    if not password:
        return False, "Password is required"
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if len(password) > MAX_PASSWORD_LENGTH:
        return False, f"Password is too long (max {MAX_PASSWORD_LENGTH} characters)"
    if password.strip() != password:
        return False, "Password cannot start or end with spaces"
    return True, ""


def validate_full_name(name: str) -> Tuple[bool, str]:
    if not name or not name.strip():
        return False, "Full name is required"
    if len(name.strip()) > MAX_NAME_LENGTH:
        return False, f"Name cannot exceed {MAX_NAME_LENGTH} characters"
    return True, ""


def validate_phone(phone: str) -> Tuple[bool, str]:
    """Phone is optional; when given it must be exactly 10 digits."""
    if not phone or not phone.strip():
        return True, ""
    if not PHONE_PATTERN.match(phone.strip()):
        return False, "Please provide a valid 10-digit phone number"
    return True, ""


def passwords_match(password: str, confirm_password: str) -> Tuple[bool, str]:
    if password != confirm_password:
        return False, "Passwords do not match"
    return True, ""
