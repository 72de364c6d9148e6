"""Unit tests for user manager."""
import json
import os
import tempfile

import pytest
from medi360.infrastructure.auth.user_manager import PUBLIC_FIELDS, UserManager


@pytest.fixture
def temp_storage():
    """Create a temporary storage file for testing."""
    with tempfile.NamedTemporaryFile(mode='w', delete=False, suffix='.json') as f:
        temp_path = f.name

    yield temp_path

    # Cleanup
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def manager(temp_storage):
    # Low bcrypt cost keeps the suite fast
    return UserManager(storage_path=temp_storage, rounds=4)


def register(manager, email="asha.patel@example.com", password="secret1", **kwargs):
    return manager.register_user(full_name="Asha Patel", email=email, password=password, **kwargs)


class TestUserManager:
    """Test UserManager functionality."""

    def test_initialization(self, temp_storage):
        """Test UserManager creates an empty users file."""
        UserManager(storage_path=temp_storage, rounds=4)
        assert os.path.exists(temp_storage)

        with open(temp_storage, 'r') as f:
            assert json.load(f) == {}

    def test_register_user_success(self, manager, temp_storage):
        """Test successful user registration."""
        success, message = register(manager, phone_number="9876543210")

        assert success
        assert "successful" in message.lower()

        with open(temp_storage, 'r') as f:
            users = json.load(f)
        user = users["asha.patel@example.com"]
        assert user["full_name"] == "Asha Patel"
        assert user["phone_number"] == "9876543210"
        assert user["role"] == "patient"
        assert user["last_login"] is None

    def test_password_is_hashed(self, manager, temp_storage):
        """Test the stored password is a bcrypt hash, never plain text."""
        register(manager)

        with open(temp_storage, 'r') as f:
            stored = json.load(f)["asha.patel@example.com"]["password"]
        assert stored != "secret1"
        assert stored.startswith("$2b$")

    def test_duplicate_email_rejected(self, manager):
        """Test the same email cannot register twice, regardless of case."""
        register(manager)
        success, message = register(manager, email="  ASHA.PATEL@example.com ")

        assert not success
        assert "already registered" in message.lower()

    def test_authenticate_success(self, manager, temp_storage):
        """Test login with correct credentials returns public data only."""
        register(manager)

        success, user_data = manager.authenticate_user("Asha.Patel@example.com", "secret1")

        assert success
        assert set(user_data) == set(PUBLIC_FIELDS)
        assert "password" not in user_data
        assert user_data["email"] == "asha.patel@example.com"

        with open(temp_storage, 'r') as f:
            assert json.load(f)["asha.patel@example.com"]["last_login"] is not None

    def test_authenticate_wrong_password(self, manager):
        """Test login fails with a wrong password."""
        register(manager)
        assert manager.authenticate_user("asha.patel@example.com", "wrong-pass") == (False, None)

    def test_authenticate_unknown_user(self, manager):
        """Test login fails for an unregistered email."""
        assert manager.authenticate_user("nobody@example.com", "secret1") == (False, None)

    def test_authenticate_inactive_user(self, manager):
        """Test deactivated accounts cannot log in."""
        register(manager)
        user = manager._users.get("asha.patel@example.com")
        user["is_active"] = False
        manager._users.put("asha.patel@example.com", user)

        success, _ = manager.authenticate_user("asha.patel@example.com", "secret1")
        assert not success

    def test_non_bcrypt_hash_fails_closed(self, manager):
        """Test a corrupted stored hash does not raise."""
        register(manager)
        user = manager._users.get("asha.patel@example.com")
        user["password"] = "plain-text"
        manager._users.put("asha.patel@example.com", user)

        success, _ = manager.authenticate_user("asha.patel@example.com", "plain-text")
        assert not success

    def test_get_user_and_email_exists(self, manager):
        """Test lookups by email."""
        register(manager)

        assert manager.email_exists("asha.patel@example.com")
        assert not manager.email_exists("other@example.com")
        assert manager.get_user("asha.patel@example.com")["full_name"] == "Asha Patel"
        assert manager.get_user("other@example.com") is None

    def test_change_password(self, manager):
        """Test password change requires the current password."""
        register(manager)

        assert manager.change_password("asha.patel@example.com", "wrong", "newpass1") == (
            False,
            "Current password is incorrect",
        )
        success, _ = manager.change_password("asha.patel@example.com", "secret1", "newpass1")
        assert success

        assert not manager.authenticate_user("asha.patel@example.com", "secret1")[0]
        assert manager.authenticate_user("asha.patel@example.com", "newpass1")[0]

    def test_change_password_unknown_user(self, manager):
        assert manager.change_password("nobody@example.com", "a", "newpass1") == (False, "User not found")

    @pytest.mark.parametrize(
        "new_password, error",
        [
            ("x", "Password must be at least 6 characters"),
            (" newpass1 ", "Password cannot start or end with spaces"),
        ],
    )
    def test_change_password_applies_password_rules(self, manager, new_password, error):
        """Test a new password must pass the same rules as registration."""
        register(manager)

        assert manager.change_password("asha.patel@example.com", "secret1", new_password) == (False, error)
        assert manager.authenticate_user("asha.patel@example.com", "secret1")[0]

    def test_persistence_across_instances(self, temp_storage):
        """Test users survive a new manager instance."""
        register(UserManager(storage_path=temp_storage, rounds=4))

        fresh = UserManager(storage_path=temp_storage, rounds=4)
        assert fresh.authenticate_user("asha.patel@example.com", "secret1")[0]
