"""Tests for the session store."""

from unittest.mock import MagicMock

from hospital_admin.auth_client import AuthResponse, RemoteUser
from hospital_admin.auth_store import AuthStore
from hospital_admin.storage.schema import SESSION_KEY


class TestDemoLogin:
    """Tests for login against the local user directory."""

    def test_login_persists_session(self, storage, directory, auth):
        result = auth.login("Doctor@Hospital.com", "anything")
        assert result.success
        assert result.user.id == "2"
        assert result.user.last_login is not None
        assert auth.is_authenticated

        restored = AuthStore(storage, directory)
        assert restored.user == auth.user

    def test_requires_email_and_password(self, auth):
        assert auth.login("", "pw").error == "Email and password are required"
        assert auth.login("admin@hospital.com", "").error == "Email and password are required"

    def test_unknown_user(self, auth):
        result = auth.login("ghost@hospital.com", "pw")
        assert result.error == "User not found"
        assert not auth.is_authenticated

    def test_inactive_user_rejected(self, directory, auth):
        directory.toggle_user_status("3")
        result = auth.login("nurse@hospital.com", "pw")
        assert result.error == "Account is disabled"
        assert auth.user is None


class TestRemoteLogin:
    """Tests for login delegated to the auth service."""

    def test_delegates_to_client(self, storage, directory):
        client = MagicMock()
        client.login.return_value = AuthResponse(
            success=True,
            user=RemoteUser(id="u-42", name="Remote", email="remote@hospital.com",
                            role="billing", hospitalId="hosp-001"),
        )
        auth = AuthStore(storage, directory, client)

        result = auth.login("remote@hospital.com", "pw")
        assert result.success
        assert auth.user.id == "u-42"
        assert auth.user.role == "billing"
        client.login.assert_called_once_with("remote@hospital.com", "pw", cancel_event=None)

    def test_client_error_is_returned(self, storage, directory):
        client = MagicMock()
        client.login.return_value = AuthResponse(success=False, error="Invalid credentials", status_code=401)
        auth = AuthStore(storage, directory, client)

        assert auth.login("admin@hospital.com", "wrong").error == "Invalid credentials"
        assert auth.user is None


class TestSessionRestore:
    """Tests for restoring the session from storage."""

    def test_no_session(self, auth):
        assert auth.user is None

    def test_corrupted_session_is_cleared(self, storage, directory):
        storage.set_item(SESSION_KEY, "{broken")
        assert AuthStore(storage, directory).user is None
        assert storage.get_item(SESSION_KEY) is None

    def test_session_without_id_is_cleared(self, storage, directory):
        storage.write_json(SESSION_KEY, {"name": "No id"})
        assert AuthStore(storage, directory).user is None
        assert storage.get_item(SESSION_KEY) is None

    def test_incomplete_session_is_cleared(self, storage, directory):
        storage.write_json(SESSION_KEY, {"id": "2"})
        assert AuthStore(storage, directory).user is None
        assert storage.get_item(SESSION_KEY) is None


class TestSessionCommands:
    """Tests for logout, profile updates and permissions."""

    def test_logout(self, storage, directory, auth):
        auth.login("admin@hospital.com", "pw")
        assert auth.logout().success
        assert auth.user is None
        assert AuthStore(storage, directory).user is None

    def test_logout_without_session(self, auth):
        assert auth.logout().success

    def test_update_profile(self, storage, directory, auth):
        auth.login("admin@hospital.com", "pw")
        updated = auth.update_profile({"name": "Chief Admin", "id": "other"})
        assert updated.name == "Chief Admin"
        assert updated.id == "1"
        assert AuthStore(storage, directory).user.name == "Chief Admin"

    def test_update_profile_without_session(self, auth):
        assert auth.update_profile({"name": "Nobody"}) is None

    def test_switch_role_and_permissions(self, auth):
        assert not auth.has_permission("doctor")
        auth.login("admin@hospital.com", "pw")
        assert auth.has_permission(["superadmin", "hospital_admin"])
        auth.switch_role("doctor")
        assert auth.has_permission("doctor")
        assert not auth.has_permission("superadmin")
