"""Tests for the staff user directory."""

from hospital_admin.storage.schema import USERS_KEY
from hospital_admin.store.user_directory import UserDirectory


class TestLoading:
    """Tests for loading and seeding users."""

    def test_defaults_seeded_and_persisted(self, storage):
        directory = UserDirectory(storage)
        assert [u.email for u in directory.users] == [
            "admin@hospital.com", "doctor@hospital.com", "nurse@hospital.com",
        ]
        assert len(storage.read_json(USERS_KEY)) == 3

    def test_changes_survive_reload(self, storage, directory):
        created = directory.create_user({"name": "Dr. Lee", "email": "lee@hospital.com"}).value
        reloaded = UserDirectory(storage)
        assert reloaded.users.get(created.id).email == "lee@hospital.com"

    def test_corrupted_record_falls_back_to_defaults(self, storage):
        storage.set_item(USERS_KEY, '{"not": "a list"}')
        directory = UserDirectory(storage)
        assert len(directory.users) == 3

    def test_malformed_entries_fall_back_to_defaults(self, storage):
        storage.write_json(USERS_KEY, [{"id": "9"}])
        directory = UserDirectory(storage)
        assert directory.find_by_email("admin@hospital.com") is not None


class TestUserCommands:
    """Tests for user management."""

    def test_find_by_email_case_insensitive(self, directory):
        assert directory.find_by_email("  Doctor@Hospital.com ").id == "2"

    def test_create_user(self, directory):
        result = directory.create_user({"name": "Dr. Lee", "email": "Lee@Hospital.com", "role": "pharmacist"})
        assert result.success
        assert result.value.email == "lee@hospital.com"
        assert result.value.is_active is True
        assert result.value.created_at is not None
        assert directory.users_by_role("pharmacist") == [result.value]

    def test_duplicate_email_rejected(self, directory):
        result = directory.create_user({"name": "Copy", "email": "ADMIN@hospital.com"})
        assert result.error == "A user with this email address already exists"
        assert len(directory.users) == 3

    def test_invalid_user_rejected(self, directory):
        result = directory.create_user({"name": "", "email": "x@y.z"})
        assert not result.success
        assert result.error == "name: name is required"

    def test_toggle_user_status(self, storage, directory):
        assert directory.toggle_user_status("3").is_active is False
        assert UserDirectory(storage).users.get("3").is_active is False
        assert len(directory.active_users()) == 2
        assert directory.toggle_user_status("3").is_active is True

    def test_toggle_unknown_user(self, directory):
        assert directory.toggle_user_status("nope") is None

    def test_delete_user(self, storage, directory):
        assert directory.delete_user("2") is True
        assert UserDirectory(storage).users.get("2") is None
        assert directory.delete_user("2") is False

    def test_update_user(self, storage, directory):
        result = directory.update_user("2", {"department_id": "dept-neuro", "email": " New@Hospital.com"})
        assert result.success
        assert result.value.department_id == "dept-neuro"
        assert result.value.email == "new@hospital.com"
        assert UserDirectory(storage).users.get("2").email == "new@hospital.com"

    def test_update_unknown_user(self, directory):
        result = directory.update_user("nope", {"name": "X"})
        assert result.success
        assert result.value is None

    def test_update_keeps_own_email(self, directory):
        assert directory.update_user("2", {"email": "DOCTOR@hospital.com"}).success

    def test_update_rejects_duplicate_email(self, directory):
        result = directory.update_user("2", {"email": "admin@hospital.com"})
        assert result.error == "A user with this email address already exists"
        assert directory.users.get("2").email == "doctor@hospital.com"

    def test_update_rejects_invalid_fields(self, directory):
        assert directory.update_user("2", {"email": "not-an-email"}).error == "email: email address is not valid"
        assert not directory.update_user("2", {"name": " "}).success
        assert not directory.update_user("2", {"role": "janitor"}).success
        assert directory.users.get("2").name == "Dr. Sarah Johnson"


class TestResetPassword:
    """Tests for the password reset placeholder."""

    def test_accepts_valid_password(self, directory):
        assert directory.reset_password("2", "secret123").success

    def test_requires_password(self, directory):
        assert directory.reset_password("2", "").error == "A new password is required"

    def test_minimum_length(self, directory):
        assert not directory.reset_password("2", "12345").success

    def test_unknown_user(self, directory):
        assert directory.reset_password("nope", "secret123").error == "User not found"

    def test_password_is_not_stored(self, storage, directory):
        directory.reset_password("2", "secret123")
        assert "secret123" not in storage.get_item(USERS_KEY)
