"""Staff user directory persisted to local storage."""

import logging
from datetime import datetime

from pydantic import ValidationError

from hospital_admin.forms import UserForm, form_error
from hospital_admin.storage import LocalStorage, StorageError
from hospital_admin.storage.schema import USERS_KEY

from . import seed
from .collection import EntityCollection
from .hospital_store import new_id
from .models import Result, User, from_dict, to_dict

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class UserDirectory:
    """Staff accounts with write-through persistence."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.users: EntityCollection[User] = EntityCollection("user", self._load())

    def find_by_email(self, email: str) -> User | None:
        email = (email or "").strip().lower()
        for user in self.users:
            if user.email.lower() == email:
                return user
        return None

    def users_by_role(self, role: str) -> list[User]:
        return self.users.find(lambda u: u.role == role)

    def active_users(self) -> list[User]:
        return self.users.find(lambda u: u.is_active)

    def create_user(self, data: dict) -> Result:
        """Validate and create an active staff account."""
        try:
            form = UserForm(**data)
        except ValidationError as e:
            return Result.fail(form_error(e))

        if self.find_by_email(form.email):
            return Result.fail("A user with this email address already exists")

        user = User(
            id=new_id("u"),
            is_active=True,
            created_at=datetime.now().isoformat(),
            **form.model_dump(),
        )
        self.users.add(user)
        self._save()
        logger.info("Created user %s (%s)", user.email, user.role)
        return Result.ok(user)

    def update_user(self, user_id: str, changes: dict) -> Result:
        """Validate and apply changes to a staff account.

        Profile fields are re-checked on the merged record and a changed
        e-mail must not belong to another user. An unknown id yields no value.
        """
        user = self.users.get(user_id)
        if not user:
            return Result.ok(None)

        profile = {name: getattr(user, name) for name in UserForm.model_fields}
        profile.update({k: v for k, v in changes.items() if k in UserForm.model_fields})
        try:
            form = UserForm(**profile)
        except ValidationError as e:
            return Result.fail(form_error(e))

        owner = self.find_by_email(form.email)
        if owner and owner.id != user_id:
            return Result.fail("A user with this email address already exists")

        updated = self.users.update(user_id, {**changes, **form.model_dump()})
        self._save()
        return Result.ok(updated)

    def delete_user(self, user_id: str) -> bool:
        deleted = self.users.delete(user_id)
        if deleted:
            self._save()
        return deleted

    def toggle_user_status(self, user_id: str) -> User | None:
        user = self.users.get(user_id)
        if not user:
            return None
        updated = self.users.update(user_id, {"is_active": not user.is_active})
        self._save()
        return updated

    def reset_password(self, user_id: str, new_password: str) -> Result:
        """Placeholder reset: checks the policy only, no credentials are kept here."""
        if not new_password:
            return Result.fail("A new password is required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            return Result.fail(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if not self.users.get(user_id):
            return Result.fail("User not found")
        logger.info("Password reset requested for user %s", user_id)
        return Result.ok()

    def _load(self) -> list[User]:
        stored = self.storage.read_json(USERS_KEY, validate=lambda d: isinstance(d, list))
        if stored is not None:
            try:
                users = [from_dict(User, u) for u in stored]
            except (TypeError, AttributeError) as e:
                logger.warning("Invalid user records, resetting to defaults: %s", e)
            else:
                logger.info("Users loaded: %d", len(users))
                return users

        users = seed.default_users()
        self._write(users)
        return users

    def _save(self) -> None:
        self._write(self.users.items)

    def _write(self, users: list[User]) -> None:
        try:
            self.storage.write_json(USERS_KEY, [to_dict(u) for u in users])
        except StorageError:
            logger.exception("Failed to save users")
