"""Session store: the signed-in user, persisted to local storage."""

import dataclasses
import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from hospital_admin.auth_client import AuthClient
from hospital_admin.storage import LocalStorage, StorageError
from hospital_admin.storage.schema import SESSION_KEY
from hospital_admin.store.models import User, field_names, from_dict, to_dict
from hospital_admin.store.user_directory import UserDirectory

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    success: bool
    error: str | None = None
    user: User | None = None


class AuthStore:
    """Holds the current session user.

    Without a remote client, login resolves e-mail addresses against the
    local user directory and performs no password verification (demo mode).
    With a client, credential checks are delegated to the remote service.
    """

    def __init__(
        self,
        storage: LocalStorage,
        directory: UserDirectory,
        client: AuthClient | None = None,
    ):
        self.storage = storage
        self.directory = directory
        self.client = client
        self.user: User | None = self._load_session()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def login(
        self,
        email: str,
        password: str,
        cancel_event: threading.Event | None = None,
    ) -> AuthResult:
        """Sign in and persist the session with a refreshed last-login time."""
        email = (email or "").strip()
        if not email or not password:
            return AuthResult(success=False, error="Email and password are required")

        if self.client is not None:
            response = self.client.login(email, password, cancel_event=cancel_event)
            if not response.success:
                return AuthResult(success=False, error=response.error or "Login failed")
            user = response.user.to_user()
        else:
            user = self.directory.find_by_email(email)
            if not user:
                return AuthResult(success=False, error="User not found")

        if not user.is_active:
            return AuthResult(success=False, error="Account is disabled")

        user = dataclasses.replace(user, last_login=datetime.now().isoformat())
        self._set_user(user)
        logger.info("User %s logged in", user.email)
        return AuthResult(success=True, user=user)

    def logout(self) -> AuthResult:
        """Clear the session. Succeeds even when nothing was persisted."""
        self.user = None
        try:
            self.storage.remove_item(SESSION_KEY)
        except StorageError:
            logger.exception("Failed to clear stored session")
        logger.info("User logged out")
        return AuthResult(success=True)

    def update_profile(self, changes: dict) -> User | None:
        """Merge changes into the session user. No type checks are applied."""
        if self.user is None:
            return None
        known = field_names(User) - {"id"}
        self._set_user(dataclasses.replace(self.user, **{k: v for k, v in changes.items() if k in known}))
        return self.user

    def switch_role(self, role: str) -> User | None:
        return self.update_profile({"role": role})

    def has_permission(self, required: str | list[str]) -> bool:
        if self.user is None:
            return False
        roles = [required] if isinstance(required, str) else required
        return self.user.role in roles

    def _set_user(self, user: User) -> None:
        self.user = user
        try:
            self.storage.write_json(SESSION_KEY, to_dict(user))
        except StorageError:
            logger.exception("Failed to save session")

    def _load_session(self) -> User | None:
        stored = self.storage.read_json(
            SESSION_KEY, validate=lambda d: isinstance(d, dict) and bool(d.get("id"))
        )
        if stored is None:
            return None
        try:
            user = from_dict(User, stored)
        except TypeError as e:
            logger.warning("Invalid stored session, clearing: %s", e)
            self._clear_corrupted()
            return None
        logger.info("Session restored for %s", user.email)
        return user

    def _clear_corrupted(self) -> None:
        try:
            self.storage.remove_item(SESSION_KEY)
        except StorageError:
            logger.exception("Failed to clear stored session")
