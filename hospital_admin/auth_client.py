"""Client for the remote login and registration endpoints."""

import logging
import threading

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hospital_admin.config import AUTH_API_URL, AUTH_TIMEOUT
from hospital_admin.store.models import User

logger = logging.getLogger(__name__)

# Default messages for registration failures the service reports without a body
REGISTER_ERRORS = {409: "A user with this email address already exists"}


class AuthServiceError(Exception):
    """Raised when the auth service cannot be reached or answers badly."""
    pass


class RemoteUser(BaseModel):
    """User record as returned by the auth service (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    role: str
    hospital_id: str = Field(alias="hospitalId")
    department_id: str | None = Field(None, alias="departmentId")
    avatar: str | None = None
    is_active: bool = Field(True, alias="isActive")
    created_at: str | None = Field(None, alias="createdAt")
    last_login: str | None = Field(None, alias="lastLogin")

    def to_user(self) -> User:
        return User(**self.model_dump())


class AuthResponse(BaseModel):
    """Structured outcome of a remote auth call. Never an exception."""

    success: bool
    user: RemoteUser | None = None
    error: str | None = None
    status_code: int | None = None


class AuthClient:
    """Calls the login/registration collaborators with explicit timeouts.

    A ``threading.Event`` may be passed as a cancellation token: a cancelled
    call is not sent, and a response arriving after cancellation is dropped.
    """

    def __init__(self, base_url: str | None = None, timeout: float = AUTH_TIMEOUT):
        self.base_url = (base_url or AUTH_API_URL or "").rstrip("/")
        self.timeout = timeout

    def login(
        self,
        email: str,
        password: str,
        cancel_event: threading.Event | None = None,
    ) -> AuthResponse:
        payload = {"email": email, "password": password}
        return self._call("/api/login", payload, cancel_event)

    def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
        hospital_id: str,
        department_id: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> AuthResponse:
        payload = {
            "name": name,
            "email": email,
            "password": password,
            "role": role,
            "hospitalId": hospital_id,
        }
        if department_id:
            payload["departmentId"] = department_id
        return self._call("/api/register", payload, cancel_event, REGISTER_ERRORS)

    def _call(
        self,
        path: str,
        payload: dict,
        cancel_event: threading.Event | None,
        status_messages: dict[int, str] | None = None,
    ) -> AuthResponse:
        try:
            return self._post(path, payload, cancel_event, status_messages or {})
        except AuthServiceError as e:
            logger.warning("Auth request %s failed: %s", path, e)
            return AuthResponse(success=False, error=str(e))

    def _post(
        self,
        path: str,
        payload: dict,
        cancel_event: threading.Event | None,
        status_messages: dict[int, str],
    ) -> AuthResponse:
        """Send a request and parse the reply; raises AuthServiceError."""
        if not self.base_url:
            raise AuthServiceError("AUTH_API_URL is not configured")
        if cancel_event is not None and cancel_event.is_set():
            raise AuthServiceError("Request cancelled")

        try:
            response = requests.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise AuthServiceError("Auth service request timed out")
        except requests.exceptions.ConnectionError:
            raise AuthServiceError("Failed to connect to auth service")
        except requests.exceptions.RequestException as e:
            raise AuthServiceError(f"Auth service request failed: {e}")

        if cancel_event is not None and cancel_event.is_set():
            raise AuthServiceError("Request cancelled")

        try:
            data = response.json()
        except ValueError:
            data = None

        if not 200 <= response.status_code < 300:
            message = data.get("error") if isinstance(data, dict) else None
            return AuthResponse(
                success=False,
                error=(
                    message
                    or status_messages.get(response.status_code)
                    or f"Auth service error: {response.status_code}"
                ),
                status_code=response.status_code,
            )

        if not isinstance(data, dict):
            raise AuthServiceError("Unexpected auth service response format")

        try:
            parsed = AuthResponse.model_validate({**data, "status_code": response.status_code})
        except ValidationError:
            raise AuthServiceError("Unexpected auth service response format")

        if parsed.success and parsed.user is None:
            raise AuthServiceError("Auth service response is missing the user record")
        return parsed
