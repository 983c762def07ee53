"""Environment-driven settings for the hospital admin core."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=True)

STORAGE_PATH = Path(
    os.getenv("HOSPITAL_STORAGE_PATH", str(Path(__file__).parent / "hospital_admin.db"))
)

# Remote login/registration collaborator. Unset means demo mode.
AUTH_API_URL = os.getenv("AUTH_API_URL")
AUTH_TIMEOUT = float(os.getenv("AUTH_TIMEOUT", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "de")
