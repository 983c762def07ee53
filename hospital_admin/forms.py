"""Input validation for store commands using Pydantic models."""

import re
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, ValidationError, field_validator

from hospital_admin.store.models import (
    APPOINTMENT_STATUSES,
    APPOINTMENT_TYPES,
    FILE_CATEGORIES,
    FILE_TYPES,
    GENDERS,
    PATIENT_STATUSES,
    ROUTES,
    USER_ROLES,
    VISIT_CATEGORIES,
)

DEFAULT_REORDER_LEVEL = 100


def form_error(exc: ValidationError) -> str:
    """Flatten the first validation error into a displayable message."""
    err = exc.errors()[0]
    field_name = ".".join(str(part) for part in err.get("loc", ()))
    message = err.get("msg", "invalid value").removeprefix("Value error, ")
    return f"{field_name}: {message}" if field_name else message


def _required(v, label: str) -> str:
    if v is None or not str(v).strip():
        raise ValueError(f"{label} is required")
    return str(v).strip()


def _optional(v) -> str | None:
    if v is None or not str(v).strip():
        return None
    return str(v).strip()


def _one_of(v: str, allowed: tuple, label: str) -> str:
    if v not in allowed:
        raise ValueError(f"{label} must be one of {', '.join(allowed)}")
    return v


def normalize_date(v) -> str:
    """Convert various date formats to YYYY-MM-DD."""
    if isinstance(v, date):
        return v.isoformat()
    v = str(v).strip()
    # Already in correct format
    if re.match(r"^\d{4}-\d{2}-\d{2}$", v):
        candidate = v
    else:
        # DD.MM.YYYY
        match = re.match(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$", v)
        # MM/DD/YYYY
        slash = re.match(r"^(\d{1,2})/(\d{1,2})/(\d{4})$", v)
        if match:
            d, m, y = match.groups()
        elif slash:
            m, d, y = slash.groups()
        else:
            raise ValueError("date must be in YYYY-MM-DD format")
        candidate = f"{y}-{m.zfill(2)}-{d.zfill(2)}"
    try:
        date.fromisoformat(candidate)
    except ValueError:
        raise ValueError(f"{candidate} is not a valid calendar date")
    return candidate


def normalize_time(v) -> str:
    """Convert H:MM or HH:MM to HH:MM."""
    v = _required(v, "time")
    match = re.match(r"^(\d{1,2}):(\d{2})$", v)
    if not match or int(match.group(1)) > 23 or int(match.group(2)) > 59:
        raise ValueError("time must be in HH:MM format")
    return f"{int(match.group(1)):02d}:{match.group(2)}"


class InsuranceForm(BaseModel):
    provider: str
    policy_number: str
    valid_until: str

    @field_validator("provider", "policy_number", mode="before")
    @classmethod
    def require_field(cls, v, info):
        return _required(v, info.field_name.replace("_", " "))

    @field_validator("valid_until", mode="before")
    @classmethod
    def normalize_valid_until(cls, v):
        return normalize_date(_required(v, "valid until"))


class EmergencyContactForm(BaseModel):
    name: str
    relationship: str
    phone: str

    @field_validator("name", "relationship", "phone", mode="before")
    @classmethod
    def require_field(cls, v, info):
        return _required(v, info.field_name)


class PatientForm(BaseModel):
    """Fields accepted when registering a patient."""

    first_name: str
    last_name: str
    date_of_birth: str
    gender: str = "other"
    contact_number: str = ""
    blood_type: str | None = None
    allergies: list[str] = Field(default_factory=list)
    status: str = "outpatient"
    mrn: str | None = None
    admission_date: str | None = None
    insurance: InsuranceForm | None = None
    emergency_contact: EmergencyContactForm | None = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def require_name(cls, v, info):
        return _required(v, info.field_name.replace("_", " "))

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def normalize_dob(cls, v):
        return normalize_date(_required(v, "date of birth"))

    @field_validator("admission_date", mode="before")
    @classmethod
    def normalize_admission(cls, v):
        v = _optional(v)
        return normalize_date(v) if v else None

    @field_validator("gender")
    @classmethod
    def check_gender(cls, v):
        return _one_of(v, GENDERS, "gender")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return _one_of(v, PATIENT_STATUSES, "status")

    @field_validator("blood_type", "mrn", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)

    @field_validator("allergies", mode="before")
    @classmethod
    def split_allergies(cls, v):
        """Accept a comma-separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [a.strip() for a in v if a and a.strip()]


class AppointmentForm(BaseModel):
    """Fields accepted when scheduling an appointment."""

    patient_id: str
    doctor_id: str
    doctor_name: str
    date: str
    time: str
    duration: int = Field(30, gt=0)
    type: str = "consultation"
    status: str = "scheduled"
    notes: str | None = None
    room: str | None = None

    @field_validator("patient_id", "doctor_id", "doctor_name", mode="before")
    @classmethod
    def require_field(cls, v, info):
        return _required(v, info.field_name.replace("_", " "))

    @field_validator("date", mode="before")
    @classmethod
    def normalize_day(cls, v):
        return normalize_date(_required(v, "date"))

    @field_validator("time", mode="before")
    @classmethod
    def check_time(cls, v):
        return normalize_time(v)

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return _one_of(v, APPOINTMENT_TYPES, "type")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return _one_of(v, APPOINTMENT_STATUSES, "status")

    @field_validator("notes", "room", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)


class MedicationRegistryForm(BaseModel):
    """Fields accepted when registering or editing a catalog medication."""

    name: str
    dosage: str
    route: str = "oral"
    unit_price: Decimal = Field(ge=0)
    stock_quantity: int = Field(ge=0)
    reorder_level: int = Field(DEFAULT_REORDER_LEVEL, ge=0)

    @field_validator("name", "dosage", mode="before")
    @classmethod
    def require_field(cls, v, info):
        return _required(v, info.field_name)

    @field_validator("route")
    @classmethod
    def check_route(cls, v):
        return _one_of(v, ROUTES, "route")

    @field_validator("unit_price", mode="before")
    @classmethod
    def parse_price(cls, v):
        """Accept "12.50" and "12,50"."""
        if isinstance(v, str):
            v = _required(v, "unit price").replace(",", ".")
        elif v is None:
            raise ValueError("unit price is required")
        return v

    @field_validator("stock_quantity", mode="before")
    @classmethod
    def parse_stock(cls, v):
        if isinstance(v, str):
            v = _required(v, "stock quantity")
        elif v is None:
            raise ValueError("stock quantity is required")
        return v

    @field_validator("reorder_level", mode="before")
    @classmethod
    def default_reorder_level(cls, v):
        """Blank or non-numeric reorder levels fall back to the default."""
        if v is None:
            return DEFAULT_REORDER_LEVEL
        if isinstance(v, str):
            v = v.strip()
            return int(v) if v.isdigit() else DEFAULT_REORDER_LEVEL
        return v


class AssignmentForm(BaseModel):
    """Fields accepted when assigning a catalog medication to a patient."""

    patient_id: str
    registry_id: str
    frequency: str
    instructions: str | None = None

    @field_validator("patient_id", "registry_id", "frequency", mode="before")
    @classmethod
    def require_field(cls, v, info):
        return _required(v, info.field_name.replace("_", " "))

    @field_validator("instructions", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)


class UserForm(BaseModel):
    """Fields accepted when creating a staff account."""

    name: str
    email: str
    role: str = "doctor"
    hospital_id: str = "hosp-001"
    department_id: str | None = None
    avatar: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def require_name(cls, v):
        return _required(v, "name")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        v = _required(v, "email").lower()
        if not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", v):
            raise ValueError("email address is not valid")
        return v

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return _one_of(v, USER_ROLES, "role")

    @field_validator("department_id", "avatar", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)


class StockForm(BaseModel):
    stock_quantity: int = Field(ge=0)

    @field_validator("stock_quantity", mode="before")
    @classmethod
    def parse_stock(cls, v):
        if isinstance(v, str):
            v = _required(v, "stock quantity")
        elif v is None:
            raise ValueError("stock quantity is required")
        return v


class SettingsForm(BaseModel):
    """Hospital settings as saved from the admin screen. Name and address are mandatory."""

    name: str
    address: str
    phone: str = ""
    email: str = ""
    website: str | None = None
    tax_id: str | None = None
    logo: str | None = None
    language: str

    @field_validator("name", "address", "language", mode="before")
    @classmethod
    def require_field(cls, v, info):
        return _required(v, info.field_name)

    @field_validator("phone", "email", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _optional(v) or ""

    @field_validator("website", "tax_id", "logo", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)


class VisitForm(BaseModel):
    """Fields accepted when recording a patient visit."""

    date: str
    time: str
    chief_complaint: str
    diagnosis: str
    treatment: str
    prescriptions: list[str] = Field(default_factory=list)
    notes: str | None = None
    category: str = "consultation"

    @field_validator("chief_complaint", "diagnosis", "treatment", mode="before")
    @classmethod
    def require_field(cls, v, info):
        return _required(v, info.field_name.replace("_", " "))

    @field_validator("date", mode="before")
    @classmethod
    def normalize_day(cls, v):
        return normalize_date(_required(v, "date"))

    @field_validator("time", mode="before")
    @classmethod
    def check_time(cls, v):
        return normalize_time(v)

    @field_validator("prescriptions", mode="before")
    @classmethod
    def split_prescriptions(cls, v):
        """Accept a comma-separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [p.strip() for p in v if p and p.strip()]

    @field_validator("notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _one_of(v, VISIT_CATEGORIES, "category")


class FileForm(BaseModel):
    """Fields accepted when attaching a file to a patient record."""

    name: str
    uri: str
    type: str = "document"
    category: str = "report"
    notes: str | None = None

    @field_validator("name", "uri", mode="before")
    @classmethod
    def require_field(cls, v, info):
        return _required(v, info.field_name)

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return _one_of(v, FILE_TYPES, "type")

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _one_of(v, FILE_CATEGORIES, "category")

    @field_validator("notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _optional(v)
