"""Domain entities held by the hospital store."""

from dataclasses import asdict, dataclass, field, fields
from decimal import Decimal

PATIENT_STATUSES = ("admitted", "outpatient", "discharged", "emergency")
GENDERS = ("male", "female", "other")
APPOINTMENT_TYPES = ("consultation", "follow_up", "procedure", "emergency")
APPOINTMENT_STATUSES = ("scheduled", "confirmed", "in_progress", "completed", "cancelled")
ROUTES = ("oral", "iv", "im", "topical", "other")
MEDICATION_STATUSES = ("active", "completed", "discontinued")
INVOICE_STATUSES = ("draft", "sent", "paid", "overdue", "cancelled")
LAB_ORDER_STATUSES = ("ordered", "collected", "processing", "completed", "cancelled")
TASK_STATUSES = ("pending", "in_progress", "completed", "cancelled")
EMERGENCY_STATUSES = ("waiting", "in_treatment", "admitted", "discharged")
VISIT_CATEGORIES = ("consultation", "follow_up", "emergency", "procedure")
FILE_CATEGORIES = ("report", "lab", "imaging", "prescription", "other")
FILE_TYPES = ("document", "image")
USER_ROLES = (
    "superadmin", "hospital_admin", "doctor", "nurse", "pharmacist",
    "lab_technician", "radiologist", "or_staff", "emergency", "billing",
    "reception", "patient",
)


@dataclass
class Insurance:
    provider: str
    policy_number: str
    valid_until: str


@dataclass
class EmergencyContact:
    name: str
    relationship: str
    phone: str


@dataclass
class Patient:
    id: str
    mrn: str
    first_name: str
    last_name: str
    date_of_birth: str
    gender: str = "other"
    contact_number: str = ""
    blood_type: str | None = None
    allergies: list[str] = field(default_factory=list)
    status: str = "outpatient"
    admission_date: str | None = None
    insurance: Insurance | None = None
    emergency_contact: EmergencyContact | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class Appointment:
    id: str
    patient_id: str
    patient_name: str
    doctor_id: str
    doctor_name: str
    date: str
    time: str
    duration: int = 30
    type: str = "consultation"
    status: str = "scheduled"
    notes: str | None = None
    room: str | None = None


@dataclass
class MedicationRegistryItem:
    """Catalog entry; status is derived from stock and reorder level."""
    id: str
    name: str
    dosage: str
    route: str
    unit_price: Decimal
    stock_quantity: int
    reorder_level: int = 100
    status: str = "available"


@dataclass
class Medication:
    """A prescription assigned to a patient."""
    id: str
    patient_id: str
    name: str
    dosage: str
    frequency: str
    route: str
    start_date: str
    prescribed_by: str
    registry_id: str | None = None
    end_date: str | None = None
    status: str = "active"
    instructions: str | None = None


@dataclass
class LabTest:
    id: str
    name: str
    code: str
    category: str
    result: str | None = None
    unit: str | None = None
    reference_range: str | None = None
    status: str = "pending"


@dataclass
class LabOrder:
    id: str
    patient_id: str
    patient_name: str
    ordered_by: str
    ordered_by_name: str
    order_date: str
    tests: list[LabTest] = field(default_factory=list)
    priority: str = "routine"
    status: str = "ordered"
    notes: str | None = None


@dataclass
class VitalSign:
    id: str
    patient_id: str
    timestamp: str
    recorded_by: str
    temperature: float | None = None
    blood_pressure_systolic: int | None = None
    blood_pressure_diastolic: int | None = None
    heart_rate: int | None = None
    respiratory_rate: int | None = None
    oxygen_saturation: int | None = None


@dataclass
class EmergencyCase:
    id: str
    patient_id: str
    patient_name: str
    arrival_time: str
    chief_complaint: str
    triage_level: int
    triage_color: str
    vital_signs: VitalSign | None = None
    assigned_to: str | None = None
    status: str = "waiting"
    location: str | None = None


@dataclass
class Task:
    id: str
    title: str
    assigned_to: str
    assigned_by: str
    due_date: str
    category: str
    priority: str = "medium"
    status: str = "pending"
    description: str | None = None
    patient_id: str | None = None


@dataclass
class Notification:
    id: str
    user_id: str
    title: str
    message: str
    timestamp: str
    type: str = "info"
    read: bool = False
    action_url: str | None = None


@dataclass
class InvoiceItem:
    id: str
    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    code: str | None = None
    medication_id: str | None = None


@dataclass
class Invoice:
    id: str
    patient_id: str
    patient_name: str
    date: str
    due_date: str
    items: list[InvoiceItem]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    status: str = "draft"
    payment_method: str | None = None
    type: str | None = None
    notes: str | None = None


@dataclass
class PatientVisit:
    id: str
    patient_id: str
    date: str
    time: str
    doctor_id: str
    doctor_name: str
    chief_complaint: str
    diagnosis: str | None = None
    treatment: str | None = None
    prescriptions: list[str] = field(default_factory=list)
    notes: str | None = None
    category: str = "consultation"


@dataclass
class PatientFile:
    id: str
    patient_id: str
    name: str
    type: str
    uri: str
    uploaded_at: str
    uploaded_by: str | None = None
    category: str = "report"
    notes: str | None = None


@dataclass
class HospitalSettings:
    id: str
    name: str
    address: str
    phone: str
    email: str
    website: str | None = None
    tax_id: str | None = None
    logo: str | None = None
    language: str = "de"


@dataclass
class User:
    id: str
    name: str
    email: str
    role: str
    hospital_id: str
    is_active: bool = True
    created_at: str | None = None
    department_id: str | None = None
    avatar: str | None = None
    last_login: str | None = None


def field_names(cls) -> set[str]:
    """Names of the dataclass fields of an entity class."""
    return {f.name for f in fields(cls)}


def to_dict(entity) -> dict:
    """Convert an entity to a JSON-friendly dict."""
    return asdict(entity)


def from_dict(cls, data: dict):
    """Build a flat entity from a stored dict, ignoring unknown keys."""
    known = field_names(cls)
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class Result:
    """Outcome of a validating store command."""
    success: bool
    error: str | None = None
    value: object | None = None

    @classmethod
    def ok(cls, value=None) -> "Result":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> "Result":
        return cls(success=False, error=error)
