"""Demo records the store starts with when seeding is enabled."""

from datetime import datetime
from decimal import Decimal

from hospital_admin.config import DEFAULT_LANGUAGE

from .models import (
    Appointment,
    EmergencyCase,
    EmergencyContact,
    HospitalSettings,
    Insurance,
    LabOrder,
    LabTest,
    Medication,
    MedicationRegistryItem,
    Notification,
    Patient,
    PatientVisit,
    Task,
    User,
    VitalSign,
)


def default_settings() -> HospitalSettings:
    return HospitalSettings(
        id="hosp-001",
        name="Klinikum Musterstadt",
        address="Musterstraße 123, 12345 Musterstadt",
        phone="+49 123 456789",
        email="info@klinikum-musterstadt.de",
        website="www.klinikum-musterstadt.de",
        tax_id="DE123456789",
        language=DEFAULT_LANGUAGE,
    )


def default_users() -> list[User]:
    """Staff accounts created on first start."""
    now = datetime.now().isoformat()
    return [
        User(
            id="1",
            name="Admin User",
            email="admin@hospital.com",
            role="superadmin",
            hospital_id="hosp-001",
            avatar="https://i.pravatar.cc/150?img=1",
            created_at=now,
        ),
        User(
            id="2",
            name="Dr. Sarah Johnson",
            email="doctor@hospital.com",
            role="doctor",
            hospital_id="hosp-001",
            department_id="dept-cardiology",
            avatar="https://i.pravatar.cc/150?img=2",
            created_at=now,
        ),
        User(
            id="3",
            name="Maria Schmidt",
            email="nurse@hospital.com",
            role="nurse",
            hospital_id="hosp-001",
            department_id="dept-cardiology",
            avatar="https://i.pravatar.cc/150?img=3",
            created_at=now,
        ),
    ]


MOCK_PATIENTS = [
    Patient(
        id="p1",
        mrn="MRN-001234",
        first_name="John",
        last_name="Doe",
        date_of_birth="1985-03-15",
        gender="male",
        blood_type="A+",
        allergies=["Penicillin", "Peanuts"],
        contact_number="+1-555-0123",
        status="admitted",
        admission_date="2025-10-10",
        insurance=Insurance(provider="Blue Cross", policy_number="BC-123456", valid_until="2026-12-31"),
        emergency_contact=EmergencyContact(name="Jane Doe", relationship="Spouse", phone="+1-555-0124"),
    ),
    Patient(
        id="p2",
        mrn="MRN-001235",
        first_name="Maria",
        last_name="Garcia",
        date_of_birth="1992-07-22",
        gender="female",
        blood_type="O-",
        contact_number="+1-555-0125",
        status="outpatient",
    ),
]

MOCK_APPOINTMENTS = [
    Appointment(
        id="apt1",
        patient_id="p1",
        patient_name="John Doe",
        doctor_id="d1",
        doctor_name="Dr. Sarah Johnson",
        date="2025-10-15",
        time="10:00",
        duration=30,
        type="consultation",
        status="scheduled",
        room="Room 301",
    ),
    Appointment(
        id="apt2",
        patient_id="p2",
        patient_name="Maria Garcia",
        doctor_id="d1",
        doctor_name="Dr. Sarah Johnson",
        date="2025-10-15",
        time="14:30",
        duration=45,
        type="follow_up",
        status="confirmed",
        room="Room 302",
    ),
]

MOCK_MEDICATIONS = [
    Medication(
        id="m1",
        patient_id="p1",
        name="Lisinopril",
        dosage="10mg",
        frequency="Once daily",
        route="oral",
        start_date="2025-10-10",
        prescribed_by="Dr. Sarah Johnson",
        instructions="Take in the morning with food",
    ),
]

MOCK_REGISTRY = [
    MedicationRegistryItem(id="med1", name="Aspirin", dosage="100mg", route="oral",
                           unit_price=Decimal("5.50"), stock_quantity=500, reorder_level=100),
    MedicationRegistryItem(id="med2", name="Ibuprofen", dosage="400mg", route="oral",
                           unit_price=Decimal("8.20"), stock_quantity=300, reorder_level=100),
    MedicationRegistryItem(id="med3", name="Paracetamol", dosage="500mg", route="oral",
                           unit_price=Decimal("4.75"), stock_quantity=450, reorder_level=100),
]

MOCK_LAB_ORDERS = [
    LabOrder(
        id="lab1",
        patient_id="p1",
        patient_name="John Doe",
        ordered_by="d1",
        ordered_by_name="Dr. Sarah Johnson",
        order_date="2025-10-14",
        priority="routine",
        status="processing",
        tests=[
            LabTest(id="t1", name="Complete Blood Count", code="CBC", category="Hematology"),
            LabTest(id="t2", name="Lipid Panel", code="LIPID", category="Chemistry"),
        ],
    ),
]

MOCK_EMERGENCY_CASES = [
    EmergencyCase(
        id="em1",
        patient_id="p3",
        patient_name="Robert Smith",
        arrival_time="2025-10-15T08:30:00",
        chief_complaint="Chest pain",
        triage_level=2,
        triage_color="orange",
        status="in_treatment",
        location="ER Bay 3",
        vital_signs=VitalSign(
            id="vs1",
            patient_id="p3",
            timestamp="2025-10-15T08:35:00",
            recorded_by="Nurse Williams",
            temperature=37.2,
            blood_pressure_systolic=145,
            blood_pressure_diastolic=92,
            heart_rate=98,
            respiratory_rate=18,
            oxygen_saturation=96,
        ),
    ),
]

MOCK_TASKS = [
    Task(
        id="task1",
        title="Review lab results for John Doe",
        assigned_to="d1",
        assigned_by="system",
        due_date="2025-10-15T16:00:00",
        priority="high",
        status="pending",
        category="Lab Review",
        patient_id="p1",
    ),
]

MOCK_NOTIFICATIONS = [
    Notification(
        id="n1",
        user_id="d1",
        title="Critical Lab Result",
        message="Patient John Doe has abnormal lab values requiring immediate attention",
        type="warning",
        timestamp="2025-10-15T09:00:00",
    ),
]

MOCK_VISITS = [
    PatientVisit(
        id="v1",
        patient_id="p1",
        date="2025-10-12",
        time="10:30",
        doctor_id="d1",
        doctor_name="Dr. Sarah Johnson",
        chief_complaint="Chronic back pain",
        diagnosis="Lumbar spondylosis",
        treatment="Physiotherapy recommended, pain medication",
        prescriptions=["Ibuprofen 400mg", "Physiotherapy 10x"],
        notes="Good compliance, follow-up in 4 weeks",
    ),
]
