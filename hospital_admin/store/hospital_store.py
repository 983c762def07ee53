"""Hospital domain store: entity collections plus persisted hospital settings."""

import copy
import dataclasses
import logging
import uuid
from datetime import date, datetime

from pydantic import ValidationError

from hospital_admin.forms import (
    AppointmentForm,
    AssignmentForm,
    FileForm,
    MedicationRegistryForm,
    PatientForm,
    SettingsForm,
    StockForm,
    VisitForm,
    form_error,
)
from hospital_admin.money import to_decimal, with_invoice_totals
from hospital_admin.storage import LocalStorage, StorageError
from hospital_admin.storage.schema import LANGUAGE_KEY, SETTINGS_KEY

from . import seed
from .collection import EntityCollection
from .models import (
    TASK_STATUSES,
    Appointment,
    EmergencyContact,
    HospitalSettings,
    Insurance,
    Medication,
    MedicationRegistryItem,
    Patient,
    PatientFile,
    PatientVisit,
    Result,
    field_names,
    to_dict,
)

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    """Collision-free entity id."""
    return f"{prefix}-{uuid.uuid4().hex}"


def stock_status(stock_quantity: int, reorder_level: int) -> str:
    """Classify a catalog item by its stock against the reorder level."""
    if stock_quantity <= 0:
        return "out_of_stock"
    if stock_quantity <= reorder_level:
        return "low_stock"
    return "available"


def with_stock_status(item: MedicationRegistryItem) -> MedicationRegistryItem:
    """Return the item with numeric fields coerced and its status recomputed."""
    stock_quantity = int(item.stock_quantity)
    reorder_level = int(item.reorder_level)
    return dataclasses.replace(
        item,
        unit_price=to_decimal(item.unit_price),
        stock_quantity=stock_quantity,
        reorder_level=reorder_level,
        status=stock_status(stock_quantity, reorder_level),
    )


class HospitalStore:
    """Single source of truth for all hospital entity collections.

    Construct once per process and pass it to whatever needs it. Hospital
    settings are written through to local storage: memory is updated first
    and the durable write happens in the same call. A failed write is logged
    and memory stays authoritative for the session.
    """

    def __init__(self, storage: LocalStorage, seed_data: bool = False):
        self.storage = storage

        def initial(records):
            return copy.deepcopy(records) if seed_data else []

        self.patients: EntityCollection[Patient] = EntityCollection("patient", initial(seed.MOCK_PATIENTS))
        self.appointments: EntityCollection[Appointment] = EntityCollection(
            "appointment", initial(seed.MOCK_APPOINTMENTS)
        )
        self.medications: EntityCollection[Medication] = EntityCollection(
            "medication", initial(seed.MOCK_MEDICATIONS)
        )
        self.medication_registry: EntityCollection[MedicationRegistryItem] = EntityCollection(
            "registry item", initial(seed.MOCK_REGISTRY), normalize=with_stock_status
        )
        self.lab_orders = EntityCollection("lab order", initial(seed.MOCK_LAB_ORDERS))
        self.emergency_cases = EntityCollection("emergency case", initial(seed.MOCK_EMERGENCY_CASES))
        self.tasks = EntityCollection("task", initial(seed.MOCK_TASKS))
        self.notifications = EntityCollection("notification", initial(seed.MOCK_NOTIFICATIONS))
        self.invoices = EntityCollection("invoice", normalize=with_invoice_totals)
        self.visits = EntityCollection("visit", initial(seed.MOCK_VISITS))
        self.files = EntityCollection("patient file")

        self.hospital_settings = self._load_settings()

    # Settings

    def update_hospital_settings(self, changes: dict) -> Result:
        """Merge changes into the settings singleton and persist it.

        The merged settings are validated first; a blank name or address is
        rejected and the current settings stay as they are.
        """
        known = field_names(HospitalSettings) - {"id"}
        merged = {**to_dict(self.hospital_settings), **{k: v for k, v in changes.items() if k in known}}
        try:
            form = SettingsForm(**merged)
        except ValidationError as e:
            return Result.fail(form_error(e))

        logger.info("Updating hospital settings: %s", sorted(set(changes) & known))
        self.hospital_settings = HospitalSettings(id=self.hospital_settings.id, **form.model_dump())
        if self._persist(SETTINGS_KEY, to_dict(self.hospital_settings)):
            logger.debug("Hospital settings saved")
        return Result.ok(self.hospital_settings)

    def set_language(self, language: str) -> Result:
        """Switch the interface language and remember it separately."""
        result = self.update_hospital_settings({"language": language})
        if result.success:
            self._persist(LANGUAGE_KEY, self.hospital_settings.language)
        return result

    # Validating commands

    def create_patient(self, data: dict) -> Result:
        """Validate and register a new patient."""
        try:
            form = PatientForm(**data)
        except ValidationError as e:
            return Result.fail(form_error(e))

        patient = Patient(
            id=new_id("p"),
            mrn=form.mrn or f"MRN-{uuid.uuid4().hex[:8].upper()}",
            first_name=form.first_name,
            last_name=form.last_name,
            date_of_birth=form.date_of_birth,
            gender=form.gender,
            contact_number=form.contact_number,
            blood_type=form.blood_type,
            allergies=form.allergies,
            status=form.status,
            admission_date=form.admission_date,
            insurance=Insurance(**form.insurance.model_dump()) if form.insurance else None,
            emergency_contact=(
                EmergencyContact(**form.emergency_contact.model_dump()) if form.emergency_contact else None
            ),
        )
        logger.info("Registering patient %s", patient.mrn)
        return Result.ok(self.patients.add(patient))

    def schedule_appointment(self, data: dict) -> Result:
        """Validate and book an appointment, snapshotting the patient's name."""
        try:
            form = AppointmentForm(**data)
        except ValidationError as e:
            return Result.fail(form_error(e))

        patient = self.patients.get(form.patient_id)
        if not patient:
            return Result.fail("Patient not found")

        appointment = Appointment(
            id=new_id("apt"),
            patient_name=patient.display_name,
            **form.model_dump(),
        )
        return Result.ok(self.appointments.add(appointment))

    def register_medication(self, data: dict) -> Result:
        """Validate and add a catalog medication."""
        try:
            form = MedicationRegistryForm(**data)
        except ValidationError as e:
            return Result.fail(form_error(e))

        item = MedicationRegistryItem(id=new_id("med"), **form.model_dump())
        logger.info("Registering medication %s %s", item.name, item.dosage)
        return Result.ok(self.medication_registry.add(item))

    def edit_registry_item(self, item_id: str, data: dict) -> Result:
        """Validate and replace a catalog medication's editable fields.

        An unknown id leaves the registry unchanged and yields no value.
        """
        try:
            form = MedicationRegistryForm(**data)
        except ValidationError as e:
            return Result.fail(form_error(e))
        return Result.ok(self.medication_registry.update(item_id, form.model_dump()))

    def update_stock(self, item_id: str, stock_quantity) -> Result:
        """Set a catalog medication's stock; the status follows."""
        try:
            form = StockForm(stock_quantity=stock_quantity)
        except ValidationError as e:
            return Result.fail(form_error(e))
        return Result.ok(self.medication_registry.update(item_id, form.model_dump()))

    def assign_medication(
        self,
        patient_id: str,
        registry_id: str,
        frequency: str,
        instructions: str | None = None,
        prescribed_by: str = "Current User",
    ) -> Result:
        """Prescribe a catalog medication, taking one unit from stock."""
        try:
            form = AssignmentForm(
                patient_id=patient_id,
                registry_id=registry_id,
                frequency=frequency,
                instructions=instructions,
            )
        except ValidationError as e:
            return Result.fail(form_error(e))

        if not self.patients.get(form.patient_id):
            return Result.fail("Patient not found")

        item = self.medication_registry.get(form.registry_id)
        if not item:
            return Result.fail("Medication not found in registry")
        if item.stock_quantity <= 0:
            return Result.fail("Medication out of stock")

        medication = Medication(
            id=new_id("m"),
            patient_id=form.patient_id,
            registry_id=item.id,
            name=item.name,
            dosage=item.dosage,
            frequency=form.frequency,
            route=item.route,
            start_date=datetime.now().isoformat(),
            prescribed_by=prescribed_by,
            instructions=form.instructions,
        )
        self.medications.add(medication)
        updated = self.medication_registry.update(item.id, {"stock_quantity": item.stock_quantity - 1})
        logger.info(
            "Assigned %s to patient %s, stock now %d (%s)",
            item.name, form.patient_id, updated.stock_quantity, updated.status,
        )
        return Result.ok(medication)

    def add_visit(self, patient_id: str, data: dict, doctor_id: str = "", doctor_name: str = "") -> Result:
        """Record a visit in a patient's history. Date and time default to now."""
        if not self.patients.get(patient_id):
            return Result.fail("Patient not found")

        now = datetime.now()
        try:
            form = VisitForm(**{"date": date.today().isoformat(), "time": now.strftime("%H:%M"), **data})
        except ValidationError as e:
            return Result.fail(form_error(e))

        visit = PatientVisit(
            id=new_id("v"),
            patient_id=patient_id,
            doctor_id=doctor_id,
            doctor_name=doctor_name,
            **form.model_dump(),
        )
        logger.info("Recorded %s visit for patient %s", visit.category, patient_id)
        return Result.ok(self.visits.add(visit))

    def add_file(self, patient_id: str, data: dict, uploaded_by: str | None = None) -> Result:
        """Attach an uploaded document or image to a patient record."""
        if not self.patients.get(patient_id):
            return Result.fail("Patient not found")

        try:
            form = FileForm(**data)
        except ValidationError as e:
            return Result.fail(form_error(e))

        patient_file = PatientFile(
            id=new_id("f"),
            patient_id=patient_id,
            uploaded_at=datetime.now().isoformat(),
            uploaded_by=uploaded_by,
            **form.model_dump(),
        )
        logger.info("Attached %s file to patient %s", patient_file.category, patient_id)
        return Result.ok(self.files.add(patient_file))

    def mark_notification_read(self, notification_id: str):
        return self.notifications.update(notification_id, {"read": True})

    def update_task_status(self, task_id: str, status: str) -> Result:
        if status not in TASK_STATUSES:
            return Result.fail(f"status must be one of {', '.join(TASK_STATUSES)}")
        return Result.ok(self.tasks.update(task_id, {"status": status}))

    # Persistence

    def _load_settings(self) -> HospitalSettings:
        """Load stored settings, falling back to defaults on any problem."""
        defaults = seed.default_settings()
        stored = self.storage.read_json(
            SETTINGS_KEY, validate=lambda d: isinstance(d, dict) and bool(d.get("id"))
        )
        if stored is None:
            logger.info("No stored hospital settings, using defaults")
            settings = defaults
        else:
            known = field_names(HospitalSettings)
            settings = HospitalSettings(
                **{**to_dict(defaults), **{k: v for k, v in stored.items() if k in known}}
            )
            logger.info("Hospital settings loaded")

        language = self.storage.read_json(LANGUAGE_KEY, validate=lambda v: isinstance(v, str) and bool(v))
        if language:
            settings.language = language
        return settings

    def _persist(self, key: str, data) -> bool:
        try:
            self.storage.write_json(key, data)
        except StorageError:
            logger.exception("Failed to save %s", key)
            return False
        return True
