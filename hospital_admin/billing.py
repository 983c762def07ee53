"""Medication billing: invoice creation and HTML rendering."""

import logging
from datetime import date, datetime, timedelta

from jinja2 import Environment, PackageLoader, select_autoescape

from hospital_admin.money import (
    VAT_RATE,
    compute_totals,
    line_total,
    round_money,
    to_decimal,
)
from hospital_admin.store.hospital_store import HospitalStore, new_id
from hospital_admin.store.models import (
    HospitalSettings,
    Invoice,
    InvoiceItem,
    Medication,
    MedicationRegistryItem,
    Patient,
    Result,
)

logger = logging.getLogger(__name__)

PAYMENT_TERM_DAYS = 30

templates = Environment(
    loader=PackageLoader("hospital_admin", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def make_line_item(
    description: str,
    unit_price,
    quantity: int = 1,
    code: str | None = None,
    medication_id: str | None = None,
) -> InvoiceItem:
    """Build an invoice line; its total is rounded to cents."""
    unit_price = to_decimal(unit_price)
    return InvoiceItem(
        id=new_id("item"),
        description=description,
        code=code,
        quantity=quantity,
        unit_price=unit_price,
        total=line_total(unit_price, quantity),
        medication_id=medication_id,
    )


def build_invoice(
    patient_id: str,
    patient_name: str,
    items: list[InvoiceItem],
    issued: date | None = None,
    invoice_type: str | None = None,
    notes: str | None = None,
) -> Invoice:
    """Create a draft invoice due thirty days after issue."""
    issued = issued or date.today()
    subtotal, tax, total = compute_totals(items)
    return Invoice(
        id=new_id("inv"),
        patient_id=patient_id,
        patient_name=patient_name,
        date=issued.isoformat(),
        due_date=(issued + timedelta(days=PAYMENT_TERM_DAYS)).isoformat(),
        items=list(items),
        subtotal=subtotal,
        tax=tax,
        total=total,
        status="draft",
        type=invoice_type,
        notes=notes,
    )


def find_registry_entry(
    registry: list[MedicationRegistryItem], medication: Medication
) -> MedicationRegistryItem | None:
    """Find the catalog entry backing a prescription.

    Prescriptions keep the catalog id they were assigned from; older ones are
    matched on name and dosage.
    """
    for item in registry:
        if medication.registry_id and item.id == medication.registry_id:
            return item
    if medication.registry_id:
        return None
    for item in registry:
        if item.name == medication.name and item.dosage == medication.dosage:
            return item
    return None


def create_medication_invoice(
    store: HospitalStore,
    patient_id: str,
    medication_ids: list[str],
    issued: date | None = None,
) -> Result:
    """Bill a patient's active medications and add the invoice to the store.

    Ids that do not resolve to an active medication of this patient, or whose
    catalog entry is gone, are skipped. Stock is not touched.
    """
    if not patient_id or not medication_ids:
        return Result.fail("Select a patient and at least one medication")

    patient = store.patients.get(patient_id)
    if not patient:
        return Result.fail("Patient not found")

    registry = store.medication_registry.items
    items = []
    for medication_id in medication_ids:
        medication = store.medications.get(medication_id)
        if not medication or medication.patient_id != patient_id or medication.status != "active":
            logger.debug("Skipping medication %s: not an active prescription of %s", medication_id, patient_id)
            continue
        entry = find_registry_entry(registry, medication)
        if not entry:
            logger.debug("Skipping medication %s: no registry entry", medication_id)
            continue
        items.append(make_line_item(
            description=f"{medication.name} - {medication.dosage}",
            unit_price=entry.unit_price,
            quantity=1,
            code=entry.id,
            medication_id=medication.id,
        ))

    if not items:
        return Result.fail("None of the selected medications can be billed")

    invoice = build_invoice(patient.id, patient.display_name, items, issued=issued, invoice_type="medication")
    store.invoices.add(invoice)
    logger.info("Created invoice %s for %s: total %s", invoice.id, invoice.patient_name, invoice.total)
    return Result.ok(invoice)


def format_date(value: str | None) -> str:
    """Render an ISO date as DD.MM.YYYY."""
    if not value:
        return "N/A"
    try:
        return datetime.fromisoformat(value).strftime("%d.%m.%Y")
    except ValueError:
        return value


def format_money(value) -> str:
    return f"€{round_money(value):.2f}"


templates.filters["date"] = format_date
templates.filters["money"] = format_money


def render_invoice_html(
    invoice: Invoice,
    settings: HospitalSettings,
    patient: Patient | None = None,
) -> str:
    """Render a printable HTML invoice. Values are autoescaped by the template."""
    template = templates.get_template("invoice.html")
    return template.render(
        invoice=invoice,
        settings=settings,
        patient=patient,
        vat_percent=int(VAT_RATE * 100),
    )
