"""Derived views over store snapshots.

Every function here is pure: it reads the lists it is given, never mutates
them, and returns new lists or summary objects.
"""

import calendar
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from hospital_admin.store.models import (
    FILE_CATEGORIES,
    INVOICE_STATUSES,
    Appointment,
    EmergencyCase,
    Invoice,
    LabOrder,
    Medication,
    MedicationRegistryItem,
    Notification,
    Patient,
    PatientFile,
    PatientVisit,
    Task,
    User,
)

VIEW_MODES = ("day", "week", "month")
UNPAID_EXCLUDED = {"paid", "cancelled"}

TRIAGE_LABELS = {
    1: "Immediate",
    2: "Emergent",
    3: "Urgent",
    4: "Less Urgent",
    5: "Non-Urgent",
}


def parse_day(value: str) -> date:
    """Calendar date of an ISO date or timestamp string."""
    return date.fromisoformat(value[:10])


def _matches(query: str, *values) -> bool:
    return any(query in (v or "").lower() for v in values)


# Appointments

def date_window(reference: date, mode: str) -> tuple[date, date]:
    """Inclusive (start, end) window around a reference date.

    Weeks run Monday through Sunday; months run from the first to the last
    calendar day.
    """
    if mode == "day":
        return reference, reference
    if mode == "week":
        monday = reference - timedelta(days=reference.weekday())
        return monday, monday + timedelta(days=6)
    if mode == "month":
        last_day = calendar.monthrange(reference.year, reference.month)[1]
        return reference.replace(day=1), reference.replace(day=last_day)
    raise ValueError(f"Unknown view mode {mode!r}, expected one of {', '.join(VIEW_MODES)}")


def appointments_in_window(appointments: list[Appointment], reference: date, mode: str) -> list[Appointment]:
    start, end = date_window(reference, mode)
    return [a for a in appointments if start <= parse_day(a.date) <= end]


def appointments_on(appointments: list[Appointment], day: date) -> list[Appointment]:
    return appointments_in_window(appointments, day, "day")


def upcoming_appointments(appointments: list[Appointment], limit: int = 3) -> list[Appointment]:
    return [a for a in appointments if a.status in ("scheduled", "confirmed")][:limit]


# Patients and staff

def search_patients(patients: list[Patient], query: str = "", status: str = "all") -> list[Patient]:
    """Case-insensitive search on name, MRN and id, combined with a status filter."""
    query = query.strip().lower()
    return [
        p for p in patients
        if (status == "all" or p.status == status)
        and (not query or _matches(query, p.first_name, p.last_name, p.mrn, p.id))
    ]


def search_users(users: list[User], query: str = "") -> list[User]:
    query = query.strip().lower()
    return [u for u in users if not query or _matches(query, u.name, u.email)]


# Invoices

@dataclass
class InvoiceGroup:
    patient_id: str
    patient_name: str
    invoices: list[Invoice] = field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    unpaid_amount: Decimal = Decimal("0")


@dataclass
class MonthlyStats:
    paid_this_month: Decimal
    sent_this_month: Decimal
    overdue_total: Decimal
    draft_total: Decimal
    paid_last_month: Decimal
    percentage_change: float
    invoices_this_month: int


def filter_invoices(invoices: list[Invoice], status: str = "all", query: str = "") -> list[Invoice]:
    """Status filter AND case-insensitive search on invoice id and patient name."""
    query = query.strip().lower()
    return [
        inv for inv in invoices
        if (status == "all" or inv.status == status)
        and (not query or _matches(query, inv.id, inv.patient_name))
    ]


def group_invoices_by_patient(invoices: list[Invoice]) -> list[InvoiceGroup]:
    """Group by (patient id, patient name), newest invoice first in each group."""
    buckets: dict[tuple[str, str], list[Invoice]] = {}
    for invoice in invoices:
        buckets.setdefault((invoice.patient_id, invoice.patient_name), []).append(invoice)

    groups = []
    for (patient_id, patient_name), members in buckets.items():
        members = sorted(members, key=lambda inv: parse_day(inv.date), reverse=True)
        groups.append(InvoiceGroup(
            patient_id=patient_id,
            patient_name=patient_name,
            invoices=members,
            total_amount=_sum_totals(members),
            unpaid_amount=_sum_totals(inv for inv in members if inv.status not in UNPAID_EXCLUDED),
        ))
    return sorted(groups, key=lambda g: g.patient_name.lower())


def monthly_invoice_stats(invoices: list[Invoice], today: date | None = None) -> MonthlyStats:
    """Revenue figures for the current calendar month against the previous one."""
    today = today or date.today()
    this_month = (today.year, today.month)
    last = today.replace(day=1) - timedelta(days=1)
    last_month = (last.year, last.month)

    def in_month(inv: Invoice, month: tuple[int, int]) -> bool:
        day = parse_day(inv.date)
        return (day.year, day.month) == month

    this_month_invoices = [inv for inv in invoices if in_month(inv, this_month)]
    paid_this_month = _sum_totals(inv for inv in this_month_invoices if inv.status == "paid")
    paid_last_month = _sum_totals(
        inv for inv in invoices if in_month(inv, last_month) and inv.status == "paid"
    )

    if paid_last_month > 0:
        percentage_change = float((paid_this_month - paid_last_month) / paid_last_month * 100)
    else:
        percentage_change = 0.0

    return MonthlyStats(
        paid_this_month=paid_this_month,
        sent_this_month=_sum_totals(inv for inv in this_month_invoices if inv.status == "sent"),
        overdue_total=_sum_totals(inv for inv in invoices if inv.status == "overdue"),
        draft_total=_sum_totals(inv for inv in invoices if inv.status == "draft"),
        paid_last_month=paid_last_month,
        percentage_change=percentage_change,
        invoices_this_month=len(this_month_invoices),
    )


def invoice_status_counts(invoices: list[Invoice]) -> dict[str, int]:
    counts = Counter(inv.status for inv in invoices)
    return {"all": len(invoices), **{status: counts.get(status, 0) for status in INVOICE_STATUSES}}


def _sum_totals(invoices) -> Decimal:
    return sum((inv.total for inv in invoices), Decimal("0"))


# Clinical

def filter_lab_orders(orders: list[LabOrder], status: str = "all") -> list[LabOrder]:
    return [o for o in orders if status == "all" or o.status == status]


def active_medications(medications: list[Medication], patient_id: str | None = None) -> list[Medication]:
    return [
        m for m in medications
        if m.status == "active" and (patient_id is None or m.patient_id == patient_id)
    ]


def available_registry_items(registry: list[MedicationRegistryItem]) -> list[MedicationRegistryItem]:
    """Catalog entries that can still be assigned."""
    return [item for item in registry if item.stock_quantity > 0]


def triage_label(level: int) -> str:
    return TRIAGE_LABELS.get(level, "Unknown")


def emergency_queue(cases: list[EmergencyCase]) -> list[EmergencyCase]:
    """Most urgent first, then by arrival."""
    return sorted(cases, key=lambda c: (c.triage_level, c.arrival_time))


def emergency_counts(cases: list[EmergencyCase]) -> dict[str, int]:
    return {
        "total": len(cases),
        "waiting": sum(1 for c in cases if c.status == "waiting"),
        "in_treatment": sum(1 for c in cases if c.status == "in_treatment"),
    }


def pending_tasks(tasks: list[Task], limit: int | None = None) -> list[Task]:
    pending = [t for t in tasks if t.status == "pending"]
    return pending[:limit] if limit is not None else pending


def unread_notifications(notifications: list[Notification], user_id: str | None = None) -> list[Notification]:
    return [
        n for n in notifications
        if not n.read and (user_id is None or n.user_id == user_id)
    ]


# Patient record

def patient_visits(
    visits: list[PatientVisit], patient_id: str, category: str = "all"
) -> list[PatientVisit]:
    """A patient's visit history, newest first, optionally by category."""
    return sorted(
        (
            v for v in visits
            if v.patient_id == patient_id and (category == "all" or v.category == category)
        ),
        key=lambda v: (v.date, v.time),
        reverse=True,
    )


def patient_files_by_category(files: list[PatientFile], patient_id: str) -> dict[str, list[PatientFile]]:
    """A patient's files bucketed by category, every category present."""
    grouped = {category: [] for category in FILE_CATEGORIES}
    for f in files:
        if f.patient_id == patient_id:
            grouped.setdefault(f.category, []).append(f)
    return grouped


# Dashboard

@dataclass
class DashboardStats:
    total_patients: int
    todays_appointments: int
    active_medications: int
    pending_tasks: int


def dashboard_stats(store, today: date | None = None) -> DashboardStats:
    """Headline counts for the start screen."""
    today = today or date.today()
    return DashboardStats(
        total_patients=len(store.patients),
        todays_appointments=len(appointments_on(store.appointments.items, today)),
        active_medications=len(active_medications(store.medications.items)),
        pending_tasks=len(pending_tasks(store.tasks.items)),
    )
