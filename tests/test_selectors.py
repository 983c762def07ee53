"""Tests for derived views."""

from datetime import date
from decimal import Decimal

import pytest

from hospital_admin import selectors
from hospital_admin.billing import build_invoice, make_line_item
from hospital_admin.store.models import Appointment, Invoice, PatientFile, PatientVisit


def appointment(apt_id, day, status="scheduled"):
    return Appointment(
        id=apt_id, patient_id="p1", patient_name="John Doe", doctor_id="d1",
        doctor_name="Dr. Sarah Johnson", date=day, time="09:00", status=status,
    )


def visit(visit_id, day, time="10:00", category="consultation", patient_id="p1"):
    return PatientVisit(
        id=visit_id, patient_id=patient_id, date=day, time=time, doctor_id="d1",
        doctor_name="Dr. Sarah Johnson", chief_complaint="Check-up", category=category,
    )


def invoice(inv_id, patient_id, patient_name, day, total, status="draft"):
    total = Decimal(total)
    return Invoice(
        id=inv_id, patient_id=patient_id, patient_name=patient_name, date=day,
        due_date=day, items=[], subtotal=total, tax=Decimal("0"), total=total, status=status,
    )


class TestDateWindow:
    """Tests for day/week/month windows."""

    def test_day(self):
        assert selectors.date_window(date(2025, 10, 15), "day") == (date(2025, 10, 15), date(2025, 10, 15))

    def test_week_runs_monday_to_sunday(self):
        # 2025-10-15 is a Wednesday
        assert selectors.date_window(date(2025, 10, 15), "week") == (date(2025, 10, 13), date(2025, 10, 19))

    def test_week_from_sunday(self):
        assert selectors.date_window(date(2025, 10, 19), "week") == (date(2025, 10, 13), date(2025, 10, 19))

    def test_month(self):
        assert selectors.date_window(date(2024, 2, 10), "month") == (date(2024, 2, 1), date(2024, 2, 29))

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            selectors.date_window(date(2025, 10, 15), "year")


class TestAppointmentViews:
    """Tests for appointment filters."""

    @pytest.fixture
    def appointments(self):
        return [
            appointment("a1", "2025-10-12"),
            appointment("a2", "2025-10-13"),
            appointment("a3", "2025-10-15", status="cancelled"),
            appointment("a4", "2025-10-19T14:00:00"),
            appointment("a5", "2025-10-20", status="confirmed"),
        ]

    def test_week_view(self, appointments):
        result = selectors.appointments_in_window(appointments, date(2025, 10, 15), "week")
        assert [a.id for a in result] == ["a2", "a3", "a4"]

    def test_month_view(self, appointments):
        assert len(selectors.appointments_in_window(appointments, date(2025, 10, 1), "month")) == 5

    def test_appointments_on(self, appointments):
        assert [a.id for a in selectors.appointments_on(appointments, date(2025, 10, 19))] == ["a4"]

    def test_upcoming_skips_cancelled(self, appointments):
        assert [a.id for a in selectors.upcoming_appointments(appointments)] == ["a1", "a2", "a4"]

    def test_views_do_not_mutate_input(self, appointments):
        before = list(appointments)
        selectors.appointments_in_window(appointments, date(2025, 10, 15), "week")
        assert appointments == before


class TestSearch:
    """Tests for patient and user search."""

    def test_search_by_name_case_insensitive(self, store):
        assert [p.id for p in selectors.search_patients(store.patients.items, "maria")] == ["p2"]

    def test_search_by_mrn(self, store):
        assert [p.id for p in selectors.search_patients(store.patients.items, "mrn-001234")] == ["p1"]

    def test_search_and_status_combine(self, store):
        assert selectors.search_patients(store.patients.items, "john", status="outpatient") == []
        assert len(selectors.search_patients(store.patients.items, "john", status="admitted")) == 1

    def test_empty_query_returns_all(self, store):
        assert len(selectors.search_patients(store.patients.items)) == 2

    def test_search_users(self, directory):
        assert [u.id for u in selectors.search_users(directory.users.items, "NURSE@")] == ["3"]


class TestInvoiceViews:
    """Tests for invoice grouping and statistics."""

    @pytest.fixture
    def invoices(self):
        return [
            invoice("inv-1", "p2", "Maria Garcia", "2025-10-02", "100.00", "paid"),
            invoice("inv-2", "p1", "John Doe", "2025-10-05", "50.00", "sent"),
            invoice("inv-3", "p1", "John Doe", "2025-10-09", "20.00", "paid"),
            invoice("inv-4", "p1", "John Doe", "2025-09-20", "40.00", "paid"),
            invoice("inv-5", "p2", "Maria Garcia", "2025-08-01", "30.00", "overdue"),
            invoice("inv-6", "p2", "Maria Garcia", "2025-10-11", "15.00", "draft"),
            invoice("inv-7", "p1", "John Doe", "2025-10-12", "5.00", "cancelled"),
        ]

    def test_filter_by_status_and_query(self, invoices):
        result = selectors.filter_invoices(invoices, status="paid", query="john")
        assert [inv.id for inv in result] == ["inv-3", "inv-4"]

    def test_filter_by_invoice_id(self, invoices):
        assert [inv.id for inv in selectors.filter_invoices(invoices, query="INV-5")] == ["inv-5"]

    def test_grouping(self, invoices):
        groups = selectors.group_invoices_by_patient(invoices)
        assert [g.patient_name for g in groups] == ["John Doe", "Maria Garcia"]

        john = groups[0]
        assert [inv.id for inv in john.invoices] == ["inv-7", "inv-3", "inv-2", "inv-4"]
        assert john.total_amount == Decimal("115.00")
        assert john.unpaid_amount == Decimal("50.00")

        maria = groups[1]
        assert maria.unpaid_amount == Decimal("45.00")

    def test_grouping_keeps_every_invoice(self, invoices):
        groups = selectors.group_invoices_by_patient(invoices)
        regrouped = sorted(inv.id for g in groups for inv in g.invoices)
        assert regrouped == sorted(inv.id for inv in invoices)

    def test_monthly_stats(self, invoices):
        stats = selectors.monthly_invoice_stats(invoices, today=date(2025, 10, 20))
        assert stats.paid_this_month == Decimal("120.00")
        assert stats.sent_this_month == Decimal("50.00")
        assert stats.overdue_total == Decimal("30.00")
        assert stats.draft_total == Decimal("15.00")
        assert stats.paid_last_month == Decimal("40.00")
        assert stats.percentage_change == pytest.approx(200.0)
        assert stats.invoices_this_month == 5

    def test_monthly_stats_without_last_month(self, invoices):
        stats = selectors.monthly_invoice_stats(invoices, today=date(2025, 12, 3))
        assert stats.paid_this_month == Decimal("0")
        assert stats.paid_last_month == Decimal("0")
        assert stats.percentage_change == 0.0

    def test_monthly_stats_in_january(self):
        invoices = [invoice("inv-1", "p1", "John Doe", "2024-12-15", "10.00", "paid")]
        stats = selectors.monthly_invoice_stats(invoices, today=date(2025, 1, 5))
        assert stats.paid_last_month == Decimal("10.00")
        assert stats.percentage_change == pytest.approx(-100.0)

    def test_status_counts(self, invoices):
        counts = selectors.invoice_status_counts(invoices)
        assert counts == {"all": 7, "draft": 1, "sent": 1, "paid": 3, "overdue": 1, "cancelled": 1}

    def test_built_invoices_group_by_patient(self):
        items = [make_line_item("Aspirin - 100mg", "5.50")]
        first = build_invoice("p1", "John Doe", items, issued=date(2025, 10, 1))
        second = build_invoice("p1", "John Doe", items, issued=date(2025, 10, 3))
        [group] = selectors.group_invoices_by_patient([first, second])
        assert group.invoices == [second, first]


class TestClinicalViews:
    """Tests for medication, emergency and task views."""

    def test_active_medications_for_patient(self, store):
        assert [m.id for m in selectors.active_medications(store.medications.items, "p1")] == ["m1"]
        assert selectors.active_medications(store.medications.items, "p2") == []

    def test_available_registry_items(self, store):
        store.medication_registry.update("med2", {"stock_quantity": 0})
        available = selectors.available_registry_items(store.medication_registry.items)
        assert [item.id for item in available] == ["med1", "med3"]

    def test_triage_label(self):
        assert selectors.triage_label(1) == "Immediate"
        assert selectors.triage_label(9) == "Unknown"

    def test_emergency_queue_orders_by_triage(self, store):
        queue = selectors.emergency_queue(store.emergency_cases.items)
        assert queue[0].id == "em1"
        assert selectors.emergency_counts(queue)["in_treatment"] == 1

    def test_pending_tasks_limit(self, store):
        assert len(selectors.pending_tasks(store.tasks.items, limit=0)) == 0
        assert [t.id for t in selectors.pending_tasks(store.tasks.items)] == ["task1"]

    def test_unread_notifications(self, store):
        assert len(selectors.unread_notifications(store.notifications.items, "d1")) == 1
        store.mark_notification_read("n1")
        assert selectors.unread_notifications(store.notifications.items) == []

    def test_dashboard_stats(self, store):
        stats = selectors.dashboard_stats(store, today=date(2025, 10, 15))
        assert stats.total_patients == 2
        assert stats.todays_appointments == 2
        assert stats.active_medications == 1
        assert stats.pending_tasks == 1


class TestPatientRecord:
    """Tests for visit history and file grouping."""

    def test_visits_newest_first(self):
        visits = [
            visit("a", "2025-10-01"),
            visit("b", "2025-10-12", "08:00"),
            visit("c", "2025-10-12", "14:30"),
            visit("d", "2025-10-20", patient_id="p2"),
        ]
        assert [v.id for v in selectors.patient_visits(visits, "p1")] == ["c", "b", "a"]

    def test_visits_by_category(self):
        visits = [visit("a", "2025-10-01", category="emergency"), visit("b", "2025-10-02")]
        assert [v.id for v in selectors.patient_visits(visits, "p1", "emergency")] == ["a"]
        assert selectors.patient_visits(visits, "p1", "procedure") == []

    def test_recorded_visit_appears_first(self, store):
        store.add_visit("p1", {
            "date": "2025-10-20", "chief_complaint": "Back pain", "diagnosis": "Strain", "treatment": "Rest",
        })
        history = selectors.patient_visits(store.visits.items, "p1")
        assert history[0].chief_complaint == "Back pain"
        assert history[1].id == "v1"

    def test_files_grouped_by_category(self):
        files = [
            PatientFile(id="f1", patient_id="p1", name="ct.png", type="image", uri="file:///ct.png",
                        uploaded_at="2025-10-12T10:00:00", category="imaging"),
            PatientFile(id="f2", patient_id="p1", name="blood.pdf", type="document", uri="file:///b.pdf",
                        uploaded_at="2025-10-12T11:00:00", category="lab"),
            PatientFile(id="f3", patient_id="p2", name="other.pdf", type="document", uri="file:///o.pdf",
                        uploaded_at="2025-10-12T12:00:00", category="lab"),
        ]
        grouped = selectors.patient_files_by_category(files, "p1")

        assert list(grouped) == ["report", "lab", "imaging", "prescription", "other"]
        assert [f.id for f in grouped["lab"]] == ["f2"]
        assert [f.id for f in grouped["imaging"]] == ["f1"]
        assert grouped["report"] == []
