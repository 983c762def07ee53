"""Operator console for the hospital admin store."""

import logging
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.status import Status
from rich.table import Table

from hospital_admin import selectors
from hospital_admin.auth_client import AuthClient
from hospital_admin.auth_store import AuthStore
from hospital_admin.billing import create_medication_invoice, render_invoice_html
from hospital_admin.config import AUTH_API_URL, LOG_LEVEL
from hospital_admin.storage import LocalStorage
from hospital_admin.store.hospital_store import HospitalStore
from hospital_admin.store.user_directory import UserDirectory

console = Console()


@dataclass
class ConsoleContext:
    store: HospitalStore
    auth: AuthStore


def handle_login(ctx: ConsoleContext, args: list[str]) -> None:
    """login <email> (prompts for the password)"""
    if not args:
        console.print("[yellow]Usage:[/yellow] login <email>")
        return
    password = console.input("Password: ", password=True)
    with Status("Signing in...", console=console, spinner="dots"):
        result = ctx.auth.login(args[0], password)
    if result.success:
        console.print(f"[green]Signed in as {result.user.name} ({result.user.role})[/green]")
    else:
        console.print(f"[bold red]Login failed:[/bold red] {result.error}")


def handle_logout(ctx: ConsoleContext, args: list[str]) -> None:
    """logout"""
    ctx.auth.logout()
    console.print("Signed out.")


def handle_patients(ctx: ConsoleContext, args: list[str]) -> None:
    """patients [query]"""
    patients = selectors.search_patients(ctx.store.patients.items, " ".join(args))
    table = Table(title=f"{len(patients)} patient(s)")
    for column in ("ID", "MRN", "Name", "Born", "Status", "Allergies"):
        table.add_column(column)
    for p in patients:
        table.add_row(p.id, p.mrn, p.display_name, p.date_of_birth, p.status, ", ".join(p.allergies) or "-")
    console.print(table)


def handle_appointments(ctx: ConsoleContext, args: list[str]) -> None:
    """appointments [day|week|month] [YYYY-MM-DD]"""
    mode = args[0] if args else "day"
    try:
        reference = date.fromisoformat(args[1]) if len(args) > 1 else date.today()
        start, end = selectors.date_window(reference, mode)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return

    appointments = selectors.appointments_in_window(ctx.store.appointments.items, reference, mode)
    table = Table(title=f"Appointments {start.isoformat()} to {end.isoformat()}")
    for column in ("Date", "Time", "Patient", "Doctor", "Type", "Status"):
        table.add_column(column)
    for a in sorted(appointments, key=lambda a: (a.date, a.time)):
        table.add_row(a.date, a.time, a.patient_name, a.doctor_name, a.type, a.status)
    console.print(table)


def handle_registry(ctx: ConsoleContext, args: list[str]) -> None:
    """registry"""
    table = Table(title="Medication registry")
    for column in ("ID", "Name", "Dosage", "Price", "Stock", "Status"):
        table.add_column(column)
    for item in ctx.store.medication_registry:
        table.add_row(item.id, item.name, item.dosage, f"€{item.unit_price:.2f}",
                      str(item.stock_quantity), item.status)
    console.print(table)


def handle_invoices(ctx: ConsoleContext, args: list[str]) -> None:
    """invoices [query]"""
    filtered = selectors.filter_invoices(ctx.store.invoices.items, query=" ".join(args))
    groups = selectors.group_invoices_by_patient(filtered)
    table = Table(title=f"{len(filtered)} invoice(s), {len(groups)} patient(s)")
    for column in ("Patient", "Invoice", "Date", "Status", "Total", "Open"):
        table.add_column(column)
    for group in groups:
        for inv in group.invoices:
            table.add_row(group.patient_name, inv.id, inv.date, inv.status, f"€{inv.total:.2f}", "")
        table.add_row("", "", "", "[bold]sum[/bold]", f"€{group.total_amount:.2f}", f"€{group.unpaid_amount:.2f}")
    console.print(table)


def handle_stats(ctx: ConsoleContext, args: list[str]) -> None:
    """stats"""
    dashboard = selectors.dashboard_stats(ctx.store)
    stats = selectors.monthly_invoice_stats(ctx.store.invoices.items)
    console.print(
        f"Patients: {dashboard.total_patients} | Today's appointments: {dashboard.todays_appointments} | "
        f"Active medications: {dashboard.active_medications} | Pending tasks: {dashboard.pending_tasks}"
    )
    console.print(
        f"Paid this month: €{stats.paid_this_month:.2f} ({stats.percentage_change:+.1f}%) | "
        f"Sent: €{stats.sent_this_month:.2f} | Overdue: €{stats.overdue_total:.2f} | "
        f"Draft: €{stats.draft_total:.2f}"
    )


def handle_bill(ctx: ConsoleContext, args: list[str]) -> None:
    """bill <patient_id> <medication_id> [...]"""
    if len(args) < 2:
        console.print("[yellow]Usage:[/yellow] bill <patient_id> <medication_id> [...]")
        return
    result = create_medication_invoice(ctx.store, args[0], args[1:])
    if not result.success:
        console.print(f"[bold red]Error:[/bold red] {result.error}")
        return
    invoice = result.value
    console.print(
        f"[green]Invoice {invoice.id} created:[/green] subtotal €{invoice.subtotal:.2f}, "
        f"VAT €{invoice.tax:.2f}, total €{invoice.total:.2f}"
    )


def handle_export(ctx: ConsoleContext, args: list[str]) -> None:
    """export <invoice_id> <file.html>"""
    if len(args) != 2:
        console.print("[yellow]Usage:[/yellow] export <invoice_id> <file.html>")
        return
    invoice = ctx.store.invoices.get(args[0])
    if not invoice:
        console.print(f"[bold red]Error:[/bold red] invoice {args[0]} not found")
        return
    html = render_invoice_html(invoice, ctx.store.hospital_settings, ctx.store.patients.get(invoice.patient_id))
    Path(args[1]).write_text(html, encoding="utf-8")
    console.print(f"Wrote {args[1]}")


def handle_help(ctx: ConsoleContext, args: list[str]) -> None:
    """help"""
    for name, handler in COMMAND_HANDLERS.items():
        console.print(f"[bold]{name}[/bold]  {escape((handler.__doc__ or '').strip())}")


# Commands that work without a session
PUBLIC_COMMANDS = {"login", "help"}

COMMAND_HANDLERS = {
    "login": handle_login,
    "logout": handle_logout,
    "patients": handle_patients,
    "appointments": handle_appointments,
    "registry": handle_registry,
    "invoices": handle_invoices,
    "stats": handle_stats,
    "bill": handle_bill,
    "export": handle_export,
    "help": handle_help,
}


def process_command(ctx: ConsoleContext, line: str) -> None:
    """Dispatch one console line to its handler."""
    command, *args = line.split()
    handler = COMMAND_HANDLERS.get(command.lower())
    if not handler:
        console.print(f"Unknown command '{command}'. Type 'help' for a list.")
        return
    if command.lower() not in PUBLIC_COMMANDS and not ctx.auth.is_authenticated:
        console.print("Please log in first: login <email>")
        return
    handler(ctx, args)


def build_context(storage_path: Path | None = None) -> ConsoleContext:
    storage = LocalStorage(storage_path)
    store = HospitalStore(storage, seed_data=True)
    directory = UserDirectory(storage)
    client = AuthClient() if AUTH_API_URL else None
    return ConsoleContext(store=store, auth=AuthStore(storage, directory, client))


def main():
    """Main console loop."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx = build_context()

    console.print(f"[bold blue]{ctx.store.hospital_settings.name}[/bold blue]")
    console.print("Type 'help' for commands, 'quit' or 'exit' to leave.\n")
    if ctx.auth.user:
        console.print(f"Welcome back, {ctx.auth.user.name}.")

    is_tty = sys.stdin.isatty()

    while True:
        try:
            line = console.input("[bold green]admin>[/bold green] ").strip()
            # Echo input when stdin is piped (not interactive)
            if not is_tty and line:
                console.print(f"[dim]{line}[/dim]")
        except (EOFError, KeyboardInterrupt):
            console.print("\n[bold blue]Goodbye![/bold blue]")
            break

        if not line:
            continue

        if line.lower() in ("quit", "exit"):
            console.print("[bold blue]Goodbye![/bold blue]")
            break

        try:
            process_command(ctx, line)
        except Exception as e:
            console.print(f"[bold red]Error:[/bold red] {e}\n")


if __name__ == "__main__":
    main()
