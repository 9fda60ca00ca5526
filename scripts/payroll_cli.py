#!/usr/bin/env python3
"""
Command-line entry point for the local payroll store.

Usage:
    python3 scripts/payroll_cli.py [--db-url URL] <command> [options]

Examples:
    # Create tables, seed departments/positions and settings
    python3 scripts/payroll_cli.py init --settings config/settings.example.yaml

    # Employees as CSV
    python3 scripts/payroll_cli.py employees-sample modele_employes.csv
    python3 scripts/payroll_cli.py employees-import employes.csv
    python3 scripts/payroll_cli.py employees-export employes.csv

    # Monthly salaries
    python3 scripts/payroll_cli.py salaries-generate --month 3 --year 2024
    python3 scripts/payroll_cli.py pay <payment-id> 150000 --notes "Virement"

    # Backups
    python3 scripts/payroll_cli.py backup-export
    python3 scripts/payroll_cli.py backup-import backup_paie_2024-03-15.json --replace
    python3 scripts/payroll_cli.py backup-now
    python3 scripts/payroll_cli.py backup-list
    python3 scripts/payroll_cli.py scheduler --poll 60

The database URL defaults to PAYROLL_DATABASE_URL, then sqlite:///payroll.db.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _amount(text: str) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not an amount: {text!r}") from None
    if not value.is_finite():
        raise argparse.ArgumentTypeError(f"not an amount: {text!r}")
    return value


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Local payroll store: employees, salaries, backups.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--db-url", default=None, help="SQLAlchemy database URL.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="Create tables and seed reference data and settings.")
    p.add_argument("--settings", type=Path, default=None, help="YAML seed file.")
    p.add_argument("--overwrite", action="store_true", help="Overwrite stored settings.")

    p = sub.add_parser("employees-export", help="Write every employee to a CSV file.")
    p.add_argument("file", type=Path)

    p = sub.add_parser("employees-import", help="Create employees from a CSV file.")
    p.add_argument("file", type=Path)

    p = sub.add_parser("employees-sample", help="Write a sample CSV file to fill in.")
    p.add_argument("file", type=Path)

    today = date.today()
    p = sub.add_parser("salaries-generate", help="Compute the period's salaries.")
    p.add_argument("--month", type=int, default=today.month)
    p.add_argument("--year", type=int, default=today.year)

    p = sub.add_parser("pay", help="Record a payment against a salary.")
    p.add_argument("payment_id")
    p.add_argument("amount", type=_amount)
    p.add_argument("--notes", default=None)

    p = sub.add_parser("dashboard", help="Headline figures for a period.")
    p.add_argument("--month", type=int, default=today.month)
    p.add_argument("--year", type=int, default=today.year)

    p = sub.add_parser("backup-export", help="Write a JSON backup file.")
    p.add_argument("file", type=Path, nargs="?", default=None)

    p = sub.add_parser("backup-import", help="Load a JSON backup file.")
    p.add_argument("file", type=Path)
    p.add_argument("--replace", action="store_true", help="Empty the store first.")

    sub.add_parser("backup-now", help="Take an automatic-ring snapshot now.")
    sub.add_parser("backup-list", help="List the automatic backup slots.")

    p = sub.add_parser("backup-restore", help="Restore an automatic backup slot.")
    p.add_argument("slot_id")
    p.add_argument("--replace", action="store_true", help="Empty the store first.")

    sub.add_parser("backup-status", help="Show the backup reminder status.")

    p = sub.add_parser("scheduler", help="Run the automatic backup scheduler until Ctrl-C.")
    p.add_argument("--poll", type=float, default=60.0, help="Seconds between ticks.")

    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_init(args: argparse.Namespace) -> int:
    from payroll_config import SeedSettings, SettingsService, load_seed_settings
    from payroll_kernel.db.engine import create_tables, session_scope
    from payroll_kernel.services.reference_data_service import ReferenceDataService

    seed = load_seed_settings(args.settings) if args.settings else SeedSettings()
    create_tables()
    with session_scope() as session:
        SettingsService(session).seed(seed, overwrite=args.overwrite)
        reference = ReferenceDataService(session)
        added = reference.seed_departments(seed.app.departments)
        known = {p.name for p in reference.list_positions()}
        positions = [reference.add_position(name) for name in seed.app.positions if name not in known]
    print(f"Initialized: {len(added)} departments, {len(positions)} positions added.")
    return 0


def _cmd_employees_export(args: argparse.Namespace) -> int:
    from payroll_ingestion.services import EmployeeCsvService
    from payroll_kernel.db.engine import session_scope

    with session_scope() as session:
        count = EmployeeCsvService(session).export_file(args.file)
    print(f"{count} employees written to {args.file}")
    return 0


def _cmd_employees_import(args: argparse.Namespace) -> int:
    from payroll_ingestion.services import EmployeeCsvService
    from payroll_kernel.db.engine import session_scope

    with session_scope() as session:
        report = EmployeeCsvService(session).import_file(args.file)
    print(f"{report.created_count} employees imported.")
    for warning in report.warnings:
        print(f"  {warning}", file=sys.stderr)
    return 0 if report.success else 1


def _cmd_employees_sample(args: argparse.Namespace) -> int:
    from payroll_ingestion.adapters import CsvSourceAdapter
    from payroll_ingestion.services import EmployeeCsvService
    from payroll_kernel.db.engine import session_scope

    with session_scope() as session:
        text = EmployeeCsvService(session).sample_text()
    CsvSourceAdapter().write(args.file, text)
    print(f"Sample written to {args.file}")
    return 0


def _cmd_salaries_generate(args: argparse.Namespace) -> int:
    from payroll_config import SettingsService, format_amount
    from payroll_kernel.db.engine import session_scope
    from payroll_kernel.services.salary_service import SalaryService

    with session_scope() as session:
        settings = SettingsService(session).get()
        result = SalaryService(session).generate_monthly_salaries(args.month, args.year)
    print(
        f"{args.month:02d}/{args.year}: {result.created_count} created, "
        f"{len(result.existing)} already computed, "
        f"{len(result.skipped_employee_ids)} skipped (not active)."
    )
    for payment in result.created:
        print(f"  {payment.id}  net {format_amount(payment.net_salary, settings)}")
    for warning in result.warnings:
        print(f"  {warning}", file=sys.stderr)
    return 0


def _cmd_pay(args: argparse.Namespace) -> int:
    from payroll_config import SettingsService, format_amount
    from payroll_kernel.db.engine import session_scope
    from payroll_kernel.services.salary_service import SalaryService

    with session_scope() as session:
        settings = SettingsService(session).get()
        payment = SalaryService(session).record_payment(args.payment_id, args.amount, args.notes)
    print(
        f"Paid {format_amount(payment.amount_paid, settings)}, "
        f"remaining {format_amount(payment.remaining_amount, settings)} ({payment.status.value})"
    )
    return 0


def _cmd_dashboard(args: argparse.Namespace) -> int:
    from payroll_config import SettingsService, format_amount
    from payroll_kernel.db.engine import session_scope
    from payroll_kernel.selectors.dashboard_selector import DashboardSelector

    with session_scope() as session:
        settings = SettingsService(session).get()
        stats = DashboardSelector(session).stats(args.month, args.year)
    print(f"{settings.company_name} -- {args.month:02d}/{args.year}")
    print(f"  Employees:         {stats.active_employees} active / {stats.total_employees}")
    print(f"  Monthly salaries:  {format_amount(stats.total_monthly_salary, settings)}")
    print(
        f"  Pending advances:  {stats.pending_advances} "
        f"({format_amount(stats.pending_advances_amount, settings)})"
    )
    print(f"  Paid this month:   {format_amount(stats.paid_this_month, settings)}")
    print(f"  Remaining to pay:  {format_amount(stats.remaining_to_pay, settings)}")
    for department, count in sorted(stats.employees_by_department.items()):
        print(f"    {department}: {count}")
    return 0


def _cmd_backup_export(args: argparse.Namespace) -> int:
    from payroll_backup.services import BackupReminderService
    from payroll_ingestion.services import BackupFileService
    from payroll_kernel.db.engine import session_scope

    with session_scope() as session:
        service = BackupFileService(session)
        path = args.file or Path(service.default_filename())
        bundle = service.export_file(path)
        BackupReminderService(session).record_backup()
    print(f"{bundle.total_records} records written to {path}")
    return 0


def _cmd_backup_import(args: argparse.Namespace) -> int:
    from payroll_ingestion.services import BackupFileService
    from payroll_kernel.db.engine import session_scope

    with session_scope() as session:
        counts = BackupFileService(session).import_file(args.file, replace=args.replace)
    for name, count in counts.items():
        print(f"  {name}: {count}")
    return 0


def _cmd_backup_now(args: argparse.Namespace) -> int:
    from payroll_backup.domain import format_bytes
    from payroll_backup.services import BackupScheduler
    from payroll_kernel.db.engine import get_session_factory

    slot = BackupScheduler(get_session_factory()).backup_now()
    if slot is None:
        print("A backup is already in progress.")
        return 1
    print(f"{slot.id} ({format_bytes(slot.size_bytes)})")
    return 0


def _cmd_backup_list(args: argparse.Namespace) -> int:
    from payroll_backup.domain import format_bytes
    from payroll_backup.services import SnapshotService
    from payroll_kernel.db.engine import session_scope

    with session_scope() as session:
        slots = SnapshotService(session).list_slots()
    if not slots:
        print("No automatic backups.")
    for slot in slots:
        print(
            f"{slot.id}  {slot.created_at:%Y-%m-%d %H:%M}  {format_bytes(slot.size_bytes):>8}  "
            f"{slot.record_counts.get('employees', 0)} employees"
        )
    return 0


def _cmd_backup_restore(args: argparse.Namespace) -> int:
    from payroll_backup.services import SnapshotService
    from payroll_kernel.db.engine import session_scope

    with session_scope() as session:
        counts = SnapshotService(session).restore_slot(args.slot_id, replace=args.replace)
    print(f"Restored {sum(counts.values())} records from {args.slot_id}")
    return 0


def _cmd_backup_status(args: argparse.Namespace) -> int:
    from payroll_backup.services import BackupReminderService
    from payroll_kernel.db.engine import session_scope

    with session_scope() as session:
        status = BackupReminderService(session).status()
    if not status.settings.enabled:
        print("Backup reminder disabled.")
    elif status.days_since_last_backup is None:
        print("No backup recorded yet.")
    else:
        print(f"Last backup {status.days_since_last_backup} day(s) ago.")
    if status.show_reminder:
        print("A backup is due.")
    return 0


def _cmd_scheduler(args: argparse.Namespace) -> int:
    from payroll_backup.services import BackupScheduler
    from payroll_kernel.db.engine import get_session_factory

    scheduler = BackupScheduler(get_session_factory(), poll_interval_seconds=args.poll)
    scheduler.start()
    print("Backup scheduler running; Ctrl-C to stop.")
    try:
        while scheduler.is_running:
            time.sleep(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()
    return 0


_COMMANDS = {
    "init": _cmd_init,
    "employees-export": _cmd_employees_export,
    "employees-import": _cmd_employees_import,
    "employees-sample": _cmd_employees_sample,
    "salaries-generate": _cmd_salaries_generate,
    "pay": _cmd_pay,
    "dashboard": _cmd_dashboard,
    "backup-export": _cmd_backup_export,
    "backup-import": _cmd_backup_import,
    "backup-now": _cmd_backup_now,
    "backup-list": _cmd_backup_list,
    "backup-restore": _cmd_backup_restore,
    "backup-status": _cmd_backup_status,
    "scheduler": _cmd_scheduler,
}


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    from payroll_kernel.db.engine import init_engine_from_url
    from payroll_kernel.exceptions import PayrollKernelError
    from payroll_kernel.logging_config import configure_logging

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)
    init_engine_from_url(args.db_url)

    try:
        return _COMMANDS[args.command](args)
    except PayrollKernelError as exc:
        print(f"ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
