# Overview: Flask CLI command groups for bootstrap, staff and reports.

# backend/stallpos/cli.py
# Commands Legend (run from the backend directory):
# - flask --app stallpos system init-db
#   Create any missing tables (safe to re-run).
# - flask --app stallpos system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - flask --app stallpos employees list
#   List employees with their confirmation mode.
# - flask --app stallpos employees create --username ravi --mode auto
#   Create an employee.
# - flask --app stallpos reports profit-loss --from 2024-05-01 --to 2024-05-31
#   Print the per-item profit/loss table for an inclusive date range.

import click
from flask.cli import with_appcontext

from .errors import StallError
from .extensions import db
from .models import CONFIRMATION_MODES
from .services import catalog_service, reporting_service
from .time_utils import parse_iso_date


def _cents(value: int) -> str:
    return f"{value / 100:.2f}"


@click.group('system')
def system_group():
    """Database bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('employees')
def employees_group():
    """Employee inspection and creation."""


@employees_group.command('list')
@with_appcontext
def list_employees():
    """List all employees."""
    employees = catalog_service.get_employees()

    if not employees:
        click.echo("No employees found.")
        return

    click.echo("\n" + "=" * 60)
    click.echo(f"{'ID':<5} {'Username':<25} {'Code':<15} {'Mode'}")
    click.echo("=" * 60)
    for employee in employees:
        click.echo(
            f"{employee.id:<5} {employee.username:<25} {employee.employee_code:<15} {employee.confirmation_mode}"
        )
    click.echo("=" * 60 + "\n")


@employees_group.command('create')
@click.option('--username', prompt=True, help='Unique username')
@click.option('--code', 'employee_code', default=None, help='Short code shown on order tickets')
@click.option('--mode', 'confirmation_mode', type=click.Choice(CONFIRMATION_MODES), default='manual',
              show_default=True, help='auto marks this employee\'s lines done at checkout')
@with_appcontext
def create_employee(username, employee_code, confirmation_mode):
    """Create an employee."""
    patch = {"username": username, "confirmation_mode": confirmation_mode}
    if employee_code:
        patch["employee_code"] = employee_code

    try:
        employee = catalog_service.create_employee(patch)
    except StallError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created employee {employee.username} (ID: {employee.id}, mode: {employee.confirmation_mode})")


@click.group('reports')
def reports_group():
    """Reporting commands."""


@reports_group.command('profit-loss')
@click.option('--from', 'date_from', default=None, help='Start date (YYYY-MM-DD, inclusive)')
@click.option('--to', 'date_to', default=None, help='End date (YYYY-MM-DD, inclusive)')
@with_appcontext
def profit_loss(date_from, date_to):
    """Print the profit/loss report."""
    try:
        start = parse_iso_date(date_from)
        end = parse_iso_date(date_to)
    except ValueError:
        raise click.BadParameter("dates must be YYYY-MM-DD")

    report = reporting_service.generate_profit_loss(start, end)

    click.echo("\n" + "=" * 90)
    click.echo(f"{'Name':<30} {'Qty':>6} {'Revenue':>12} {'Cost':>12} {'Profit':>12} {'Margin':>10}")
    click.echo("=" * 90)
    for row in report.rows:
        margin = "-" if row.margin_pct is None else f"{row.margin_pct:.2f}%"
        click.echo(
            f"{row.name[:30]:<30} {row.qty_sold:>6} {_cents(row.revenue_cents):>12} "
            f"{_cents(row.assigned_cost_cents):>12} {_cents(row.profit_cents):>12} {margin:>10}"
        )
    click.echo("-" * 90)
    click.echo(
        f"{'TOTAL':<30} {'':>6} {_cents(report.total_revenue_cents):>12} "
        f"{_cents(report.total_cost_assigned_cents):>12} {_cents(report.total_profit_cents):>12}"
    )
    click.echo("=" * 90 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(employees_group)
    app.cli.add_command(reports_group)
