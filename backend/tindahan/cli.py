# Overview: Flask CLI command groups for bootstrap, inspection, and day-to-day store chores.

# backend/tindahan/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create missing tables and the receipt counter. Idempotent.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Inventory:
# - python -m flask inventory list
#   Print every item with price and stock.
# - python -m flask inventory add --name "Kopiko" --price 12.50 --stock 48
#   Add an item (price/cost in pesos, stored as cents).
#
# Wallet:
# - python -m flask wallet status
#   Show today's business date, the open day (if any), and recent history.

from decimal import Decimal, InvalidOperation

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import LedgerError
from .extensions import db
from .models import Counter
from .services import counter_service, inventory_service, wallet_service
from .time_utils import utcnow


def _pesos_to_cents(value: str) -> int:
    try:
        cents = (Decimal(value) * 100).quantize(Decimal("1"))
    except InvalidOperation:
        raise click.BadParameter(f"not a valid amount: {value!r}")
    return int(cents)


def _format_cents(cents: int | None) -> str:
    if cents is None:
        return "-"
    return f"{cents / 100:,.2f}"


# =============================================================================
# SYSTEM COMMANDS
# =============================================================================

@click.group('system')
def system_group():
    """System bootstrap and maintenance commands."""
    pass


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create any missing tables and seed the receipt counter.

    Safe to run repeatedly; existing data is left untouched.
    """
    click.echo("START Initializing store database...")
    db.create_all()

    counter_name = current_app.config["RECEIPT_COUNTER_NAME"]
    counter = db.session.get(Counter, counter_name)
    if counter is None:
        db.session.add(Counter(id=counter_name, current_number=0, updated_at=utcnow()))
        db.session.commit()
        click.echo(f"PASS Created counter '{counter_name}'")
    else:
        click.echo(f"PASS Counter '{counter_name}' at {counter.current_number}")

    click.echo("DONE Store database ready.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to seed counters.")


# =============================================================================
# INVENTORY COMMANDS
# =============================================================================

@click.group('inventory')
def inventory_group():
    """Inventory inspection commands."""
    pass


@inventory_group.command('list')
@with_appcontext
def list_inventory():
    """List all inventory items ordered by name."""
    result = inventory_service.list_items()
    if not result["items"]:
        click.echo("No inventory items.")
        return

    click.echo(f"{'ID':<32} {'Name':<28} {'Price':>10} {'Stock':>6}")
    click.echo("-" * 80)
    for item in result["items"]:
        click.echo(
            f"{item['id']:<32} {item['name'][:28]:<28} "
            f"{_format_cents(item['price_cents']):>10} {item['stock']:>6}"
        )
    click.echo(f"\n{result['count']} item(s)")


@inventory_group.command('add')
@click.option('--name', prompt=True, help='Item name')
@click.option('--price', prompt=True, help='Selling price in pesos')
@click.option('--cost', default='0', show_default=True, help='Unit cost in pesos')
@click.option('--stock', default=0, show_default=True, type=int, help='Units on hand')
@with_appcontext
def add_inventory(name, price, cost, stock):
    """Add an inventory item."""
    patch = {
        "name": name,
        "price_cents": _pesos_to_cents(price),
        "cost_cents": _pesos_to_cents(cost),
        "stock": stock,
    }
    try:
        item = inventory_service.add_item(patch=patch)
    except (LedgerError, ValueError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Added {item.name} ({item.id}) stock={item.stock}")


# =============================================================================
# WALLET COMMANDS
# =============================================================================

@click.group('wallet')
def wallet_group():
    """Daily cash session commands."""
    pass


@wallet_group.command('status')
@click.option('--limit', default=7, show_default=True, help='History rows to show')
@with_appcontext
def wallet_status(limit):
    """Show the open day and recent wallet history."""
    click.echo(f"Business date: {wallet_service.today()}")
    open_day = wallet_service.get_open_day()
    if open_day is None:
        click.echo("No day is open.")
    else:
        click.echo(f"Open day: {open_day.id} starting cash {_format_cents(open_day.starting_cash_cents)}")

    click.echo(
        f"Receipt counter: "
        f"{counter_service.get_current_number(current_app.config['RECEIPT_COUNTER_NAME'])}"
    )

    history = wallet_service.list_wallet_history(limit=limit)
    if history:
        click.echo(f"\n{'Date':<12} {'Status':<8} {'Start':>12} {'End':>12}")
        for entry in history:
            click.echo(
                f"{entry.id:<12} {entry.status:<8} "
                f"{_format_cents(entry.starting_cash_cents):>12} "
                f"{_format_cents(entry.ending_cash_cents):>12}"
            )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(wallet_group)
