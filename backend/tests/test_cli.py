# Overview: Pytest coverage for the Flask CLI command groups.

from tindahan.extensions import db
from tindahan.models import Counter, InventoryItem
from tindahan.services import wallet_service


def test_system_init_seeds_counter(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["system", "init"])

    assert result.exit_code == 0, result.output
    assert "Created counter 'saleReceipt'" in result.output
    assert db.session.get(Counter, "saleReceipt").current_number == 0

    again = runner.invoke(args=["system", "init"])
    assert "Counter 'saleReceipt' at 0" in again.output


def test_inventory_add_converts_pesos_to_cents(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["inventory", "add", "--name", "Kopiko", "--price", "12.50", "--stock", "48"])

    assert result.exit_code == 0, result.output
    item = db.session.query(InventoryItem).filter_by(name="Kopiko").one()
    assert item.price_cents == 1250
    assert item.stock == 48

    listing = runner.invoke(args=["inventory", "list"])
    assert "Kopiko" in listing.output
    assert "1 item(s)" in listing.output


def test_inventory_add_rejects_bad_amount(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["inventory", "add", "--name", "Kopiko", "--price", "abc"])
    assert result.exit_code != 0


def test_wallet_status(app, db_session):
    wallet_service.start_day(50000, date="2026-10-18")
    runner = app.test_cli_runner()

    result = runner.invoke(args=["wallet", "status"])

    assert result.exit_code == 0, result.output
    assert "Open day: 2026-10-18 starting cash 500.00" in result.output
