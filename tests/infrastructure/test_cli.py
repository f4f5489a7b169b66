"""End-to-end tests of the command-line interface against a temp data dir."""

import json

import pytest
from click.testing import CliRunner

from portal.infrastructure.cli.main import cli


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    (tmp_path / "products.json").write_text(json.dumps([
        {"id": "p1", "name": "Flour", "category": "dry", "vatRate": 7,
         "variants": [{"id": "v1", "size": "25kg", "prices": {"A": 100, "B": 110, "C": 120}}]},
        {"id": "p2", "name": "Oil", "category": "dry", "vatRate": 19,
         "variants": [{"id": "v1", "size": "5l", "prices": {"A": 50, "B": 55, "C": 60}}]},
    ]), encoding="utf-8")
    (tmp_path / "users.json").write_text(json.dumps([
        {"username": "alice", "category": "A", "companyName": "Alice GmbH"},
        {"username": "bob", "category": "B", "companyName": "Bob KG"},
    ]), encoding="utf-8")
    (tmp_path / "discount_rules.json").write_text(json.dumps([
        {"id": "r1", "clientId": "bob", "productId": "p2", "discountType": "fixed",
         "discountValue": 5, "active": True},
    ]), encoding="utf-8")
    monkeypatch.setenv("PORTAL_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("PORTAL_ORDER_EMAIL", "ops@example.com")
    return tmp_path


def _invoke(*args):
    return CliRunner().invoke(cli, list(args))


def test_catalog_list_shows_effective_prices(data_dir):
    result = _invoke("catalog", "list", "--client", "bob")
    assert result.exit_code == 0, result.output
    assert "€50.00" in result.output  # 55 - 5
    assert "€110.00" in result.output


def test_cart_survives_between_invocations(data_dir):
    assert _invoke("cart", "set", "--client", "alice", "--product", "p1",
                   "--variant", "v1", "--qty", "1").exit_code == 0
    _invoke("cart", "add", "--client", "alice", "--product", "p2", "--variant", "v1")

    result = _invoke("cart", "show", "--client", "alice")
    assert result.exit_code == 0, result.output
    assert "€166.50" in result.output


def test_other_client_does_not_see_cart(data_dir):
    _invoke("cart", "set", "--client", "alice", "--product", "p1", "--variant", "v1", "--qty", "2")
    result = _invoke("cart", "show", "--client", "bob")
    assert "Cart is empty." in result.output
    result = _invoke("cart", "show", "--client", "alice")
    assert "Cart is empty." in result.output


def test_submit_and_show_order(data_dir):
    _invoke("cart", "set", "--client", "alice", "--product", "p1", "--variant", "v1", "--qty", "1")
    result = _invoke("order", "submit", "--client", "alice")
    assert result.exit_code == 0, result.output
    assert "€107.00" in result.output

    (order,) = json.loads((data_dir / "orders.json").read_text())
    (mail,) = json.loads((data_dir / "outbox.json").read_text())
    assert mail["to"] == "ops@example.com"
    assert mail["params"]["order_id"] == order["id"]

    shown = _invoke("order", "show", "--client", "alice", "--id", order["id"])
    assert "status=pending" in shown.output
    assert "Alice GmbH" in shown.output

    assert "Cart is empty." in _invoke("cart", "show", "--client", "alice").output


def test_empty_cart_submission_is_a_clean_error(data_dir):
    result = _invoke("order", "submit", "--client", "alice")
    assert result.exit_code != 0
    assert "Your cart is empty" in result.output
    assert "Traceback" not in result.output


def test_unknown_client(data_dir):
    result = _invoke("cart", "show", "--client", "mallory")
    assert result.exit_code != 0
    assert "Unknown client 'mallory'" in result.output


def test_logout_discards_cart(data_dir):
    _invoke("cart", "set", "--client", "alice", "--product", "p1", "--variant", "v1", "--qty", "1")
    assert _invoke("logout", "--client", "alice").exit_code == 0
    assert "Cart is empty." in _invoke("cart", "show", "--client", "alice").output


def test_order_of_other_client_is_hidden(data_dir):
    _invoke("cart", "set", "--client", "alice", "--product", "p1", "--variant", "v1", "--qty", "1")
    _invoke("order", "submit", "--client", "alice")
    (order,) = json.loads((data_dir / "orders.json").read_text())

    result = _invoke("order", "show", "--client", "bob", "--id", order["id"])
    assert result.exit_code != 0
    assert "not found" in result.output


def test_order_list(data_dir):
    assert "No orders yet." in _invoke("order", "list", "--client", "alice").output
    _invoke("cart", "set", "--client", "alice", "--product", "p1", "--variant", "v1", "--qty", "1")
    _invoke("order", "submit", "--client", "alice")

    result = _invoke("order", "list", "--client", "alice")
    assert result.exit_code == 0, result.output
    assert "pending" in result.output
    assert "€107.00" in result.output
    assert "No orders yet." in _invoke("order", "list", "--client", "bob").output


def test_retry_after_failed_notification_keeps_one_order(data_dir):
    outbox = data_dir / "outbox.json"
    outbox.mkdir()  # a directory in its place makes every send fail
    _invoke("cart", "set", "--client", "alice", "--product", "p1", "--variant", "v1", "--qty", "1")

    for _ in range(2):
        result = _invoke("order", "submit", "--client", "alice")
        assert result.exit_code != 0
        assert "was saved" in result.output
    assert len(json.loads((data_dir / "orders.json").read_text())) == 1

    outbox.rmdir()
    result = _invoke("order", "submit", "--client", "alice")
    assert result.exit_code == 0, result.output
    (order,) = json.loads((data_dir / "orders.json").read_text())
    assert order["id"] in result.output
    assert len(json.loads(outbox.read_text())) == 1


def test_catalog_categories(data_dir):
    (data_dir / "categories.json").write_text(json.dumps([
        {"id": "oil", "name": "Oils"}, {"id": "dry", "name": "Dry goods"},
    ]), encoding="utf-8")
    result = _invoke("catalog", "categories")
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert "Dry goods" in lines[0] and "2 product(s)" in lines[0]
    assert "Oils" in lines[1] and "0 product(s)" in lines[1]


def test_unpriced_cart_line_is_reported_and_blocks_order(data_dir):
    _invoke("cart", "set", "--client", "alice", "--product", "p1", "--variant", "v1", "--qty", "1")
    products = json.loads((data_dir / "products.json").read_text())
    del products[0]["variants"][0]["prices"]["A"]
    (data_dir / "products.json").write_text(json.dumps(products), encoding="utf-8")

    result = _invoke("order", "submit", "--client", "alice")
    assert result.exit_code != 0
    assert "Note: No category A price for product 'Flour'" in result.output
    assert "Error: No category A price for product 'Flour', variant '25kg'" in result.output
    assert json.loads((data_dir / "orders.json").read_text()) == []
