import json

import pytest

from workflow_quote.config.settings import PACKAGE_DIR
from workflow_quote.engine import (
    PricingEngine,
    PricingTableError,
    load_pricing_table,
    load_pricing_table_or_empty,
    pricing_table_from_dict,
)


def test_load_from_file(tmp_path, table_data):
    path = tmp_path / "table.json"
    path.write_text(json.dumps(table_data), encoding="utf-8")

    table = load_pricing_table(path)

    assert list(table.node_types)[0] == "httpRequest"
    http = table.node_types["httpRequest"]
    assert http.base_price == 10
    assert [m.name for m in http.modifiers] == ["concurrency", "attachment_mb"]
    assert http.price_rules.min == 10
    assert http.price_rules.currency == "USD"
    assert table.global_modifiers["rush_delivery"]["price_per_unit"] == 1.25


def test_missing_file_raises(tmp_path):
    with pytest.raises(PricingTableError, match="not found"):
        load_pricing_table(tmp_path / "missing.json")


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(PricingTableError, match="not valid JSON"):
        load_pricing_table(path)


@pytest.mark.parametrize("bad", [
    [],
    {"node_types": []},
    {"node_types": {"x": "cheap"}},
    {"node_types": {"x": {"label": "X", "base_price": -1}}},
    {"node_types": {"x": {"label": "X", "base_price": "ten"}}},
    {"node_types": {"x": {"label": "X", "base_price": 1, "modifiers": {"a": 1}}}},
    {"node_types": {"x": {"label": "X", "base_price": 1, "modifiers": [{"type": "per_unit"}]}}},
    {"node_types": {"x": {"label": "X", "base_price": 1, "price_rules": {"min": "low"}}}},
])
def test_malformed_tables_raise(bad):
    with pytest.raises(PricingTableError):
        pricing_table_from_dict(bad)


def test_unknown_modifier_type_survives_loading(table_data):
    table = pricing_table_from_dict(table_data)
    assert table.node_types["legacy"].modifiers[0].type == "per_fortnight"


def test_missing_sections_default_to_empty():
    table = pricing_table_from_dict({})
    assert table.is_empty
    assert table.global_modifiers == {}


def test_graceful_loader_logs_and_returns_empty(tmp_path, caplog):
    path = tmp_path / "broken.json"
    path.write_text("[1, 2", encoding="utf-8")

    with caplog.at_level("ERROR"):
        table = load_pricing_table_or_empty(path)

    assert table.is_empty
    assert "Failed to load price table" in caplog.text


def test_shipped_table_loads():
    table = load_pricing_table(PACKAGE_DIR / "data" / "translation_key.json")
    assert "httpRequest" in table.node_types
    assert not table.is_empty


def test_shipped_http_request_scenario():
    engine = PricingEngine.from_file(PACKAGE_DIR / "data" / "translation_key.json")
    result = engine.calculate_price_for_node("httpRequest", {"concurrency": 3, "attachment_mb": 10})
    assert result.final_price == 21.00
    assert len(result.breakdown) == 3


def test_to_dict_round_trips_entry(table_data):
    table = pricing_table_from_dict(table_data)
    assert table.node_types["httpRequest"].to_dict()["price_rules"] == {"min": 10, "max": 250, "currency": "USD"}
