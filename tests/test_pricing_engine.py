"""
Pricing engine behaviour: base prices, each modifier type, clamping, the
zero floor, and graceful handling of unknown node types.
"""
import pytest

from workflow_quote.engine import (
    NODE_TYPE_NOT_FOUND,
    ModifierRule,
    PricingEngine,
    apply_modifier,
    pricing_table_from_dict,
)


def test_known_types_without_modifiers_price_at_base(engine):
    """No modifiers supplied → one breakdown line, final price = clamped base."""
    for node_type in engine.get_available_node_types():
        pricing = engine.get_pricing_for_node_type(node_type)
        result = engine.calculate_price_for_node(node_type, {})

        assert result.success
        expected = pricing.base_price
        rules = pricing.price_rules
        if rules and rules.min and expected < rules.min:
            expected = rules.min
        if rules and rules.max and expected > rules.max:
            expected = rules.max
        assert result.final_price == round(expected, 2)

        # One base line, plus a clamp line only when the base sits outside the bounds
        clamped = expected != pricing.base_price
        assert len(result.breakdown) == (2 if clamped else 1)


def test_base_line_uses_label(engine):
    result = engine.calculate_price_for_node("httpRequest")
    assert result.breakdown[0].description == "HTTP Request (base)"
    assert result.breakdown[0].amount == 10


def test_unknown_node_type_is_reported_not_raised(engine):
    result = engine.calculate_price_for_node("notARealNode", {"concurrency": 3})

    assert result.success is False
    assert result.error == NODE_TYPE_NOT_FOUND
    assert result.price == 0
    assert "notARealNode" in result.message
    assert result.to_dict() == {
        "success": False,
        "error": NODE_TYPE_NOT_FOUND,
        "message": "Pricing information not found for node type: notARealNode",
        "price": 0,
    }


def test_http_request_scenario(engine):
    """10 + 3*2 + 10*0.5 = 21.00 with three breakdown lines."""
    result = engine.calculate_price_for_node("httpRequest", {"concurrency": 3, "attachment_mb": 10})

    assert result.success
    assert result.final_price == 21.00
    assert [line.description for line in result.breakdown] == [
        "HTTP Request (base)",
        "concurrency: 3 × $2.00",
        "attachment_mb: 10 MB × $0.50/MB",
    ]
    assert [line.amount for line in result.breakdown] == [10, 6, 5]
    assert result.currency == "USD"


def test_per_kb_description(engine):
    result = engine.calculate_price_for_node("webhook", {"payload_size_kb": 100})
    assert result.breakdown[-1].description == "payload_size_kb: 100 KB × $0.05/KB"
    assert result.final_price == 30.00


def test_boolean_true_adds_flat_price(engine):
    result = engine.calculate_price_for_node("webhook", {"auth_required": True})
    assert result.breakdown[-1].description == "auth_required: Yes (+$10.00)"
    assert result.breakdown[-1].amount == 10
    assert result.final_price == 35.00


def test_boolean_false_still_produces_a_line(engine):
    result = engine.calculate_price_for_node("webhook", {"auth_required": False})

    assert len(result.breakdown) == 2
    assert result.breakdown[-1].description == "auth_required: No (+$0.00)"
    assert result.breakdown[-1].amount == 0
    assert result.final_price == 25.00


def test_omitted_and_none_modifiers_are_skipped(engine):
    omitted = engine.calculate_price_for_node("webhook", {})
    explicit_none = engine.calculate_price_for_node("webhook", {"auth_required": None})

    assert len(omitted.breakdown) == 1
    assert len(explicit_none.breakdown) == 1


def test_undeclared_modifier_names_are_ignored(engine):
    result = engine.calculate_price_for_node("httpRequest", {"not_declared": 50})
    assert len(result.breakdown) == 1
    assert result.final_price == 10


def test_multipliers_compound_on_running_total(engine):
    """100 → 120 → 180, not 100 * (0.2 + 0.5)."""
    result = engine.calculate_price_for_node("aiAgent", {"complexity": True, "autonomy": True})

    assert result.final_price == 180.00
    assert result.breakdown[1].amount == pytest.approx(20)
    assert result.breakdown[2].amount == pytest.approx(60)
    assert result.breakdown[1].description == "complexity: true × 1.20x"


def test_multiplier_applies_for_any_supplied_value(engine):
    result = engine.calculate_price_for_node("aiAgent", {"complexity": False})
    assert result.final_price == 120.00
    assert result.breakdown[1].description == "complexity: false × 1.20x"


def test_modifier_declaration_order_matters(engine):
    """Multiplier declared first only scales the base, not the later steps."""
    result = engine.calculate_price_for_node("mixed", {"steps": 3, "complexity": 1})
    assert result.final_price == 230.00


def test_minimum_price_adjustment(engine):
    result = engine.calculate_price_for_node("premium", {})

    assert result.final_price == 500.00
    assert result.breakdown[-1].description == "Minimum price adjustment"
    assert result.breakdown[-1].amount == 200
    assert result.currency == "EUR"


def test_maximum_price_adjustment(engine):
    result = engine.calculate_price_for_node("premium", {"extras": 9})

    assert result.final_price == 1000.00
    assert result.breakdown[-1].description == "Maximum price adjustment"
    assert result.breakdown[-1].amount == -200
    assert not any(line.description == "Minimum price adjustment" for line in result.breakdown)


def test_min_above_max_applies_both_adjustments(settings):
    """Min is applied first, then max wins."""
    table = pricing_table_from_dict({
        "node_types": {
            "inverted": {"label": "Inverted", "base_price": 50, "price_rules": {"min": 100, "max": 80}},
        },
    })
    result = PricingEngine(settings, table=table).calculate_price_for_node("inverted")

    assert [line.description for line in result.breakdown] == [
        "Inverted (base)",
        "Minimum price adjustment",
        "Maximum price adjustment",
    ]
    assert result.breakdown[1].amount == 50
    assert result.breakdown[2].amount == -20
    assert result.final_price == 80.00


def test_no_adjustment_line_when_within_bounds(engine):
    result = engine.calculate_price_for_node("premium", {"extras": 3})
    assert result.final_price == 600.00
    assert len(result.breakdown) == 2


def test_final_price_is_floored_at_zero(engine):
    result = engine.calculate_price_for_node("discounted", {"discounts": 10})

    assert result.final_price == 0
    assert result.breakdown[-1].amount == -50


def test_breakdown_sums_to_final_price(engine):
    result = engine.calculate_price_for_node("premium", {"extras": 9})
    assert sum(line.amount for line in result.breakdown) == pytest.approx(result.final_price)


def test_unknown_modifier_type_is_zero_cost(engine):
    result = engine.calculate_price_for_node("legacy", {"mystery": 5})

    assert result.success
    assert result.final_price == 20
    assert result.breakdown[-1].description == "mystery: Unknown modifier type"
    assert result.breakdown[-1].amount == 0


def test_non_numeric_quantity_does_not_raise(engine):
    result = engine.calculate_price_for_node("httpRequest", {"concurrency": "lots"})
    assert result.success
    assert result.final_price == 10
    assert result.breakdown[-1].amount == 0


def test_final_price_rounded_to_cents(engine):
    result = engine.calculate_price_for_node("webhook", {"payload_size_kb": 3})
    assert result.final_price == 25.15


def test_success_dict_shape(engine):
    data = engine.calculate_price_for_node("httpRequest", {"concurrency": 1}).to_dict()
    assert set(data) == {"success", "node_type", "base_price", "final_price", "breakdown", "currency"}
    assert data["breakdown"][1] == {"description": "concurrency: 1 × $2.00", "amount": 2}


def test_lookup_and_listing(engine):
    assert engine.get_pricing_for_node_type("httpRequest").label == "HTTP Request"
    assert engine.get_pricing_for_node_type("nope") is None
    assert engine.get_available_node_types()[:2] == ["httpRequest", "webhook"]
    assert engine.get_global_modifiers() == {"rush_delivery": {"type": "multiplier", "price_per_unit": 1.25}}


def test_empty_engine_degrades_gracefully(empty_engine):
    assert not empty_engine.loaded
    assert empty_engine.get_available_node_types() == []
    assert empty_engine.get_global_modifiers() == {}
    assert empty_engine.get_pricing_for_node_type("httpRequest") is None

    result = empty_engine.calculate_price_for_node("httpRequest", {"concurrency": 3})
    assert result.success is False
    assert result.error == NODE_TYPE_NOT_FOUND


def test_engine_table_is_fixed_after_construction(settings, table_data):
    """Writing the table file later does not change a live engine; a new one sees it."""
    import json

    engine = PricingEngine(settings)
    assert not engine.loaded

    settings.pricing_table.write_text(json.dumps(table_data), encoding="utf-8")

    assert engine.calculate_price_for_node("httpRequest").success is False

    fresh = PricingEngine.from_file(settings.pricing_table)
    assert fresh.calculate_price_for_node("httpRequest").final_price == 10


def test_apply_modifier_directly():
    rule = ModifierRule(name="rush", type="multiplier", price_per_unit=1.5)
    cost, description = apply_modifier(rule, True, 40.0)
    assert cost == 20.0
    assert description == "rush: true × 1.50x"
