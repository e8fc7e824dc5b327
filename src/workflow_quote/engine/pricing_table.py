"""
Price table loading.

The price table ("translation key") is a JSON document mapping node types to
their base price, modifiers and min/max price rules. Loading is an explicit
step: load_pricing_table() raises on bad input, load_pricing_table_or_empty()
applies the degrade-to-empty policy used by the running service.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Union

from .models import ModifierRule, NodeTypePricing, PriceRules, PricingTable

logger = logging.getLogger(__name__)


class PricingTableError(ValueError):
    """Raised when the price table file is missing or malformed."""


def _as_number(value, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PricingTableError(f"{where} must be a number, got {value!r}")
    return float(value)


def _optional_number(value, where: str) -> Optional[float]:
    if value is None:
        return None
    return _as_number(value, where)


def _parse_modifier(node_type: str, index: int, raw) -> ModifierRule:
    where = f"node_types.{node_type}.modifiers[{index}]"
    if not isinstance(raw, dict):
        raise PricingTableError(f"{where} must be an object")
    name = raw.get('name')
    if not name or not isinstance(name, str):
        raise PricingTableError(f"{where} is missing a name")
    return ModifierRule(
        name=name,
        type=str(raw.get('type', '')),
        price_per_unit=_as_number(raw.get('price_per_unit', 0), f"{where}.price_per_unit"),
    )


def _parse_price_rules(node_type: str, raw) -> Optional[PriceRules]:
    if raw is None:
        return None
    where = f"node_types.{node_type}.price_rules"
    if not isinstance(raw, dict):
        raise PricingTableError(f"{where} must be an object")
    currency = raw.get('currency')
    return PriceRules(
        min=_optional_number(raw.get('min'), f"{where}.min"),
        max=_optional_number(raw.get('max'), f"{where}.max"),
        currency=str(currency) if currency else None,
    )


def _parse_node_type(node_type: str, raw) -> NodeTypePricing:
    where = f"node_types.{node_type}"
    if not isinstance(raw, dict):
        raise PricingTableError(f"{where} must be an object")

    base_price = _as_number(raw.get('base_price', 0), f"{where}.base_price")
    if base_price < 0:
        raise PricingTableError(f"{where}.base_price must not be negative")

    modifiers = raw.get('modifiers') or []
    if not isinstance(modifiers, list):
        raise PricingTableError(f"{where}.modifiers must be a list")

    return NodeTypePricing(
        label=str(raw.get('label') or node_type),
        base_price=base_price,
        modifiers=[_parse_modifier(node_type, i, m) for i, m in enumerate(modifiers)],
        price_rules=_parse_price_rules(node_type, raw.get('price_rules')),
    )


def pricing_table_from_dict(data) -> PricingTable:
    """Build a PricingTable from an already-decoded JSON document."""
    if not isinstance(data, dict):
        raise PricingTableError("Price table must be a JSON object")

    node_types = data.get('node_types') or {}
    if not isinstance(node_types, dict):
        raise PricingTableError("node_types must be an object")

    global_modifiers = data.get('global_modifiers') or {}
    if not isinstance(global_modifiers, dict):
        raise PricingTableError("global_modifiers must be an object")

    return PricingTable(
        node_types={str(k): _parse_node_type(str(k), v) for k, v in node_types.items()},
        global_modifiers=global_modifiers,
    )


def load_pricing_table(path: Union[str, Path]) -> PricingTable:
    """
    Load and validate the price table from a JSON file.

    Raises:
        PricingTableError: file missing, unreadable, not JSON, or malformed.
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise PricingTableError(f"Price table not found at {path}") from e
    except json.JSONDecodeError as e:
        raise PricingTableError(f"Price table at {path} is not valid JSON: {e}") from e
    except OSError as e:
        raise PricingTableError(f"Could not read price table at {path}: {e}") from e

    return pricing_table_from_dict(data)


def load_pricing_table_or_empty(path: Union[str, Path]) -> PricingTable:
    """
    Load the price table, falling back to an empty table on any load error.

    With an empty table every lookup reports NODE_TYPE_NOT_FOUND, so requests
    keep working and route everything to manual review.
    """
    try:
        table = load_pricing_table(path)
    except PricingTableError as e:
        logger.error("Failed to load price table, continuing with an empty table: %s", e)
        return PricingTable.empty()

    logger.info("Loaded price table from %s (%d node types)", path, len(table.node_types))
    return table
