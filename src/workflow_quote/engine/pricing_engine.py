"""
Pricing Engine - per-node price calculation with an itemized breakdown.

Given a node type and the caller's modifier values, the engine:
- Looks up the node type in the price table
- Starts from the base price
- Applies each declared modifier in declaration order
- Clamps to the min then max price rule
- Floors at zero and rounds to cents

Unknown node types are reported in the result (NODE_TYPE_NOT_FOUND), never
raised, so callers can route them to manual review.
"""
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from ..config.settings import get_settings, Settings
from .models import (
    DEFAULT_CURRENCY,
    ModifierRule,
    ModifierType,
    NodeTypePricing,
    PriceCalculationResult,
    PricingTable,
)
from .pricing_table import load_pricing_table_or_empty

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_quantity(value: Any) -> Optional[float]:
    """Coerce a caller-supplied quantity; None when it is not numeric."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def apply_modifier(rule: ModifierRule, value: Any, running_total: float) -> tuple[float, str]:
    """
    Apply a single modifier rule.

    Returns (cost, description). Multipliers scale running_total, the price
    accumulated so far, not the base price.
    """
    ppu = rule.price_per_unit
    shown = _format_value(value)

    if rule.type in (ModifierType.PER_UNIT, ModifierType.PER_MB, ModifierType.PER_KB):
        quantity = _as_quantity(value)
        if quantity is None:
            logger.warning("Non-numeric value %r for modifier %s", value, rule.name)
            return 0.0, f"{rule.name}: Invalid value {shown}"

        cost = quantity * ppu
        if rule.type == ModifierType.PER_MB:
            return cost, f"{rule.name}: {shown} MB × ${ppu:.2f}/MB"
        if rule.type == ModifierType.PER_KB:
            return cost, f"{rule.name}: {shown} KB × ${ppu:.2f}/KB"
        return cost, f"{rule.name}: {shown} × ${ppu:.2f}"

    elif rule.type == ModifierType.BOOLEAN:
        if value:
            return ppu, f"{rule.name}: Yes (+${ppu:.2f})"
        return 0.0, f"{rule.name}: No (+$0.00)"

    elif rule.type == ModifierType.MULTIPLIER:
        cost = running_total * (ppu - 1)
        return cost, f"{rule.name}: {shown} × {ppu:.2f}x"

    logger.debug("Unknown modifier type %r on %s", rule.type, rule.name)
    return 0.0, f"{rule.name}: Unknown modifier type"


class PricingEngine:
    """
    Prices workflow nodes against an immutable node-type price table.

    The table is either injected or loaded once from settings.pricing_table.
    A missing or malformed file yields an empty table, in which case every
    node type reports NODE_TYPE_NOT_FOUND.
    """

    def __init__(self, settings: Optional[Settings] = None, table: Optional[PricingTable] = None):
        """Initialize engine with an injected table or the configured file."""
        self.settings = settings or get_settings()
        self.table_path = Path(self.settings.pricing_table)

        if table is None:
            table = load_pricing_table_or_empty(self.table_path)
        self.table = table

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'PricingEngine':
        """Build an engine from an explicit price table file."""
        return cls(table=load_pricing_table_or_empty(path))

    @property
    def loaded(self) -> bool:
        return not self.table.is_empty

    def get_pricing_for_node_type(self, node_type: str) -> Optional[NodeTypePricing]:
        """Return the pricing entry for node_type, or None if unknown."""
        if not self.table or not self.table.node_types:
            return None
        return self.table.node_types.get(node_type)

    def calculate_price_for_node(
        self,
        node_type: str,
        modifiers: Optional[Mapping[str, Any]] = None,
    ) -> PriceCalculationResult:
        """
        Calculate the price for one node with a full breakdown.

        Args:
            node_type: Node type key, e.g. "httpRequest"
            modifiers: Modifier name → value, e.g. {"concurrency": 3}.
                Names missing or mapped to None are skipped.

        Returns:
            PriceCalculationResult; success=False for unknown node types
        """
        pricing = self.get_pricing_for_node_type(node_type)
        if pricing is None:
            return PriceCalculationResult.not_found(node_type)

        modifiers = modifiers or {}
        price_rules = pricing.price_rules

        result = PriceCalculationResult(
            success=True,
            node_type=node_type,
            base_price=pricing.base_price,
            currency=(price_rules.currency if price_rules and price_rules.currency else DEFAULT_CURRENCY),
        )

        calculated = pricing.base_price
        result.add_line(f"{pricing.label} (base)", pricing.base_price)

        for rule in pricing.modifiers:
            value = modifiers.get(rule.name)
            if value is None:
                continue

            cost, description = apply_modifier(rule, value, calculated)
            calculated += cost
            result.add_line(description, cost)

        # Zero or missing bounds are treated as unset
        if price_rules:
            if price_rules.min and calculated < price_rules.min:
                result.add_line("Minimum price adjustment", price_rules.min - calculated)
                calculated = price_rules.min

            if price_rules.max and calculated > price_rules.max:
                result.add_line("Maximum price adjustment", price_rules.max - calculated)
                calculated = price_rules.max

        calculated = max(0.0, calculated)
        result.final_price = round(calculated, 2)
        return result

    def get_available_node_types(self) -> list[str]:
        """All node type keys in the table, in file order."""
        if not self.table or not self.table.node_types:
            return []
        return list(self.table.node_types.keys())

    def get_global_modifiers(self) -> dict:
        """Raw global modifiers passthrough."""
        if not self.table or not self.table.global_modifiers:
            return {}
        return self.table.global_modifiers
