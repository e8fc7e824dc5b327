"""Engine subpackage - core pricing logic and price table loading."""
from .pricing_engine import PricingEngine, apply_modifier
from .pricing_table import (
    PricingTableError,
    load_pricing_table,
    load_pricing_table_or_empty,
    pricing_table_from_dict,
)
from .models import (
    NODE_TYPE_NOT_FOUND,
    BreakdownLine,
    ModifierRule,
    ModifierType,
    NodeTypePricing,
    PriceCalculationResult,
    PriceRules,
    PricingTable,
)

__all__ = [
    'PricingEngine', 'apply_modifier',
    'PricingTableError', 'load_pricing_table', 'load_pricing_table_or_empty', 'pricing_table_from_dict',
    'NODE_TYPE_NOT_FOUND', 'BreakdownLine', 'ModifierRule', 'ModifierType',
    'NodeTypePricing', 'PriceCalculationResult', 'PriceRules', 'PricingTable',
]
