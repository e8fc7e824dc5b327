"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


NODE_TYPE_NOT_FOUND = "NODE_TYPE_NOT_FOUND"
DEFAULT_CURRENCY = "USD"


class ModifierType(str, Enum):
    """Known modifier types. Anything else prices as a zero-cost no-op."""
    PER_UNIT = "per_unit"
    PER_MB = "per_mb"
    PER_KB = "per_kb"
    BOOLEAN = "boolean"
    MULTIPLIER = "multiplier"


@dataclass
class ModifierRule:
    """A parameterized adjustment declared on a node type."""
    name: str
    type: str  # raw string so unknown types survive loading
    price_per_unit: float = 0.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "price_per_unit": self.price_per_unit,
        }


@dataclass
class PriceRules:
    """Clamp bounds and currency applied after all modifiers."""
    min: Optional[float] = None
    max: Optional[float] = None
    currency: Optional[str] = None

    def to_dict(self) -> dict:
        data = {}
        if self.min is not None:
            data["min"] = self.min
        if self.max is not None:
            data["max"] = self.max
        if self.currency is not None:
            data["currency"] = self.currency
        return data


@dataclass
class NodeTypePricing:
    """Pricing entry for one node type."""
    label: str
    base_price: float
    modifiers: list[ModifierRule] = field(default_factory=list)
    price_rules: Optional[PriceRules] = None

    @property
    def modifier_names(self) -> list[str]:
        return [m.name for m in self.modifiers]

    def to_dict(self) -> dict:
        """Serialize back to the price table JSON shape."""
        data = {
            "label": self.label,
            "base_price": self.base_price,
            "modifiers": [m.to_dict() for m in self.modifiers],
        }
        if self.price_rules is not None:
            data["price_rules"] = self.price_rules.to_dict()
        return data


@dataclass
class PricingTable:
    """The full node-type price table, read once and never mutated."""
    node_types: dict[str, NodeTypePricing] = field(default_factory=dict)
    global_modifiers: dict = field(default_factory=dict)

    @classmethod
    def empty(cls) -> 'PricingTable':
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.node_types


@dataclass
class BreakdownLine:
    """A single price-contributing line item."""
    description: str
    amount: float

    def to_dict(self) -> dict:
        return {"description": self.description, "amount": self.amount}


@dataclass
class PriceCalculationResult:
    """Complete result of pricing one node."""
    success: bool
    node_type: str
    base_price: float = 0.0
    final_price: float = 0.0
    currency: str = DEFAULT_CURRENCY
    breakdown: list[BreakdownLine] = field(default_factory=list)

    # Failure details
    error: Optional[str] = None
    message: Optional[str] = None
    price: Optional[float] = None

    @classmethod
    def not_found(cls, node_type: str) -> 'PriceCalculationResult':
        """Result for a node type that cannot be priced automatically."""
        return cls(
            success=False,
            node_type=node_type,
            error=NODE_TYPE_NOT_FOUND,
            message=f"Pricing information not found for node type: {node_type}",
            price=0,
        )

    def add_line(self, description: str, amount: float):
        """Append a line to the breakdown."""
        self.breakdown.append(BreakdownLine(description=description, amount=amount))

    def get_breakdown_text(self) -> str:
        """Get human-readable breakdown as formatted text."""
        return "\n".join(
            f"→ {line.description} = ${line.amount:.2f}" for line in self.breakdown
        )

    def to_dict(self) -> dict:
        """Convert to the JSON shape returned by the HTTP layer."""
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "message": self.message,
                "price": self.price if self.price is not None else 0,
            }
        return {
            "success": True,
            "node_type": self.node_type,
            "base_price": self.base_price,
            "final_price": self.final_price,
            "breakdown": [line.to_dict() for line in self.breakdown],
            "currency": self.currency,
        }
