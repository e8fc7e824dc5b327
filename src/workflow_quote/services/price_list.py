"""
Price List Service - turns a parsed workflow into a priced item list.

Every node becomes one item. Nodes whose type is missing from the price
table, or priced at zero, are flagged for manual review instead of failing.
"""
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Mapping, Optional

from ..engine import PricingEngine, PriceCalculationResult
from ..workflow.parser import StructuredWorkflow

logger = logging.getLogger(__name__)

UNMAPPED_NOTE = "Requires manual review - node type not in pricing database"


@dataclass
class PriceListItem:
    """A single node on the price list."""
    id: str
    label: str
    node_type: str
    base_price: float
    modifiers: list[str] = field(default_factory=list)
    notes: str = ""
    requires_manual_review: bool = False


@dataclass
class PriceList:
    """Items plus summary totals."""
    items: list[PriceListItem] = field(default_factory=list)
    estimated_base_total: float = 0.0

    @property
    def summary(self) -> dict:
        return {
            "total_items": len(self.items),
            "estimated_base_total": self.estimated_base_total,
        }

    def review_items(self) -> list[PriceListItem]:
        """Items that cannot be priced automatically."""
        return [item for item in self.items if item.requires_manual_review]

    def to_dict(self) -> dict:
        return {
            "items": [asdict(item) for item in self.items],
            "summary": self.summary,
        }


@dataclass
class WorkflowQuote:
    """Per-node calculated prices for a whole workflow."""
    results: dict[str, PriceCalculationResult] = field(default_factory=dict)
    total: float = 0.0
    unpriced: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes": {node_id: r.to_dict() for node_id, r in self.results.items()},
            "total": self.total,
            "unpriced": self.unpriced,
        }


def _format_bound(value: Optional[float]) -> str:
    return f"{value or 0:g}"


def generate_price_list(structured: Optional[StructuredWorkflow], engine: PricingEngine) -> PriceList:
    """
    Build a price list from a parsed workflow.

    Args:
        structured: Output of parse_n8n_to_structured (None yields an empty list)
        engine: Engine providing the node-type price table

    Returns:
        PriceList with one item per node
    """
    if structured is None or not structured.nodes:
        return PriceList()

    price_list = PriceList()
    base_total = 0.0

    for node in structured.nodes:
        pricing = engine.get_pricing_for_node_type(node.node_type)

        if pricing is None:
            logger.info("Node %s has unmapped type %s", node.node_id, node.node_type)
            price_list.items.append(PriceListItem(
                id=node.node_id,
                label=node.short_label,
                node_type=node.node_type,
                base_price=0.0,
                notes=UNMAPPED_NOTE,
                requires_manual_review=True,
            ))
            continue

        rules = pricing.price_rules
        price_list.items.append(PriceListItem(
            id=node.node_id,
            label=node.short_label,
            node_type=node.node_type,
            base_price=pricing.base_price,
            modifiers=pricing.modifier_names,
            notes=f"Min ${_format_bound(rules.min if rules else None)}, Max ${_format_bound(rules.max if rules else None)}",
            # Zero-priced entries exist in the table only as placeholders
            requires_manual_review=pricing.base_price == 0,
        ))
        base_total += pricing.base_price

    price_list.estimated_base_total = round(base_total, 2)
    return price_list


def price_workflow(
    structured: Optional[StructuredWorkflow],
    engine: PricingEngine,
    node_modifiers: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> WorkflowQuote:
    """
    Run the full calculation for every node.

    Args:
        structured: Parsed workflow
        engine: Pricing engine
        node_modifiers: node_id → modifier values for that node

    Returns:
        WorkflowQuote with per-node results, the priced total, and the ids
        of nodes that could not be priced. A repeated node id is priced once
        and its later occurrences are listed as unpriced.
    """
    quote = WorkflowQuote()
    if structured is None:
        return quote

    node_modifiers = node_modifiers or {}
    total = 0.0

    for node in structured.nodes:
        if node.node_id in quote.results:
            logger.warning("Duplicate node id %s in workflow, not priced twice", node.node_id)
            quote.unpriced.append(node.node_id)
            continue

        result = engine.calculate_price_for_node(node.node_type, node_modifiers.get(node.node_id))
        quote.results[node.node_id] = result
        if result.success:
            total += result.final_price
        else:
            quote.unpriced.append(node.node_id)

    quote.total = round(total, 2)
    return quote
