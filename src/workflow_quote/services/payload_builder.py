"""
Compact LLM payload construction.

Strips the price list down to what a model needs to propose quote changes,
to keep token usage low.
"""
import json
import math
from typing import Any, Optional

from .price_list import PriceList


def build_compact_payload(
    price_list: Optional[PriceList],
    customer_text: Optional[str] = None,
    business_rules: Optional[dict] = None,
) -> dict:
    """Build {workflow, customer_text, business_rules} from a price list."""
    workflow = []
    if price_list is not None:
        workflow = [
            {
                "id": item.id,
                "label": item.label,
                "node_type": item.node_type,
                "base": item.base_price,
                "modifiers": list(item.modifiers),
            }
            for item in price_list.items
        ]

    return {
        "workflow": workflow,
        "customer_text": customer_text or "",
        "business_rules": business_rules or {},
    }


def estimate_token_count(text: Optional[str]) -> int:
    """Rough estimate: one token per four characters."""
    if not text:
        return 0
    return math.ceil(len(text) / 4)


def _serialize(payload: Any) -> str:
    return json.dumps(payload, separators=(',', ':'), ensure_ascii=False)


def compare_payload_sizes(full_payload: Any, compact_payload: Any) -> dict:
    """Character and token savings of the compact payload."""
    full_str = _serialize(full_payload)
    compact_str = _serialize(compact_payload)

    full_size = len(full_str)
    compact_size = len(compact_str)
    reduction = full_size - compact_size
    reduction_percent = round(reduction / full_size * 100, 2) if full_size else 0.0

    full_tokens = estimate_token_count(full_str)
    compact_tokens = estimate_token_count(compact_str)

    return {
        "full_size_chars": full_size,
        "compact_size_chars": compact_size,
        "reduction_chars": reduction,
        "reduction_percent": reduction_percent,
        "full_tokens_estimate": full_tokens,
        "compact_tokens_estimate": compact_tokens,
        "token_reduction_estimate": full_tokens - compact_tokens,
    }
