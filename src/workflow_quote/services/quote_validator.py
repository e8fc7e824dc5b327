"""
Quote Validator - checks an LLM-proposed quote against the workflow it was
generated from and the price table bounds.

Nothing here raises for bad model output: problems are collected as
validation errors and review reasons so the quote can be queued for a human.
"""
import json
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from ..engine import PricingEngine

REQUIRED_QUOTE_FIELDS = ('items', 'total_price', 'total_delta', 'flags', 'remarks')
REQUIRED_ITEM_FIELDS = (
    'item_id', 'action', 'requested_change', 'new_price', 'price_delta',
    'reason', 'mapping_confidence', 'requires_manual_review',
)
LOW_CONFIDENCE_THRESHOLD = 0.6
TOTAL_TOLERANCE = 0.01


@dataclass
class QuoteValidation:
    """Outcome of validating an LLM quote."""
    validated_quote: Optional[dict] = None
    validation_errors: list[str] = field(default_factory=list)
    requires_review: bool = False
    review_reasons: list[str] = field(default_factory=list)

    def add_reason(self, reason: str):
        """Add a review reason once."""
        if reason not in self.review_reasons:
            self.review_reasons.append(reason)

    def to_dict(self) -> dict:
        return {
            "validated_quote": self.validated_quote,
            "validation_errors": self.validation_errors,
            "requires_review": self.requires_review,
            "review_reasons": self.review_reasons,
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_item_id(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def validate_llm_quote(llm_json: Any, compact_payload: Any, engine: PricingEngine) -> QuoteValidation:
    """
    Validate an LLM response of the form {"quote": {...}}.

    Args:
        llm_json: Decoded model response
        compact_payload: The payload the model was given (see build_compact_payload)
        engine: Engine used for min/max bounds lookups

    Returns:
        QuoteValidation with recomputed totals in validated_quote
    """
    result = QuoteValidation()

    if not llm_json or not compact_payload:
        result.validation_errors.append('Invalid input: LLM JSON or original workflow is missing')
        result.requires_review = True
        result.add_reason('Missing required input data')
        return result

    quote = llm_json.get('quote') if isinstance(llm_json, dict) else None
    if not isinstance(quote, dict):
        result.validation_errors.append('Missing quote object in LLM response')
        result.requires_review = True
        result.add_reason('Invalid LLM response structure')
        return result

    for name in REQUIRED_QUOTE_FIELDS:
        if name not in quote:
            result.validation_errors.append(f"Missing required field in quote: {name}")

    if result.validation_errors:
        result.requires_review = True
        result.add_reason('Missing required fields in quote')
        return result

    workflow_items = {}
    if isinstance(compact_payload, dict) and isinstance(compact_payload.get('workflow'), list):
        workflow_items = {
            item['id']: item for item in compact_payload['workflow']
            if isinstance(item, dict) and _is_item_id(item.get('id'))
        }
    business_rules = compact_payload.get('business_rules') if isinstance(compact_payload, dict) else None

    validated_items = []
    total_new_price = 0.0
    total_delta = 0.0

    items = quote['items'] if isinstance(quote['items'], list) else []
    for item in items:
        if not isinstance(item, dict):
            result.validation_errors.append(f"Quote item is not an object: {item!r}")
            continue

        validated = dict(item)
        item_id = item.get('item_id')
        shown_id = item_id or 'unknown'

        for name in REQUIRED_ITEM_FIELDS:
            if name not in item:
                result.validation_errors.append(f"Missing required field in item {shown_id}: {name}")

        if item_id is not None and not _is_item_id(item_id):
            result.validation_errors.append(f"Item ID {item_id!r} not found in original workflow")
            validated['requires_manual_review'] = True
            result.add_reason('Item ID not found in original workflow')
            item_id = None
        elif item_id and item_id not in workflow_items:
            result.validation_errors.append(f"Item ID {item_id} not found in original workflow")
            validated['requires_manual_review'] = True
            result.add_reason('Item ID not found in original workflow')

        confidence = item.get('mapping_confidence')
        if _is_number(confidence):
            if confidence < 0 or confidence > 1:
                result.validation_errors.append(
                    f"Mapping confidence for item {shown_id} must be between 0 and 1"
                )
            elif confidence < LOW_CONFIDENCE_THRESHOLD:
                validated['requires_manual_review'] = True
                result.add_reason('Low mapping confidence')

        new_price = item.get('new_price')
        if item_id in workflow_items and _is_number(new_price):
            original = workflow_items[item_id]
            pricing = engine.get_pricing_for_node_type(original.get('node_type') or original.get('type'))
            if pricing is not None and pricing.price_rules is not None:
                min_price = pricing.price_rules.min or 0
                max_price = pricing.price_rules.max or math.inf
                if new_price < min_price or new_price > max_price:
                    result.validation_errors.append(
                        f"Price for item {item_id} ({new_price}) is out of bounds ({min_price:g}-{max_price:g})"
                    )
                    result.add_reason('Price out of bounds')

        if item.get('action') == 'add' and isinstance(business_rules, dict) and not business_rules.get('allow_new_item'):
            result.validation_errors.append(f"New item {shown_id} not allowed by business rules")
            validated['requires_manual_review'] = True
            result.add_reason('New item not allowed')

        validated_items.append(validated)
        if _is_number(new_price):
            total_new_price += new_price
        if _is_number(item.get('price_delta')):
            total_delta += item['price_delta']

    calculated_total = round(total_new_price, 2)
    calculated_delta = round(total_delta, 2)

    reported_total = quote.get('total_price')
    if not _is_number(reported_total) or abs(reported_total - calculated_total) > TOTAL_TOLERANCE:
        result.validation_errors.append(
            f"Total price mismatch: reported {reported_total}, calculated {calculated_total}"
        )

    reported_delta = quote.get('total_delta')
    if not _is_number(reported_delta) or abs(reported_delta - calculated_delta) > TOTAL_TOLERANCE:
        result.validation_errors.append(
            f"Total delta mismatch: reported {reported_delta}, calculated {calculated_delta}"
        )

    flags = quote.get('flags')
    if flags is None:
        flags = []
    elif not isinstance(flags, list):
        result.validation_errors.append(f"Quote flags must be a list, got {flags!r}")
        flags = []
    if 'out_of_bounds' in flags:
        result.add_reason('Price out of bounds')
    if 'requires_manual_review' in flags:
        result.requires_review = True
        result.add_reason('LLM requested manual review')

    if result.validation_errors:
        result.requires_review = True

    result.validated_quote = {
        **quote,
        "items": validated_items,
        "total_price": calculated_total,
        "total_delta": calculated_delta,
    }
    return result


def parse_json_string(text: str) -> tuple[bool, Any]:
    """Returns (True, data) or (False, error message)."""
    try:
        return True, json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        return False, str(e)
