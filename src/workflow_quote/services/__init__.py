"""Services subpackage - price lists, LLM payloads, quote validation, review queue."""
from .price_list import PriceList, PriceListItem, WorkflowQuote, generate_price_list, price_workflow
from .payload_builder import build_compact_payload, compare_payload_sizes, estimate_token_count
from .quote_validator import QuoteValidation, parse_json_string, validate_llm_quote
from .review_queue import ReviewItem, ReviewQueue

__all__ = [
    'PriceList', 'PriceListItem', 'WorkflowQuote', 'generate_price_list', 'price_workflow',
    'build_compact_payload', 'compare_payload_sizes', 'estimate_token_count',
    'QuoteValidation', 'parse_json_string', 'validate_llm_quote',
    'ReviewItem', 'ReviewQueue',
]
