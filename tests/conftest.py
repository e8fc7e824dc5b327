import json
from pathlib import Path

import pytest

from workflow_quote.config.settings import Settings
from workflow_quote.engine import PricingEngine, pricing_table_from_dict
from workflow_quote.services.review_queue import ReviewQueue

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def table_data():
    """Small price table covering every modifier type and both clamps."""
    return {
        "node_types": {
            "httpRequest": {
                "label": "HTTP Request",
                "base_price": 10,
                "modifiers": [
                    {"name": "concurrency", "type": "per_unit", "price_per_unit": 2},
                    {"name": "attachment_mb", "type": "per_mb", "price_per_unit": 0.5},
                ],
                "price_rules": {"min": 10, "max": 250, "currency": "USD"},
            },
            "webhook": {
                "label": "Webhook",
                "base_price": 25,
                "modifiers": [
                    {"name": "auth_required", "type": "boolean", "price_per_unit": 10},
                    {"name": "payload_size_kb", "type": "per_kb", "price_per_unit": 0.05},
                ],
            },
            "aiAgent": {
                "label": "AI Agent",
                "base_price": 100,
                "modifiers": [
                    {"name": "complexity", "type": "multiplier", "price_per_unit": 1.2},
                    {"name": "autonomy", "type": "multiplier", "price_per_unit": 1.5},
                ],
            },
            "mixed": {
                "label": "Mixed",
                "base_price": 100,
                "modifiers": [
                    {"name": "complexity", "type": "multiplier", "price_per_unit": 2},
                    {"name": "steps", "type": "per_unit", "price_per_unit": 10},
                ],
            },
            "premium": {
                "label": "Premium",
                "base_price": 300,
                "modifiers": [
                    {"name": "extras", "type": "per_unit", "price_per_unit": 100},
                ],
                "price_rules": {"min": 500, "max": 1000, "currency": "EUR"},
            },
            "discounted": {
                "label": "Discounted",
                "base_price": 10,
                "modifiers": [
                    {"name": "discounts", "type": "per_unit", "price_per_unit": -5},
                ],
            },
            "legacy": {
                "label": "Legacy",
                "base_price": 20,
                "modifiers": [
                    {"name": "mystery", "type": "per_fortnight", "price_per_unit": 99},
                ],
            },
            "placeholder": {
                "label": "Placeholder",
                "base_price": 0,
                "modifiers": [],
            },
        },
        "global_modifiers": {
            "rush_delivery": {"type": "multiplier", "price_per_unit": 1.25},
        },
    }


@pytest.fixture
def settings(tmp_path):
    return Settings(
        project_root=tmp_path,
        pricing_table=tmp_path / "translation_key.json",
        review_queue=tmp_path / "review_queue.json",
    )


@pytest.fixture
def engine(settings, table_data):
    """Engine built from an injected table."""
    return PricingEngine(settings, table=pricing_table_from_dict(table_data))


@pytest.fixture
def empty_engine(settings):
    """Engine whose price table file does not exist."""
    return PricingEngine(settings)


@pytest.fixture
def review_queue(tmp_path):
    return ReviewQueue(tmp_path / "queue" / "review_queue.json")


@pytest.fixture
def sample_workflow():
    with open(FIXTURES / "sample_workflow.json", "r", encoding="utf-8") as f:
        return json.load(f)
