"""
Process-wide service instances shared by the API routers.

The price table is loaded once here at startup and only read afterwards.
"""
from ..config.settings import get_settings
from ..engine import PricingEngine
from ..services.review_queue import ReviewQueue

settings = get_settings()
engine = PricingEngine(settings)
review_queue = ReviewQueue(settings.review_queue)
