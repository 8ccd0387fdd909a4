from order_splitter.services.fee_calculator import FeeCalculator, FeeBreakdown
from order_splitter.services.session_aggregator import SessionAggregator, SessionSummary
from order_splitter.services.session_store import SessionStore
from order_splitter.services.session_service import SessionService
from order_splitter.services.image_host import ImageHostService

__all__ = [
    "FeeCalculator", "FeeBreakdown",
    "SessionAggregator", "SessionSummary",
    "SessionStore", "SessionService", "ImageHostService",
]
