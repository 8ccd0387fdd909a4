"""
Error taxonomy for the order splitter.

Every domain error carries the HTTP status it maps to; the handlers in
``order_splitter.main`` render them as ``{"error": message}``.
"""
from typing import List, Optional


class OrderSplitterError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(OrderSplitterError):
    """Malformed or out-of-range input."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[List[dict]] = None):
        super().__init__(message)
        self.details = details or []


class NotFoundError(OrderSplitterError):
    status_code = 404


class SessionNotFound(NotFoundError):
    def __init__(self, message: str = "Session not found"):
        super().__init__(message)


class FriendNotFound(NotFoundError):
    def __init__(self, message: str = "Friend not found in this session"):
        super().__init__(message)


class CapacityExceeded(OrderSplitterError):
    status_code = 400

    def __init__(self, message: str = "Maximum number of friends already joined this session"):
        super().__init__(message)


class DuplicateName(OrderSplitterError):
    status_code = 400

    def __init__(self, message: str = "A friend with this name already exists in the session"):
        super().__init__(message)


class UpstreamServiceError(OrderSplitterError):
    """The image host rejected or failed an upload."""

    status_code = 500


class PersistenceError(OrderSplitterError):
    status_code = 500
