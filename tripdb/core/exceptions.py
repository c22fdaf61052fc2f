"""
Custom exceptions for the document store and the domain services.

Read misses are not exceptions: ``find_by_id`` and the ``find_by_*`` helpers
return ``None`` or an empty list. Everything below is raised.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for the store and domain layer."""

    # Store errors
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    UNKNOWN_COLLECTION = "UNKNOWN_COLLECTION"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"

    # Domain errors
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    REFUND_EXCEEDS_AMOUNT = "REFUND_EXCEEDS_AMOUNT"


class TripDBException(Exception):
    """Base exception for tripdb."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(TripDBException):
    """Raised when a write needs an existing document and there is none."""

    def __init__(self, collection: str, document_id: str):
        super().__init__(
            message=f"Document with id {document_id} not found in {collection}",
            error_code=ErrorCode.DOCUMENT_NOT_FOUND,
            details={"collection": collection, "document_id": document_id},
            status_code=404
        )


class StoreConfigurationError(TripDBException):
    """Raised when an unknown collection is requested. Always a programming error."""

    def __init__(self, collection: str):
        super().__init__(
            message=f'Store "{collection}" does not exist',
            error_code=ErrorCode.UNKNOWN_COLLECTION,
            details={"collection": collection},
            status_code=500
        )


class VersionConflictError(TripDBException):
    """Raised when an optimistic write carries a stale version."""

    def __init__(self, collection: str, document_id: str, expected: int, actual: int):
        super().__init__(
            message=(
                f"Document {document_id} in {collection} is at version {actual}, "
                f"write expected version {expected}"
            ),
            error_code=ErrorCode.VERSION_CONFLICT,
            details={
                "collection": collection,
                "document_id": document_id,
                "expected_version": expected,
                "actual_version": actual,
            },
            status_code=409
        )


class StoreBackendError(TripDBException):
    """Raised when the blob backend fails for any reason other than a missing key."""

    def __init__(self, operation: str, key: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        target = f" for key '{key}'" if key else ""
        super().__init__(
            message=f"Blob backend {operation} failed{target}",
            error_code=ErrorCode.BACKEND_UNAVAILABLE,
            details=details or {"operation": operation, "key": key},
            status_code=503
        )


class InvalidStatusTransitionError(TripDBException):
    """Raised when an entity is moved to a status its current status cannot reach."""

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(
            message=f"Cannot move {entity} from '{current}' to '{target}'",
            error_code=ErrorCode.INVALID_STATUS_TRANSITION,
            details={"entity": entity, "current": current, "target": target},
            status_code=409
        )


class RefundExceedsAmountError(TripDBException):
    """Raised when refunds on a payment would add up to more than was paid."""

    def __init__(self, payment_id: str, requested: float, refundable: float):
        super().__init__(
            message=f"Refund of {requested} exceeds refundable {refundable} on payment {payment_id}",
            error_code=ErrorCode.REFUND_EXCEEDS_AMOUNT,
            details={
                "payment_id": payment_id,
                "requested": requested,
                "refundable": refundable,
            },
            status_code=422
        )
