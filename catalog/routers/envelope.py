"""
Response envelope shared by all catalog endpoints.

Every response body has the shape ``{"data": ..., "warning": ..., "error": ...}``
with ``warning`` and ``error`` present only when set.
"""

from typing import Any, Dict, Optional, Tuple

from ..domain.exceptions import (
    CatalogError,
    CategoryReferenceError,
    DuplicateError,
    StorageError,
    ValidationError,
)
from ..repositories.base import QueryResult

LIMIT_EXCEEDED = "limit_exceeded"

# Ordered most specific first
ERROR_STATUS: Tuple[Tuple[type, int, str], ...] = (
    (ValidationError, 400, "validation_error"),
    (CategoryReferenceError, 422, "unknown_reference"),
    (DuplicateError, 409, "duplicate"),
    (StorageError, 500, "storage_error"),
    (CatalogError, 500, "internal_error"),
)


def data_envelope(data: Any, result: Optional[QueryResult] = None) -> Dict[str, Any]:
    """
    Wrap response data, adding the limit warning when results were cut.

    Args:
        data: JSON-serialisable payload
        result: Outcome of the streaming query that produced ``data``
    """
    body: Dict[str, Any] = {"data": data}
    if result is not None and result.has_more:
        body["warning"] = {
            "code": LIMIT_EXCEEDED,
            "message": f"Only the first {result.count} objects are returned, narrow the query to see the rest",
        }
    return body


def error_envelope(exc: CatalogError, request_id: str = "") -> Tuple[int, Dict[str, Any]]:
    """Map a domain error to an HTTP status and error body."""
    for error_type, status_code, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    error: Dict[str, Any] = {"code": code, "message": exc.message}
    if exc.details and not isinstance(exc, StorageError):
        error["details"] = exc.details
    trace_id = exc.trace_id or request_id
    if trace_id:
        error["trace_id"] = trace_id
    return status_code, {"error": error}
