from fastapi import HTTPException
from typing import Optional, Dict, Any

from txvault.domain.envelope.errors import EnvelopeError


def api_error(
    code: str,
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None
) -> HTTPException:
    """Build a standardized API HTTPException.

    Args:
        code: Error code (VALIDATION_FAILED, DECRYPT_FAILED, NOT_FOUND, etc.)
        status_code: HTTP Status Code (400, 404, etc.)
        message: Human readable message
        details: Optional extra details
    """
    error_body: Dict[str, Any] = {
        "code": code,
        "message": message
    }
    if details:
        error_body["details"] = details

    return HTTPException(status_code=status_code, detail={"error": error_body})


def raise_envelope_error(exc: EnvelopeError, status_code: int = 400) -> None:
    """Translate a domain error into an API error naming the offending field."""
    details = {"field": exc.field} if exc.field else None
    raise api_error(exc.code, status_code, exc.message, details) from exc
