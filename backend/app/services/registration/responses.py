"""Map pipeline outcomes to ``(body, status)`` pairs for the routes."""
from __future__ import annotations

from typing import Any, Dict, Tuple

from .errors import InternalError, MissingFieldsError, RegistrationError

Response = Tuple[Dict[str, Any], int]


def success_response(document_id: str) -> Response:
    return {'success': True, 'documentId': document_id}, 200


def error_response(error: RegistrationError) -> Response:
    body: Dict[str, Any] = {'error': error.message}
    if isinstance(error, MissingFieldsError):
        body['missingFields'] = error.missing_fields
    elif isinstance(error, InternalError):
        body['details'] = error.details
    return body, error.status


def unexpected_error_response(exc: Exception) -> Response:
    return error_response(InternalError(str(exc)))
