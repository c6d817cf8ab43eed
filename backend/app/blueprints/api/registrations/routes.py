"""Registration intake endpoint.

Routes:
- POST /api/registrations
- POST /.netlify/functions/submitRegistration (alias, registered in create_app)

Every other method is routed here too so that it receives the JSON 405 body.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

from flask import Blueprint, current_app, jsonify, request

from backend.app.services.registration.errors import InternalError, RegistrationError
from backend.app.services.registration.responses import (
    error_response,
    success_response,
    unexpected_error_response,
)

logger = logging.getLogger(__name__)

registrations_bp = Blueprint('registrations', __name__)

ACCEPTED_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']

CLIENT_IP_HEADERS = ('Client-IP', 'X-Forwarded-For', 'X-Real-IP')


def get_client_ip() -> Optional[str]:
    """Best-effort client address from proxy headers, or None."""
    for header in CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if not value:
            continue
        # X-Forwarded-For is "client, proxy1, proxy2"
        value = value.split(',', 1)[0].strip()
        if value:
            return value
    return None


def _parse_body() -> Any:
    """Decode the request body as JSON whatever the Content-Type says.

    Raises:
        InternalError: body is not valid JSON
    """
    raw = request.get_data(as_text=True)
    try:
        return json.loads(raw)
    except ValueError as e:
        raise InternalError(str(e)) from e


def get_pipeline():
    return current_app.extensions['registration_pipeline']


@registrations_bp.route('', methods=ACCEPTED_METHODS)
def submit_registration():
    """Validate, store and announce a registration."""
    method = request.method
    try:
        # Method is checked before the body is read
        payload = _parse_body() if method == 'POST' else None
        document_id = get_pipeline().submit(method, payload, get_client_ip())
        body, status = success_response(document_id)
    except RegistrationError as e:
        if isinstance(e, InternalError):
            logger.error('Registration request failed at %s stage: %s', e.stage, e.details)
        body, status = error_response(e)
    except Exception as e:
        logger.exception('Unexpected error handling registration')
        body, status = unexpected_error_response(e)
    return jsonify(body), status
