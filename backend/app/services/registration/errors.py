"""Error types raised by the registration pipeline.

Every error carries the HTTP status it maps to so routes can shape a
response without knowing which stage failed.
"""
from __future__ import annotations

from typing import List, Optional


class RegistrationError(Exception):
    def __init__(self, code: str, message: str, status: int = 400):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status


class MethodNotAllowed(RegistrationError):
    def __init__(self, method: Optional[str] = None):
        super().__init__('method_not_allowed', 'Method Not Allowed', 405)
        self.method = method


class ValidationError(RegistrationError):
    pass


class MissingFieldsError(ValidationError):
    def __init__(self, missing_fields: List[str]):
        super().__init__('missing_fields', 'Missing required fields', 400)
        self.missing_fields = list(missing_fields)


class InvalidEmailError(ValidationError):
    def __init__(self, email: Optional[str] = None):
        super().__init__('invalid_email', 'Invalid email format', 400)
        self.email = email


class InternalError(RegistrationError):
    """Failure after validation passed. ``details`` is the underlying message."""

    stage = 'internal'

    def __init__(self, details: str, document_id: Optional[str] = None):
        super().__init__('internal_error', 'Internal Server Error', 500)
        self.details = details
        # Set when the record was stored before the failure happened
        self.document_id = document_id


class StoreWriteError(InternalError):
    stage = 'store'


class NotificationError(InternalError):
    stage = 'notify'
