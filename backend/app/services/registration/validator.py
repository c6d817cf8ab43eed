"""Validation of incoming registration submissions.

``validate_submission`` either returns a ``Submission`` ready to be stored
or raises one of the validation errors from ``errors``. It never touches the
database or the mail server.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import InvalidEmailError, MethodNotAllowed, MissingFieldsError

REQUIRED_FIELDS = ('parentName', 'email', 'phone', 'childName', 'academicPath')

# Permissive on purpose: rejects only addresses without '@', without a dot in
# the domain part, or with embedded whitespace. Used with fullmatch so a
# trailing newline is rejected too.
EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


@dataclass(frozen=True)
class Submission:
    parent_name: str
    email: str
    phone: str
    child_name: str
    academic_path: str
    message: str = ''


def _validate_email(email: Any) -> bool:
    if not isinstance(email, str):
        return False
    return EMAIL_RE.fullmatch(email) is not None


def find_missing_fields(payload: Dict[str, Any]) -> List[str]:
    """Return every required key that is absent or falsy, in declared order."""
    return [field for field in REQUIRED_FIELDS if not payload.get(field)]


def validate_submission(method: Optional[str], payload: Any) -> Submission:
    """Check a raw submission and build the normalized ``Submission``.

    Args:
        method: HTTP method of the request; only ``POST`` is accepted
        payload: Decoded JSON body. Anything other than an object is treated
            as an empty object.

    Raises:
        MethodNotAllowed: method is not POST (nothing else is checked)
        MissingFieldsError: lists all missing required fields at once
        InvalidEmailError: email does not look like an address
    """
    if method != 'POST':
        raise MethodNotAllowed(method)

    if not isinstance(payload, dict):
        payload = {}

    missing = find_missing_fields(payload)
    if missing:
        raise MissingFieldsError(missing)

    email = payload['email']
    if not _validate_email(email):
        raise InvalidEmailError(email)

    return Submission(
        parent_name=payload['parentName'],
        email=email,
        phone=payload['phone'],
        child_name=payload['childName'],
        academic_path=payload['academicPath'],
        message=payload.get('message') or '',
    )
