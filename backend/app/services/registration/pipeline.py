"""Registration pipeline: validate, store, notify.

The pipeline receives its collaborators when the application starts and
keeps no per-request state, so one instance serves every request.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from .errors import NotificationError, StoreWriteError
from .validator import validate_submission

logger = logging.getLogger(__name__)


class RegistrationPipeline:
    def __init__(self, store, notifier=None, *, notification_failure_fatal: bool = True):
        """
        Args:
            store: object with ``add(submission, ip_address) -> str``
            notifier: optional object with ``notify(submission, document_id, ip_address=...)``
            notification_failure_fatal: re-raise notification failures after the
                registration is stored instead of only logging them
        """
        self.store = store
        self.notifier = notifier
        self.notification_failure_fatal = notification_failure_fatal

    def submit(self, method: Optional[str], payload: Any, ip_address: Optional[str] = None) -> str:
        """Run one submission through the pipeline and return the document id.

        Raises:
            MethodNotAllowed, MissingFieldsError, InvalidEmailError: before any write
            StoreWriteError: the registration was not stored
            NotificationError: stored, but the staff email failed (fatal mode only)
        """
        submission = validate_submission(method, payload)

        try:
            document_id = self.store.add(submission, ip_address)
        except Exception as e:
            logger.exception('Failed to store registration for %s', submission.email)
            raise StoreWriteError(str(e)) from e
        logger.info('Stored registration %s for %s', document_id, submission.email)

        if self.notifier is not None:
            self._notify(submission, document_id, ip_address)

        return document_id

    def _notify(self, submission, document_id: str, ip_address: Optional[str]) -> None:
        try:
            self.notifier.notify(submission, document_id, ip_address=ip_address or 'unknown')
        except Exception as e:
            details = e.details if isinstance(e, NotificationError) else str(e)
            if not self.notification_failure_fatal:
                logger.warning('Registration %s stored; staff notification failed: %s', document_id, details)
                return
            logger.error('Registration %s stored but staff notification failed: %s', document_id, details)
            if isinstance(e, NotificationError):
                raise
            raise NotificationError(details, document_id=document_id) from e
