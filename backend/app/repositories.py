"""Repository pattern for database operations.

The registration service only ever appends documents, so the repository
exposes a single write operation and no read, update or delete path.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from bson import ObjectId

from . import db

logger = logging.getLogger(__name__)

UNKNOWN_IP = 'unknown'


def build_registration_document(submission, ip_address: Optional[str] = None) -> Dict[str, Any]:
    """Map a validated submission onto the stored field names.

    ``timestamp`` is deliberately absent; the database sets it on insert.
    """
    return {
        'parentName': submission.parent_name,
        'email': submission.email,
        'phone': submission.phone,
        'childName': submission.child_name,
        'academicPath': submission.academic_path,
        'message': submission.message or '',
        'ipAddress': ip_address or UNKNOWN_IP,
    }


class RegistrationsRepository:
    """Append-only access to the registrations collection."""

    def __init__(self, collection: Collection):
        """Initialize repository with an already configured collection.

        Args:
            collection: MongoDB collection (or any object with ``update_one``)
        """
        self.collection = collection
        self.collection_name = getattr(collection, 'name', 'registrations')

    @classmethod
    def from_app(cls, app) -> 'RegistrationsRepository':
        return cls(db.get_collection(app.config['REGISTRATIONS_COLLECTION'], app))

    def add(self, submission, ip_address: Optional[str] = None) -> str:
        """Insert a new registration and return its id as a string.

        The insert is an upsert keyed on a freshly generated ObjectId so that
        ``$currentDate`` can stamp ``timestamp`` with the server clock. The
        filter never matches an existing document.
        """
        document = build_registration_document(submission, ip_address)
        try:
            result = self.collection.update_one(
                {'_id': ObjectId()},
                {
                    '$setOnInsert': document,
                    '$currentDate': {'timestamp': True},
                },
                upsert=True,
            )
        except PyMongoError as e:
            logger.error(f"Error inserting document in {self.collection_name}: {e}")
            raise

        document_id = result.upserted_id
        if document_id is None:
            raise PyMongoError(f"Insert into {self.collection_name} did not return an id")
        return str(document_id)
