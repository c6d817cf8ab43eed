"""Shared fixtures: an in-memory registrations collection and a fake mailer."""
from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from backend.app import create_app
from backend.app.config import TestingConfig
from backend.app.repositories import RegistrationsRepository

SERVER_TIME = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


class FakeCollection:
    """Implements the subset of pymongo's Collection used by the repository."""

    name = 'registrations'

    def __init__(self):
        self.documents: List[Dict[str, Any]] = []
        self.calls: List[tuple] = []

    def update_one(self, filter_dict, update, upsert=False):
        self.calls.append((filter_dict, update, upsert))
        if any(doc['_id'] == filter_dict['_id'] for doc in self.documents):
            return SimpleNamespace(matched_count=1, upserted_id=None)
        assert upsert, 'registrations must be inserted with upsert=True'
        doc = {'_id': filter_dict['_id']}
        doc.update(update.get('$setOnInsert', {}))
        for field in update.get('$currentDate', {}):
            doc[field] = SERVER_TIME
        self.documents.append(doc)
        return SimpleNamespace(matched_count=0, upserted_id=filter_dict['_id'])


class FakeMail:
    def __init__(self, fail_with: Exception = None):
        self.sent = []
        self.fail_with = fail_with

    def send(self, message):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)


class NotifyingTestConfig(TestingConfig):
    NOTIFICATIONS_ENABLED = True
    NOTIFICATION_FAILURE_FATAL = True
    MAIL_SERVER = 'smtp.academy.test'
    MAIL_USERNAME = 'robot@academy.test'
    MAIL_PASSWORD = 'secret'
    MAIL_DEFAULT_SENDER = 'robot@academy.test'
    NOTIFICATION_ADDRESS = 'admissions@academy.test'
    REGISTRATION_CONSOLE_URL = 'https://console.academy.test/registrations'


class DegradedNotifyTestConfig(NotifyingTestConfig):
    NOTIFICATION_FAILURE_FATAL = False


def valid_payload(**overrides) -> Dict[str, Any]:
    payload = {
        'parentName': 'Maria Lopez',
        'email': 'maria@example.com',
        'phone': '+1 555 0100',
        'childName': 'Lucas Lopez',
        'academicPath': 'robotics',
        'message': 'Lucas is interested in the weekend group.',
    }
    payload.update(overrides)
    return {k: v for k, v in payload.items() if v is not None}


@pytest.fixture(name="collection")
def fixture_collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture(name="mailer")
def fixture_mailer() -> FakeMail:
    return FakeMail()


@pytest.fixture(name="app")
def fixture_app(collection):
    return create_app(TestingConfig, store=RegistrationsRepository(collection))


@pytest.fixture(name="client")
def fixture_client(app):
    return app.test_client()
