"""Unit tests for the validate -> store -> notify sequence using fakes."""
import pytest

from backend.app.services.registration.errors import (
    MethodNotAllowed,
    MissingFieldsError,
    NotificationError,
    StoreWriteError,
)
from backend.app.services.registration.pipeline import RegistrationPipeline
from tests.conftest import valid_payload


class RecordingStore:
    def __init__(self, fail_with=None):
        self.added = []
        self.fail_with = fail_with

    def add(self, submission, ip_address=None):
        if self.fail_with is not None:
            raise self.fail_with
        self.added.append((submission, ip_address))
        return f'doc-{len(self.added)}'


class RecordingNotifier:
    def __init__(self, fail_with=None):
        self.calls = []
        self.fail_with = fail_with

    def notify(self, submission, document_id, *, ip_address):
        self.calls.append((submission, document_id, ip_address))
        if self.fail_with is not None:
            raise self.fail_with


def test_submit_stores_then_notifies():
    store, notifier = RecordingStore(), RecordingNotifier()
    pipeline = RegistrationPipeline(store, notifier)

    document_id = pipeline.submit('POST', valid_payload(), '203.0.113.9')

    assert document_id == 'doc-1'
    assert store.added[0][1] == '203.0.113.9'
    assert notifier.calls[0][1] == 'doc-1'
    assert notifier.calls[0][2] == '203.0.113.9'


def test_notifier_gets_unknown_ip_when_absent():
    notifier = RecordingNotifier()
    RegistrationPipeline(RecordingStore(), notifier).submit('POST', valid_payload())
    assert notifier.calls[0][2] == 'unknown'


def test_rejected_requests_touch_nothing():
    store, notifier = RecordingStore(), RecordingNotifier()
    pipeline = RegistrationPipeline(store, notifier)

    with pytest.raises(MethodNotAllowed):
        pipeline.submit('GET', valid_payload())
    with pytest.raises(MissingFieldsError):
        pipeline.submit('POST', {})

    assert store.added == []
    assert notifier.calls == []


def test_store_failure_is_wrapped_and_skips_notification():
    notifier = RecordingNotifier()
    pipeline = RegistrationPipeline(RecordingStore(fail_with=TimeoutError('write timed out')), notifier)

    with pytest.raises(StoreWriteError) as exc:
        pipeline.submit('POST', valid_payload())

    assert exc.value.details == 'write timed out'
    assert exc.value.document_id is None
    assert notifier.calls == []


def test_notification_failure_is_fatal_by_default():
    store = RecordingStore()
    pipeline = RegistrationPipeline(store, RecordingNotifier(fail_with=ConnectionRefusedError('smtp down')))

    with pytest.raises(NotificationError) as exc:
        pipeline.submit('POST', valid_payload())

    # The record was stored before the email failed
    assert len(store.added) == 1
    assert exc.value.document_id == 'doc-1'
    assert exc.value.details == 'smtp down'


def test_notification_failure_can_degrade_to_warning(caplog):
    store = RecordingStore()
    pipeline = RegistrationPipeline(
        store,
        RecordingNotifier(fail_with=NotificationError('smtp down', document_id='doc-1')),
        notification_failure_fatal=False,
    )

    with caplog.at_level('WARNING'):
        assert pipeline.submit('POST', valid_payload()) == 'doc-1'

    assert len(store.added) == 1
    assert 'staff notification failed: smtp down' in caplog.text


def test_pipeline_without_notifier():
    store = RecordingStore()
    assert RegistrationPipeline(store).submit('POST', valid_payload()) == 'doc-1'
