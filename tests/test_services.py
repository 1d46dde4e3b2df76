"""Unit tests for the config, ingestion and query services."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from datastore.document_store import DocumentStore
from models.records import ConfigUpdateEvent, DataUpdateEvent
from services.config_service import ConfigService
from services.errors import ValidationError
from services.ingestion import IngestionService
from services.notifier import BroadcastNotifier
from services.query import RECENT_READINGS_LIMIT, QueryService


@pytest.fixture
def store() -> DocumentStore:
    return DocumentStore()


@pytest.fixture
def notifier() -> BroadcastNotifier:
    return BroadcastNotifier()


def test_ensure_config_exists_creates_default(store: DocumentStore, notifier) -> None:
    service = ConfigService(store=store, notifier=notifier)

    config = service.ensure_config_exists()

    assert config.threshold == 30.0
    assert store.get_config() == config


def test_ensure_config_exists_is_idempotent(store: DocumentStore, notifier) -> None:
    service = ConfigService(store=store, notifier=notifier)
    service.set_threshold(45)

    config = service.ensure_config_exists()

    assert config.threshold == 45.0


def test_concurrent_ensure_yields_one_singleton(store: DocumentStore, notifier) -> None:
    service = ConfigService(store=store, notifier=notifier)

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda _: service.ensure_config_exists(), range(32)))

    assert len({config.id for config in results}) == 1
    assert len({config.last_updated for config in results}) == 1


def test_set_threshold_requires_value(store: DocumentStore, notifier) -> None:
    service = ConfigService(store=store, notifier=notifier)
    events: list = []
    notifier.subscribe(events.append)

    with pytest.raises(ValidationError, match="Threshold value is required"):
        service.set_threshold(None)

    assert store.get_config() is None
    assert events == []


def test_set_threshold_updates_and_notifies(store: DocumentStore, notifier) -> None:
    service = ConfigService(store=store, notifier=notifier)
    events: list = []
    notifier.subscribe(events.append)
    before = datetime.now(timezone.utc)

    service.set_threshold(42)
    config = service.get_config()

    assert config.threshold == 42
    assert config.last_updated >= before
    assert events == [ConfigUpdateEvent(threshold=42.0)]


def test_record_reading_stamps_time_and_notifies(store: DocumentStore, notifier) -> None:
    service = IngestionService(store=store, notifier=notifier)
    events: list = []
    notifier.subscribe(events.append)

    before = datetime.now(timezone.utc)
    reading = service.record_reading(25.5, 60)
    after = datetime.now(timezone.utc)

    assert before <= reading.timestamp <= after
    assert store.list_recent_readings(1) == [reading]
    assert events == [
        DataUpdateEvent(temperature=25.5, fan_speed=60.0, timestamp=reading.timestamp)
    ]


@pytest.mark.parametrize(
    ("temperature", "fan_speed"),
    [(None, 60.0), (25.5, None), (None, None)],
)
def test_record_reading_requires_both_fields(
    store: DocumentStore, notifier, temperature, fan_speed
) -> None:
    service = IngestionService(store=store, notifier=notifier)

    with pytest.raises(ValidationError):
        service.record_reading(temperature, fan_speed)

    assert store.list_recent_readings(RECENT_READINGS_LIMIT) == []


def test_zero_values_are_accepted(store: DocumentStore, notifier) -> None:
    service = IngestionService(store=store, notifier=notifier)

    reading = service.record_reading(0, 0)

    assert reading.temperature == 0.0
    assert reading.fan_speed == 0.0


def test_recent_readings_caps_at_limit_newest_first(store: DocumentStore) -> None:
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for index in range(RECENT_READINGS_LIMIT + 10):
        store.insert_reading(
            temperature=float(index),
            fan_speed=float(index),
            timestamp=base + timedelta(seconds=index),
        )

    readings = QueryService(store=store).recent_readings()

    assert len(readings) == RECENT_READINGS_LIMIT
    timestamps = [reading.timestamp for reading in readings]
    assert all(newer > older for newer, older in zip(timestamps, timestamps[1:]))
    assert readings[0].temperature == float(RECENT_READINGS_LIMIT + 9)
