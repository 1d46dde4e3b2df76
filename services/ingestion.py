"""Stores readings reported by devices."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from app.schemas import Reading
from datastore.document_store import DocumentStore, build_default_store
from models.records import DataUpdateEvent
from services.errors import ValidationError
from services.notifier import Notifier, build_default_notifier

logger = logging.getLogger(__name__)


class IngestionService:

    def __init__(self, store: DocumentStore, notifier: Notifier) -> None:
        self.store = store
        self.notifier = notifier

    def record_reading(
        self, temperature: Optional[float], fan_speed: Optional[float]
    ) -> Reading:
        """Timestamp and persist one reading, then announce it."""
        if temperature is None or fan_speed is None:
            raise ValidationError("Temperature and fan speed values are required")

        reading = self.store.insert_reading(
            temperature=temperature,
            fan_speed=fan_speed,
            timestamp=datetime.now(timezone.utc),
        )
        logger.info(
            "Stored reading",
            extra={
                "reading_id": reading.id,
                "temperature": reading.temperature,
                "fan_speed": reading.fan_speed,
            },
        )
        self.notifier.publish(
            DataUpdateEvent(
                temperature=reading.temperature,
                fan_speed=reading.fan_speed,
                timestamp=reading.timestamp,
            )
        )
        return reading


@lru_cache
def build_default_ingestion_service() -> IngestionService:
    return IngestionService(store=build_default_store(), notifier=build_default_notifier())
