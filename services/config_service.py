"""Access to the shared threshold configuration."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from app.schemas import DEFAULT_THRESHOLD, Config
from datastore.document_store import DocumentStore, build_default_store
from models.records import ConfigUpdateEvent
from services.errors import ValidationError
from services.notifier import Notifier, build_default_notifier

logger = logging.getLogger(__name__)


class ConfigService:
    """Keeps exactly one config record and applies threshold changes."""

    def __init__(self, store: DocumentStore, notifier: Notifier) -> None:
        self.store = store
        self.notifier = notifier

    def ensure_config_exists(self) -> Config:
        config, created = self.store.create_config_if_absent({"threshold": DEFAULT_THRESHOLD})
        if created:
            logger.info(
                "Config initialized with default values",
                extra={"threshold": config.threshold},
            )
        return config

    def get_config(self) -> Config:
        return self.ensure_config_exists()

    def set_threshold(self, threshold: Optional[float]) -> Config:
        if threshold is None:
            raise ValidationError("Threshold value is required")

        config = self.store.upsert_config({"threshold": threshold})
        logger.info("Threshold updated", extra={"threshold": config.threshold})
        self.notifier.publish(ConfigUpdateEvent(threshold=config.threshold))
        return config


@lru_cache
def build_default_config_service() -> ConfigService:
    return ConfigService(store=build_default_store(), notifier=build_default_notifier())
