from __future__ import annotations

import heapq
import json
import logging
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, List, Mapping, Optional, Tuple
from uuid import uuid4

from pydantic import ValidationError as SchemaError

from app.schemas import CONFIG_ID, Config, Reading
from settings import get_settings

logger = logging.getLogger(__name__)

_MUTABLE_CONFIG_FIELDS = frozenset({"threshold"})


class StorageError(RuntimeError):
    """Raised when the document store cannot be read or written."""


class DocumentStore:
    """Readings collection plus the config singleton, optionally persisted to JSON."""

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self.persistence_path = persistence_path
        self._readings: List[Reading] = []
        self._config: Optional[Config] = None
        self._loaded = False
        self._lock = Lock()

    def insert_reading(
        self, temperature: float, fan_speed: float, timestamp: datetime
    ) -> Reading:
        with self._lock:
            self._connect()
            reading = Reading(
                id=uuid4().hex,
                temperature=temperature,
                fan_speed=fan_speed,
                timestamp=timestamp,
            )
            readings = [*self._readings, reading]
            self._persist(readings, self._config)
            self._readings = readings
            return reading.model_copy(deep=True)

    def list_recent_readings(self, limit: int) -> list[Reading]:
        """Return up to ``limit`` readings, newest first."""

        if limit <= 0:
            return []
        with self._lock:
            self._connect()
            # Later inserts win timestamp ties.
            newest = heapq.nlargest(
                limit,
                enumerate(self._readings),
                key=lambda pair: (pair[1].timestamp, pair[0]),
            )
            return [reading.model_copy(deep=True) for _, reading in newest]

    def get_config(self) -> Optional[Config]:
        with self._lock:
            self._connect()
            if self._config is None:
                return None
            return self._config.model_copy(deep=True)

    def create_config_if_absent(self, defaults: Mapping[str, Any]) -> Tuple[Config, bool]:
        """Atomically create the singleton unless it exists. Returns (config, created)."""

        with self._lock:
            self._connect()
            if self._config is not None:
                return self._config.model_copy(deep=True), False
            config = Config(
                id=CONFIG_ID,
                last_updated=datetime.now(timezone.utc),
                **_config_fields(defaults),
            )
            self._persist(self._readings, config)
            self._config = config
            return config.model_copy(deep=True), True

    def upsert_config(self, changes: Mapping[str, Any]) -> Config:
        """Apply ``changes`` to the singleton, creating it when absent."""

        fields = _config_fields(changes)
        with self._lock:
            self._connect()
            now = datetime.now(timezone.utc)
            if self._config is None:
                config = Config(id=CONFIG_ID, last_updated=now, **fields)
            else:
                config = Config.model_validate(
                    {**self._config.model_dump(), **fields, "last_updated": now}
                )
            self._persist(self._readings, config)
            self._config = config
            return config.model_copy(deep=True)

    def _connect(self) -> None:
        if self._loaded:
            return
        if self.persistence_path:
            self._load_from_disk()
        self._loaded = True

    def _persist(self, readings: List[Reading], config: Optional[Config]) -> None:
        if not self.persistence_path:
            return
        payload = {
            "readings": [item.model_dump(mode="json", by_alias=True) for item in readings],
            "config": config.model_dump(mode="json", by_alias=True) if config else None,
        }
        try:
            self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))
        except OSError as exc:
            raise StorageError(f"Unable to write document store: {exc}") from exc

    def _load_from_disk(self) -> None:
        if not self.persistence_path:
            return
        try:
            self.persistence_path.parent.mkdir(parents=True, exist_ok=True)
            if not self.persistence_path.exists():
                return
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
            readings = [Reading.model_validate(item) for item in data.get("readings") or []]
            config_payload = data.get("config")
            config = Config.model_validate(config_payload) if config_payload else None
        except (OSError, json.JSONDecodeError, AttributeError, SchemaError) as exc:
            raise StorageError(f"Unable to load document store: {exc}") from exc

        self._readings = readings
        self._config = config
        logger.info(
            "Loaded document store",
            extra={"store_path": self.persistence_path},
        )


def _config_fields(changes: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(changes) - _MUTABLE_CONFIG_FIELDS
    if unknown:
        raise ValueError(f"Unsupported config fields: {', '.join(sorted(unknown))}")
    return {key: value for key, value in changes.items() if value is not None}


@lru_cache
def build_default_store(path: Optional[str] = None) -> DocumentStore:
    settings = get_settings()
    store_path = settings.store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return DocumentStore(persistence_path=persistence)
