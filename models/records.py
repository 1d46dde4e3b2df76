"""Push events broadcast to live clients."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Dict


@dataclass(slots=True, frozen=True)
class DataUpdateEvent:
    """A new reading was stored."""

    name: ClassVar[str] = "data_update"

    temperature: float
    fan_speed: float
    timestamp: datetime

    def to_message(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "data": {
                "temperature": self.temperature,
                "fanSpeed": self.fan_speed,
                "timestamp": self.timestamp.isoformat(),
            },
        }


@dataclass(slots=True, frozen=True)
class ConfigUpdateEvent:
    """The threshold was changed."""

    name: ClassVar[str] = "config_update"

    threshold: float

    def to_message(self) -> Dict[str, Any]:
        return {"event": self.name, "data": {"threshold": self.threshold}}
