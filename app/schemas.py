"""Pydantic schemas for the HTTP API layer and the document store."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_THRESHOLD = 30.0
CONFIG_ID = "singleton"


class CamelModel(BaseModel):
    """Base model exposing camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Reading(CamelModel):
    """One stored sensor sample reported by a device."""

    id: str = Field(..., description="Generated identifier of the reading.")
    temperature: float
    fan_speed: float
    timestamp: datetime


class Config(CamelModel):
    """The shared threshold record polled by devices."""

    id: str = CONFIG_ID
    threshold: float = DEFAULT_THRESHOLD
    last_updated: datetime


class ReadingCreate(CamelModel):
    """Body posted by a device. Presence is checked by the ingestion service."""

    temperature: Optional[float] = None
    fan_speed: Optional[float] = None


class ThresholdUpdate(CamelModel):
    threshold: Optional[float] = None


class ErrorResponse(BaseModel):
    error: str
