from __future__ import annotations

from functools import lru_cache

from app.schemas import Reading
from datastore.document_store import DocumentStore, build_default_store

RECENT_READINGS_LIMIT = 50


class QueryService:

    def __init__(self, store: DocumentStore, limit: int = RECENT_READINGS_LIMIT) -> None:
        self.store = store
        self.limit = limit

    def recent_readings(self) -> list[Reading]:
        """Most recent readings, newest first."""
        return self.store.list_recent_readings(self.limit)


@lru_cache
def build_default_query_service() -> QueryService:
    return QueryService(store=build_default_store())
