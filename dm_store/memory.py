"""Process-local store used by tests and embedded callers."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

from .base import Record


class InMemoryStore:
    def __init__(self) -> None:
        self._collections: Dict[str, Dict[str, Record]] = {}

    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        record = self._collections.get(collection, {}).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def put(self, collection: str, record: Record) -> None:
        if "id" not in record:
            raise ValueError(f"Record for {collection} has no id")
        self._collections.setdefault(collection, {})[record["id"]] = copy.deepcopy(record)

    async def query_by_field(self, collection: str, field: str, value: Any) -> List[Record]:
        return [
            copy.deepcopy(record)
            for record in self._collections.get(collection, {}).values()
            if record.get(field) == value
        ]

    def collections(self) -> List[str]:
        return list(self._collections.keys())
