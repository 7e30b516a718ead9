"""Persistence contract consumed by the dialog map service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

Record = Dict[str, Any]

TOPICS = "topics"
DIALOG_MAPS = "dialog_maps"
SETTINGS = "settings"


class DialogMapStore(Protocol):
    async def get(self, collection: str, record_id: str) -> Optional[Record]: ...

    async def put(self, collection: str, record: Record) -> None: ...

    async def query_by_field(self, collection: str, field: str, value: Any) -> List[Record]: ...
