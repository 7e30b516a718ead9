"""JSON file store: one document per collection, written through on every put."""

from __future__ import annotations

import asyncio
import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import Record


class JsonFileStore:
    def __init__(self, directory: str) -> None:
        self._dir = Path(directory)
        self._cache: Dict[str, Dict[str, Record]] = {}
        self._write_lock = asyncio.Lock()

    @property
    def directory(self) -> str:
        return str(self._dir)

    def _path(self, collection: str) -> Path:
        return self._dir / f"{collection}.json"

    def _read(self, collection: str) -> Dict[str, Record]:
        path = self._path(collection)
        if not path.exists():
            return {}
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, collection: str, data: Dict[str, Record]) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._path(collection)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(path)

    async def _load(self, collection: str) -> Dict[str, Record]:
        if collection not in self._cache:
            self._cache[collection] = await asyncio.to_thread(self._read, collection)
        return self._cache[collection]

    def reload(self) -> None:
        self._cache = {}

    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        record = (await self._load(collection)).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def put(self, collection: str, record: Record) -> None:
        if "id" not in record:
            raise ValueError(f"Record for {collection} has no id")
        async with self._write_lock:
            # The cache only changes once the collection is on disk.
            data = dict(await self._load(collection))
            data[record["id"]] = copy.deepcopy(record)
            await asyncio.to_thread(self._write, collection, data)
            self._cache[collection] = data

    async def query_by_field(self, collection: str, field: str, value: Any) -> List[Record]:
        records = await self._load(collection)
        return [copy.deepcopy(record) for record in records.values() if record.get(field) == value]
