from __future__ import annotations

"""
Async adapter between the draft engine and a record store.

Design intent:
- Keep the engine coroutine-based while the store stays plain and lock-protected.
- Run store calls off the event loop so a slow backend never stalls notify().
"""

import asyncio
from typing import Any, List, Mapping

from .contracts import DraftAck, EditableRecord, RosterEntry, TransitionKind
from .record_store import RecordStore


class RecordStoreClient:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def read_record(self, record_id: str) -> EditableRecord:
        return await asyncio.to_thread(self._store.read_record, record_id)

    async def write_draft(self, record_id: str, partial_fields: Mapping[str, Any]) -> DraftAck:
        return await asyncio.to_thread(self._store.write_draft, record_id, partial_fields)

    async def write_final(
        self,
        record_id: str,
        transition: TransitionKind,
        authoritative_fields: Mapping[str, Any],
    ) -> EditableRecord:
        return await asyncio.to_thread(
            self._store.write_final, record_id, transition, authoritative_fields
        )

    async def list_rosters(self, record_id: str) -> List[RosterEntry]:
        return await asyncio.to_thread(self._store.list_rosters, record_id)

    async def discard_draft(self, record_id: str) -> None:
        await asyncio.to_thread(self._store.discard_draft, record_id)
