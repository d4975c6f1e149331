from __future__ import annotations

"""
Local fallback copies of in-progress drafts.

Design intent:
- Keep unsaved edits across a reload without ambient process-wide storage.
- Act as one ranked source for the resolver, never as a side channel.
"""

import copy
from collections import OrderedDict
from threading import RLock
from typing import Any, Mapping, Optional


class DraftFallbackCache:
    """Local copies of in-progress snapshots keyed by (record_id, context_id).

    ``context_id`` separates editors that share a record, e.g. one training
    plan per team and week. Oldest entries are evicted past ``max_entries``.
    """

    def __init__(self, max_entries: int = 256) -> None:
        self._max_entries = max(1, int(max_entries))
        self._lock = RLock()
        self._entries: "OrderedDict[tuple[str, str], dict[str, Any]]" = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, record_id: str, context_id: str) -> Optional[dict[str, Any]]:
        key = (record_id, context_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return copy.deepcopy(entry)

    def put(self, record_id: str, context_id: str, snapshot: Mapping[str, Any]) -> None:
        key = (record_id, context_id)
        with self._lock:
            self._entries[key] = copy.deepcopy(dict(snapshot))
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def evict(self, record_id: str, context_id: Optional[str] = None) -> int:
        with self._lock:
            if context_id is not None:
                return 1 if self._entries.pop((record_id, context_id), None) is not None else 0
            keys = [key for key in self._entries if key[0] == record_id]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
