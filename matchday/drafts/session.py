from __future__ import annotations

"""
UI-facing draft session for one editable record.

Design intent:
- Give screens three entry points: on_snapshot_change, autosave_status, begin_transition.
- Wire resolver, persister, coordinator and local cache without shared closures.
- Re-resolve from the store after every transition so the next editor starts clean.
"""

import copy
import logging
import time
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

from matchday.drafts.coordinator import LifecycleCoordinator, TransitionGuard
from matchday.drafts.fallback_cache import DraftFallbackCache
from matchday.drafts.persister import DebouncedPersister, Scheduler, StatusListener
from matchday.drafts.resolver import ResolvedSnapshot, resolve_initial
from matchday.internal_core.config import EngineConfig, load_config
from matchday.internal_core.contracts import (
    AutosaveStatus,
    DraftAck,
    EditableRecord,
    RosterEntry,
    TransitionKind,
)
from matchday.lineup.rosters import snapshot_from_rosters
from matchday.lineup.validation import validate_final_report, validate_squad

logger = logging.getLogger(__name__)

SecondaryBuilder = Callable[[Sequence[RosterEntry]], Optional[dict[str, Any]]]


class DraftStoreClient(Protocol):
    async def read_record(self, record_id: str) -> EditableRecord: ...

    async def write_draft(
        self, record_id: str, partial_fields: Mapping[str, Any]
    ) -> DraftAck: ...

    async def write_final(
        self,
        record_id: str,
        transition: TransitionKind,
        authoritative_fields: Mapping[str, Any],
    ) -> EditableRecord: ...

    async def list_rosters(self, record_id: str) -> list[RosterEntry]: ...

    async def discard_draft(self, record_id: str) -> None: ...


def default_guards(config: EngineConfig) -> dict[str, TransitionGuard]:
    def squad_guard(payload: Mapping[str, Any]):
        return validate_squad(
            payload,
            lineup_size=config.MATCHDAY_STARTING_LINEUP_SIZE,
            min_bench_size=config.MATCHDAY_MIN_BENCH_SIZE,
        )

    return {"begin_match": squad_guard, "finalize": validate_final_report}


class DraftSession:
    def __init__(
        self,
        record_id: str,
        client: DraftStoreClient,
        *,
        defaults: Optional[Mapping[str, Any]] = None,
        config: Optional[EngineConfig] = None,
        guards: Optional[Mapping[str, TransitionGuard]] = None,
        cache: Optional[DraftFallbackCache] = None,
        context_id: str = "default",
        secondary_builder: SecondaryBuilder = snapshot_from_rosters,
        should_skip: Optional[Callable[[Mapping[str, Any]], bool]] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or load_config()
        self._record_id = record_id
        self._client = client
        self._defaults = copy.deepcopy(dict(defaults or {}))
        self._cache = cache
        self._context_id = context_id
        self._secondary_builder = secondary_builder
        self._snapshot: dict[str, Any] = {}
        self._persister = DebouncedPersister(
            self._write_draft,
            quiescence_window=self._config.MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS,
            grace_period=self._config.MATCHDAY_AUTOSAVE_GRACE_SECONDS,
            clock=clock,
            scheduler=scheduler,
            should_skip=should_skip,
            name=f"record:{record_id}",
        )
        self._coordinator = LifecycleCoordinator(
            record_id,
            client,
            self._persister,
            guards=default_guards(self._config) if guards is None else guards,
        )

    @property
    def record_id(self) -> str:
        return self._record_id

    @property
    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._snapshot)

    @property
    def autosave_status(self) -> AutosaveStatus:
        return self._persister.status

    @property
    def lifecycle_state(self) -> str:
        return self._coordinator.state

    @property
    def finalizing(self) -> bool:
        return self._coordinator.finalizing

    @property
    def persister(self) -> DebouncedPersister:
        return self._persister

    def add_status_listener(self, listener: StatusListener) -> None:
        self._persister.add_listener(listener)

    async def open(self) -> ResolvedSnapshot:
        record = await self._client.read_record(self._record_id)
        rosters = await self._client.list_rosters(self._record_id)
        cached = (
            self._cache.get(self._record_id, self._context_id) if self._cache is not None else None
        )
        resolved = resolve_initial(
            record.lifecycle_state,
            record.draft,
            record.committed_fields,
            self._defaults,
            cached=cached,
            secondary=self._secondary_builder(rosters) if rosters else None,
        )
        self._coordinator.sync_state(record.lifecycle_state)
        self._snapshot = resolved.snapshot
        self._persister.mount(resolved.snapshot)
        logger.info(
            "draft_session_opened record_id=%s state=%s source=%s",
            self._record_id,
            record.lifecycle_state,
            resolved.source,
        )
        return resolved

    def on_snapshot_change(self, snapshot: Mapping[str, Any]) -> None:
        self._snapshot = copy.deepcopy(dict(snapshot))
        if self._cache is not None and self._coordinator.drafting_enabled:
            self._cache.put(self._record_id, self._context_id, self._snapshot)
        self._coordinator.notify(self._snapshot)

    async def begin_transition(
        self, kind: TransitionKind, payload: Optional[Mapping[str, Any]] = None
    ) -> EditableRecord:
        fields = dict(payload) if payload is not None else self.snapshot
        record = await self._coordinator.begin_transition(kind, fields)
        if self._cache is not None:
            self._cache.evict(self._record_id)
        try:
            await self.open()
        except Exception as exc:
            # The authoritative write already committed; re-mount from its result.
            logger.warning(
                "draft_session_reopen_failed record_id=%s transition=%s error_type=%s error=%s",
                self._record_id,
                kind,
                exc.__class__.__name__,
                exc,
            )
            self._mount_record(record)
        return record

    async def discard_draft(self) -> ResolvedSnapshot:
        self._persister.suspend()
        await self._persister.wait_idle()
        await self._client.discard_draft(self._record_id)
        if self._cache is not None:
            self._cache.evict(self._record_id)
        return await self.open()

    def close(self) -> None:
        self._persister.close()

    def _mount_record(self, record: EditableRecord) -> ResolvedSnapshot:
        resolved = resolve_initial(
            record.lifecycle_state, record.draft, record.committed_fields, self._defaults
        )
        self._snapshot = resolved.snapshot
        self._persister.mount(resolved.snapshot)
        return resolved

    async def _write_draft(self, snapshot: dict[str, Any]) -> DraftAck:
        return await self._client.write_draft(self._record_id, snapshot)
