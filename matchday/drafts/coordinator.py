from __future__ import annotations

"""
Lifecycle state machine for a draft-backed record.

Design intent:
- Name every transition and its guard explicitly instead of combining flags.
- Never let a draft write and an authoritative write overlap for one record.
- On a failed authoritative write, leave state as it was and re-enable drafting.
"""

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

from matchday.drafts.persister import DebouncedPersister
from matchday.internal_core.contracts import (
    DRAFTING_STATES,
    EditableRecord,
    LifecycleState,
    TransitionKind,
    ValidationResult,
)
from matchday.internal_core.errors import (
    InvalidTransitionError,
    TransitionFailedError,
    TransitionInProgressError,
    TransitionValidationError,
)
from matchday.internal_core.record_store import TRANSITIONS

logger = logging.getLogger(__name__)

TransitionGuard = Callable[[Mapping[str, Any]], ValidationResult]


class FinalWriter(Protocol):
    def write_final(
        self,
        record_id: str,
        transition: TransitionKind,
        authoritative_fields: Mapping[str, Any],
    ) -> Awaitable[EditableRecord]: ...


class LifecycleCoordinator:
    def __init__(
        self,
        record_id: str,
        writer: FinalWriter,
        persister: DebouncedPersister,
        *,
        lifecycle_state: LifecycleState = "Scheduled",
        guards: Optional[Mapping[str, TransitionGuard]] = None,
    ) -> None:
        self._record_id = record_id
        self._writer = writer
        self._persister = persister
        self._state: LifecycleState = lifecycle_state
        self._guards = dict(guards or {})
        self._finalizing = False
        self._transition_error: Optional[BaseException] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def finalizing(self) -> bool:
        return self._finalizing

    @property
    def transition_error(self) -> Optional[BaseException]:
        return self._transition_error

    @property
    def drafting_enabled(self) -> bool:
        return not self._finalizing and self._state in DRAFTING_STATES

    def sync_state(self, lifecycle_state: LifecycleState) -> None:
        if self._finalizing:
            raise TransitionInProgressError(
                "transition_in_progress",
                "Cannot resync state while a transition is running.",
                self._record_id,
            )
        self._state = lifecycle_state

    def notify(self, snapshot: Optional[Mapping[str, Any]]) -> None:
        # Edits during a transition are dropped, not queued.
        self._persister.notify(snapshot, enabled=self.drafting_enabled)

    def check_transition(self, kind: str, payload: Mapping[str, Any]) -> ValidationResult:
        if kind not in TRANSITIONS:
            raise InvalidTransitionError(
                "unknown_transition", f"Unknown transition: {kind}", self._record_id
            )
        if self._finalizing:
            raise TransitionInProgressError(
                "transition_in_progress",
                "Another transition is already running for this record.",
                self._record_id,
            )
        source_state, _ = TRANSITIONS[kind]
        if self._state != source_state:
            raise InvalidTransitionError(
                "wrong_state",
                f"Cannot {kind} from {self._state}; expected {source_state}.",
                self._record_id,
            )
        guard = self._guards.get(kind)
        if guard is None:
            return ValidationResult(is_valid=True)
        result = guard(payload)
        if not result.is_valid:
            raise TransitionValidationError(self._record_id, result.errors)
        return result

    async def begin_transition(
        self, kind: TransitionKind, payload: Mapping[str, Any]
    ) -> EditableRecord:
        # Everything up to the first await runs synchronously: no store call on a bad request.
        self.check_transition(kind, payload)

        self._finalizing = True
        self._persister.suspend()
        previous_state = self._state
        try:
            await self._persister.wait_idle()
            record = await self._writer.write_final(self._record_id, kind, payload)
        except Exception as exc:
            self._transition_error = exc
            self._persister.resume()
            logger.warning(
                "transition_failed record_id=%s transition=%s state=%s error=%s",
                self._record_id,
                kind,
                previous_state,
                exc,
            )
            raise TransitionFailedError(
                "transition_failed", f"{kind} failed: {exc}", self._record_id
            ) from exc
        finally:
            self._finalizing = False

        self._state = record.lifecycle_state
        self._transition_error = None
        self._persister.reset(None)
        logger.info(
            "transition_done record_id=%s transition=%s from=%s to=%s",
            self._record_id,
            kind,
            previous_state,
            self._state,
        )
        return record
