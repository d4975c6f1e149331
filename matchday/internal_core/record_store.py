from __future__ import annotations

import copy
import logging
import time
import uuid
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .audit import build_audit_event
from .contracts import (
    DRAFTING_STATES,
    AuditEvent,
    AuditEventType,
    DraftAck,
    EditableRecord,
    RosterEntry,
    TransitionKind,
)
from .errors import DraftNotAllowedError, InvalidTransitionError, MissingFieldsError

logger = logging.getLogger(__name__)

# transition -> (required source state, resulting state)
TRANSITIONS: Dict[str, tuple[str, str]] = {
    "begin_match": ("Scheduled", "Played"),
    "finalize": ("Played", "Done"),
    "postpone": ("Played", "Scheduled"),
}

_REQUIRED_FIELDS: Dict[str, tuple[str, ...]] = {
    "begin_match": ("rosters", "formation"),
    "finalize": ("final_score", "match_duration"),
    "postpone": (),
}


class RecordStore(Protocol):
    def read_record(self, record_id: str) -> EditableRecord: ...

    def write_draft(self, record_id: str, partial_fields: Mapping[str, Any]) -> DraftAck: ...

    def write_final(
        self,
        record_id: str,
        transition: TransitionKind,
        authoritative_fields: Mapping[str, Any],
    ) -> EditableRecord: ...

    def list_rosters(self, record_id: str) -> List[RosterEntry]: ...

    def discard_draft(self, record_id: str) -> None: ...


def total_match_duration(match_duration: Mapping[str, Any], regular_time_minutes: int = 90) -> int:
    regular = match_duration.get("regular_time")
    if regular is None:
        regular = regular_time_minutes
    first_extra = match_duration.get("first_half_extra_time") or 0
    second_extra = match_duration.get("second_half_extra_time") or 0
    return int(regular) + int(first_extra) + int(second_extra)


class InMemoryRecordStore:
    def __init__(self, regular_time_minutes: int = 90):
        self._regular_time_minutes = regular_time_minutes
        self._lock = RLock()
        self._records: Dict[str, Dict[str, Any]] = {}
        self._rosters: Dict[str, List[RosterEntry]] = {}
        self._audit: Dict[str, List[AuditEvent]] = {}

    def create_record(
        self,
        record_id: Optional[str] = None,
        committed_fields: Optional[Mapping[str, Any]] = None,
    ) -> str:
        record_id = record_id or uuid.uuid4().hex
        now = time.time()
        with self._lock:
            if record_id in self._records:
                raise ValueError(f"Record already exists: {record_id}")
            self._records[record_id] = {
                "record_id": record_id,
                "lifecycle_state": "Scheduled",
                "committed_fields": copy.deepcopy(dict(committed_fields or {})),
                "draft": None,
                "created_at": now,
                "updated_at": now,
            }
            self._rosters[record_id] = []
            self._audit[record_id] = []
            self._append_audit(record_id, "RECORD_CREATED", "created", "state=Scheduled")
        return record_id

    def _get(self, record_id: str) -> Dict[str, Any]:
        record = self._records.get(record_id)
        if record is None:
            raise KeyError(f"Unknown record_id: {record_id}")
        return record

    def _touch(self, record_id: str) -> float:
        now = time.time()
        self._records[record_id]["updated_at"] = now
        return now

    def _append_audit(
        self, record_id: str, event_type: AuditEventType, code: str, detail: str
    ) -> None:
        self._audit[record_id].append(build_audit_event(record_id, event_type, code, detail))

    def read_record(self, record_id: str) -> EditableRecord:
        with self._lock:
            return EditableRecord.model_validate(copy.deepcopy(self._get(record_id)))

    def write_draft(self, record_id: str, partial_fields: Mapping[str, Any]) -> DraftAck:
        with self._lock:
            record = self._get(record_id)
            state = record["lifecycle_state"]
            if state not in DRAFTING_STATES:
                self._append_audit(record_id, "DRAFT_REJECTED", "wrong_state", f"state={state}")
                raise DraftNotAllowedError(
                    "draft_not_allowed",
                    f"Cannot save draft for record with status: {state}. "
                    "Drafts are only allowed for Scheduled or Played records.",
                    record_id,
                )

            # Top-level upsert: groups absent from this write keep their stored value.
            merged = dict(record["draft"] or {})
            merged.update(copy.deepcopy(dict(partial_fields)))
            record["draft"] = merged
            saved_at = self._touch(record_id)
            kind = "lineup" if state == "Scheduled" else "report"
            self._append_audit(
                record_id, "DRAFT_SAVED", f"{kind}_draft", f"keys={sorted(partial_fields)}"
            )
        return DraftAck(
            record_id=record_id,
            lifecycle_state=state,
            draft_kind=kind,
            saved_at=saved_at,
        )

    def write_final(
        self,
        record_id: str,
        transition: TransitionKind,
        authoritative_fields: Mapping[str, Any],
    ) -> EditableRecord:
        if transition not in TRANSITIONS:
            raise InvalidTransitionError(
                "unknown_transition", f"Unknown transition: {transition}", record_id
            )
        source_state, target_state = TRANSITIONS[transition]
        fields = copy.deepcopy(dict(authoritative_fields or {}))

        with self._lock:
            record = self._get(record_id)
            state = record["lifecycle_state"]
            if state != source_state:
                self._append_audit(
                    record_id, "TRANSITION_REJECTED", "wrong_state", f"{transition} from {state}"
                )
                raise InvalidTransitionError(
                    "wrong_state",
                    f'Can only {transition.replace("_", " ")} records with status "{source_state}".',
                    record_id,
                )
            missing = [name for name in _REQUIRED_FIELDS[transition] if not fields.get(name)]
            if missing:
                raise MissingFieldsError(
                    "missing_fields",
                    f"Required fields missing for {transition}: {', '.join(missing)}",
                    record_id,
                )

            # Build everything before mutating so a failure leaves the record untouched.
            committed = copy.deepcopy(record["committed_fields"])
            rosters: Optional[List[RosterEntry]] = None
            if transition == "begin_match":
                committed.update(
                    {
                        "rosters": fields["rosters"],
                        "formation": fields["formation"],
                        "formation_type": fields.get("formation_type"),
                    }
                )
                rosters = self._build_rosters(record_id, fields)
                event_type: AuditEventType = "MATCH_STARTED"
            elif transition == "finalize":
                committed.update(
                    {
                        "final_score": fields["final_score"],
                        "match_duration": fields["match_duration"],
                        "total_match_duration": total_match_duration(
                            fields["match_duration"], self._regular_time_minutes
                        ),
                        "team_summary": fields.get("team_summary") or {},
                        "player_reports": fields.get("player_reports") or {},
                        "player_match_stats": fields.get("player_match_stats") or {},
                    }
                )
                event_type = "REPORT_FINALIZED"
            else:
                event_type = "MATCH_POSTPONED"

            record["committed_fields"] = committed
            record["lifecycle_state"] = target_state
            record["draft"] = None
            if rosters is not None:
                self._rosters[record_id] = rosters
            self._touch(record_id)
            self._append_audit(record_id, event_type, transition, f"{state}->{target_state}")
            logger.info(
                "record_transition record_id=%s transition=%s from=%s to=%s",
                record_id,
                transition,
                state,
                target_state,
            )
            return EditableRecord.model_validate(copy.deepcopy(record))

    def _build_rosters(self, record_id: str, fields: Mapping[str, Any]) -> List[RosterEntry]:
        formation = {
            str(position): (str(player_id) if player_id else None)
            for position, player_id in dict(fields.get("formation") or {}).items()
        }
        entries = []
        for player_id, status in dict(fields.get("rosters") or {}).items():
            entries.append(
                RosterEntry(
                    record_id=record_id,
                    player_id=str(player_id),
                    status=status,
                    # Starters always play; bench players are settled later by substitutions.
                    played_in_game=status == "Starting Lineup",
                    formation=formation,
                    formation_type=fields.get("formation_type"),
                )
            )
        return entries

    def list_rosters(self, record_id: str) -> List[RosterEntry]:
        with self._lock:
            self._get(record_id)
            return [item.model_copy(deep=True) for item in self._rosters[record_id]]

    def list_audit_events(self, record_id: str) -> List[AuditEvent]:
        with self._lock:
            self._get(record_id)
            return list(self._audit[record_id])

    def discard_draft(self, record_id: str) -> None:
        with self._lock:
            self._get(record_id)["draft"] = None
            self._touch(record_id)

    def delete_record(self, record_id: str) -> None:
        with self._lock:
            self._records.pop(record_id, None)
            self._rosters.pop(record_id, None)
            self._audit.pop(record_id, None)
