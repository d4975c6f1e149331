from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

LifecycleState = Literal["Scheduled", "Played", "Done"]

LIFECYCLE_ORDER: tuple[LifecycleState, ...] = ("Scheduled", "Played", "Done")

# Scheduled records hold lineup drafts, Played records hold report drafts.
DRAFTING_STATES: frozenset[str] = frozenset({"Scheduled", "Played"})

TransitionKind = Literal["begin_match", "finalize", "postpone"]

RosterStatus = Literal["Starting Lineup", "Bench", "Not in Squad"]

AutosaveState = Literal["idle", "saving", "error"]


class EditableRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    record_id: str
    lifecycle_state: LifecycleState = "Scheduled"
    committed_fields: Dict[str, Any] = Field(default_factory=dict)
    draft: Optional[Dict[str, Any]] = None
    created_at: float
    updated_at: float


class RosterEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    record_id: str
    player_id: str
    status: RosterStatus
    played_in_game: bool = False
    formation: Dict[str, Optional[str]] = Field(default_factory=dict)
    formation_type: Optional[str] = None


class DraftAck(BaseModel):
    model_config = ConfigDict(extra="forbid")

    record_id: str
    lifecycle_state: LifecycleState
    draft_kind: Literal["lineup", "report"]
    saved_at: float


class AutosaveStatus(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    state: AutosaveState = "idle"
    message: Optional[str] = None
    last_saved_at: Optional[float] = None


AuditEventType = Literal[
    "RECORD_CREATED",
    "DRAFT_SAVED",
    "DRAFT_REJECTED",
    "MATCH_STARTED",
    "REPORT_FINALIZED",
    "MATCH_POSTPONED",
    "TRANSITION_REJECTED",
]


class AuditEvent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ts_iso: str
    record_id: str
    type: AuditEventType
    code: str
    detail: str


class ValidationResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [*self.errors, *self.warnings]
