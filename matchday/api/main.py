from __future__ import annotations

"""
Game draft API surface for matchday.

Design intent:
- Keep handlers thin and typed; the record store owns state rules.
- Route drafts by lifecycle state (Scheduled -> lineup, Played -> report).
- Map store errors to predictable status codes.
"""

import logging
from typing import Any, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from matchday.internal_core.config import load_config
from matchday.internal_core.contracts import AuditEvent, EditableRecord, RosterEntry
from matchday.internal_core.errors import (
    DraftNotAllowedError,
    InvalidTransitionError,
    MissingFieldsError,
)
from matchday.internal_core.record_store import InMemoryRecordStore


class CreateGameRequest(BaseModel):
    record_id: Optional[str] = Field(default=None, min_length=1, max_length=128)
    committed_fields: dict[str, Any] = Field(default_factory=dict)


class DraftResponse(BaseModel):
    record_id: str
    lifecycle_state: str
    draft: dict[str, Any] = Field(default_factory=dict)


class DraftSaveResponse(BaseModel):
    success: bool = True
    record_id: str
    draft_kind: Literal["lineup", "report"]
    message: str = "Draft saved successfully"


class StartGameRequest(BaseModel):
    rosters: dict[str, Literal["Starting Lineup", "Bench", "Not in Squad"]]
    formation: dict[str, Optional[str]]
    formation_type: Optional[str] = None


class SubmitReportRequest(BaseModel):
    final_score: dict[str, int]
    match_duration: dict[str, int]
    team_summary: dict[str, str] = Field(default_factory=dict)
    player_reports: dict[str, dict[str, Any]] = Field(default_factory=dict)
    player_match_stats: dict[str, dict[str, Any]] = Field(default_factory=dict)


class TransitionResponse(BaseModel):
    success: bool = True
    game: EditableRecord
    message: str


class RostersResponse(BaseModel):
    record_id: str
    rosters: list[RosterEntry] = Field(default_factory=list)


class AuditResponse(BaseModel):
    record_id: str
    events: list[AuditEvent] = Field(default_factory=list)


app = FastAPI(title="matchday draft service")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_record_store() -> InMemoryRecordStore:
    existing = getattr(app.state, "record_store", None)
    if isinstance(existing, InMemoryRecordStore):
        return existing
    config = load_config()
    logging.getLogger("matchday").setLevel(config.MATCHDAY_LOG_LEVEL)
    created = InMemoryRecordStore(regular_time_minutes=config.MATCHDAY_REGULAR_TIME_MINUTES)
    setattr(app.state, "record_store", created)
    return created


def _normalize_record_id(record_id: str) -> str:
    normalized = str(record_id or "").strip()
    if not normalized:
        raise HTTPException(status_code=400, detail="game id is required.")
    return normalized


def _run_transition(record_id: str, transition: str, fields: dict[str, Any]) -> EditableRecord:
    store = _get_record_store()
    try:
        return store.write_final(_normalize_record_id(record_id), transition, fields)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=exc.message) from exc
    except MissingFieldsError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid roster payload: {exc}") from exc


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/games", response_model=EditableRecord, status_code=201)
async def create_game(payload: CreateGameRequest) -> EditableRecord:
    store = _get_record_store()
    try:
        record_id = store.create_record(payload.record_id, payload.committed_fields)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return store.read_record(record_id)


@app.get("/games/{record_id}", response_model=EditableRecord)
async def get_game(record_id: str) -> EditableRecord:
    try:
        return _get_record_store().read_record(_normalize_record_id(record_id))
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


@app.get("/games/{record_id}/draft", response_model=DraftResponse)
async def get_game_draft(record_id: str) -> DraftResponse:
    try:
        record = _get_record_store().read_record(_normalize_record_id(record_id))
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    return DraftResponse(
        record_id=record.record_id,
        lifecycle_state=record.lifecycle_state,
        draft=record.draft or {},
    )


@app.put("/games/{record_id}/draft", response_model=DraftSaveResponse)
async def update_game_draft(record_id: str, payload: dict[str, Any]) -> DraftSaveResponse:
    if not payload:
        raise HTTPException(status_code=400, detail="Draft payload cannot be empty.")
    try:
        ack = _get_record_store().write_draft(_normalize_record_id(record_id), payload)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    except DraftNotAllowedError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    return DraftSaveResponse(record_id=ack.record_id, draft_kind=ack.draft_kind)


@app.post("/games/{record_id}/start-game", response_model=TransitionResponse)
async def start_game(record_id: str, payload: StartGameRequest) -> TransitionResponse:
    record = _run_transition(record_id, "begin_match", payload.model_dump())
    return TransitionResponse(game=record, message="Game started. Status: Played")


@app.post("/games/{record_id}/submit-report", response_model=TransitionResponse)
async def submit_report(record_id: str, payload: SubmitReportRequest) -> TransitionResponse:
    record = _run_transition(record_id, "finalize", payload.model_dump())
    return TransitionResponse(
        game=record,
        message="Final report submitted successfully. Game marked as Done.",
    )


@app.post("/games/{record_id}/postpone", response_model=TransitionResponse)
async def postpone_game(record_id: str) -> TransitionResponse:
    record = _run_transition(record_id, "postpone", {})
    logger.info("game_postponed record_id=%s", record.record_id)
    return TransitionResponse(game=record, message="Game postponed. Status: Scheduled")


@app.get("/games/{record_id}/rosters", response_model=RostersResponse)
async def get_game_rosters(record_id: str) -> RostersResponse:
    normalized = _normalize_record_id(record_id)
    try:
        rosters = _get_record_store().list_rosters(normalized)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    return RostersResponse(record_id=normalized, rosters=rosters)


@app.get("/games/{record_id}/audit", response_model=AuditResponse)
async def get_game_audit(record_id: str) -> AuditResponse:
    normalized = _normalize_record_id(record_id)
    try:
        events = _get_record_store().list_audit_events(normalized)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    return AuditResponse(record_id=normalized, events=events)
