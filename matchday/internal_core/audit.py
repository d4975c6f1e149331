from __future__ import annotations

import datetime as _dt

from .contracts import AuditEvent, AuditEventType


def _ts_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat()


def _sanitize_detail(detail: str) -> str:
    # Detail is metadata only. Draft payloads never go in here.
    detail = (detail or "").replace("\n", " ").strip()
    if len(detail) > 200:
        detail = detail[:200] + "..."
    return detail


def build_audit_event(
    record_id: str,
    event_type: AuditEventType,
    code: str,
    detail: str,
) -> AuditEvent:
    return AuditEvent(
        ts_iso=_ts_iso(),
        record_id=record_id,
        type=event_type,
        code=code,
        detail=_sanitize_detail(detail),
    )
