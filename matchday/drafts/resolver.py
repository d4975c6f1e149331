from __future__ import annotations

"""
Pick the initial editable snapshot for a record from ranked sources.

Design intent:
- Draft values win over committed values field by field, never wholesale.
- Malformed or empty drafts degrade to the next source instead of raising.
- Run once per mount; later edits flow only through the persister.
"""

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Collection, Literal, Optional

from matchday.internal_core.contracts import DRAFTING_STATES

logger = logging.getLogger(__name__)

DraftSource = Literal["draft", "cache", "secondary", "defaults"]


@dataclass(frozen=True)
class ResolvedSnapshot:
    source: DraftSource
    snapshot: dict[str, Any]


def is_usable_draft(value: Any) -> bool:
    return isinstance(value, Mapping) and len(value) > 0


def merge_draft(
    base: Optional[Mapping[str, Any]], draft: Any, *, skip_none: bool = True
) -> dict[str, Any]:
    """Overlay ``draft`` on ``base`` with one level of nested-group merge.

    A group present in both (e.g. ``team_summary``) keeps the base keys the
    draft does not mention. Anything nested deeper than the group is replaced
    as a whole. With ``skip_none`` (the default, for draft and cache layers)
    ``None`` values mean "not set" and are ignored; committed values pass
    ``skip_none=False`` so an explicit ``None`` is kept.
    """
    result = copy.deepcopy(dict(base or {}))
    if not is_usable_draft(draft):
        return result

    for key, value in draft.items():
        if value is None:
            if not skip_none:
                result[key] = None
            continue
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged = dict(current)
            merged.update(copy.deepcopy(dict(value)))
            result[key] = merged
        else:
            result[key] = copy.deepcopy(value)
    return result


def resolve_initial(
    lifecycle_state: str,
    draft: Any,
    committed_fallback: Optional[Mapping[str, Any]],
    defaults: Optional[Mapping[str, Any]],
    *,
    drafting_states: Collection[str] = DRAFTING_STATES,
    cached: Any = None,
    secondary: Optional[Mapping[str, Any]] = None,
) -> ResolvedSnapshot:
    base = merge_draft(defaults, committed_fallback, skip_none=False)
    eligible = lifecycle_state in drafting_states

    if draft is not None and not isinstance(draft, Mapping):
        logger.warning(
            "draft_ignored state=%s reason=not_a_mapping type=%s",
            lifecycle_state,
            type(draft).__name__,
        )

    if eligible and is_usable_draft(draft):
        resolved = ResolvedSnapshot(source="draft", snapshot=merge_draft(base, draft))
    elif eligible and is_usable_draft(cached):
        resolved = ResolvedSnapshot(source="cache", snapshot=merge_draft(base, cached))
    elif is_usable_draft(secondary):
        resolved = ResolvedSnapshot(source="secondary", snapshot=merge_draft(base, secondary))
    else:
        resolved = ResolvedSnapshot(source="defaults", snapshot=base)

    logger.debug(
        "draft_resolved state=%s source=%s keys=%s",
        lifecycle_state,
        resolved.source,
        sorted(resolved.snapshot),
    )
    return resolved
