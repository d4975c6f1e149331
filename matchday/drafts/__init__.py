"""
Draft autosave and merge boundary for matchday.

Design intent:
- Persist in-progress edits without explicit saves and without redundant writes.
- Resolve the initial editable state from draft, cache, rosters and defaults.
- Hand off to authoritative lifecycle writes without racing the autosave loop.
"""

from matchday.drafts.change_detector import are_equal
from matchday.drafts.coordinator import LifecycleCoordinator
from matchday.drafts.fallback_cache import DraftFallbackCache
from matchday.drafts.persister import DebouncedPersister
from matchday.drafts.resolver import ResolvedSnapshot, merge_draft, resolve_initial
from matchday.drafts.session import DraftSession

__all__ = [
    "are_equal",
    "DebouncedPersister",
    "DraftFallbackCache",
    "DraftSession",
    "LifecycleCoordinator",
    "ResolvedSnapshot",
    "merge_draft",
    "resolve_initial",
]
