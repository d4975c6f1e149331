from __future__ import annotations

from typing import Any, Optional, Sequence

from matchday.internal_core.contracts import RosterEntry


def snapshot_from_rosters(entries: Sequence[RosterEntry]) -> Optional[dict[str, Any]]:
    """Rebuild lineup fields from the roster collection written at match start."""
    if not entries:
        return None

    rosters = {entry.player_id: entry.status for entry in entries}
    snapshot: dict[str, Any] = {"rosters": rosters}

    # Every entry carries the same formation; the first one is authoritative.
    first = entries[0]
    if first.formation and first.formation_type:
        snapshot["formation"] = {
            position: player_id for position, player_id in first.formation.items() if player_id
        }
        snapshot["formation_type"] = first.formation_type
    return snapshot
