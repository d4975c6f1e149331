from __future__ import annotations

from typing import Any, Callable

import pytest


class FakeTimer:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Manual clock that doubles as a persister scheduler."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def __call__(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.timers if not t.cancelled and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda item: item.due)
            self.timers.remove(timer)
            self.now = timer.due
            timer.callback()
        self.now = target

    @property
    def live_timers(self) -> int:
        return sum(1 for t in self.timers if not t.cancelled)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


STARTERS = ["p1", "p2", "p3", "p4", "p5", "p6", "p7", "p8", "p9", "p10", "p11"]
BENCH = ["p12", "p13", "p14", "p15", "p16", "p17", "p18"]
POSITIONS = ["gk", "lb", "lcb", "rcb", "rb", "lm", "lcm", "rcm", "rm", "ls", "rs"]


def _lineup_payload() -> dict[str, Any]:
    rosters = {player_id: "Starting Lineup" for player_id in STARTERS}
    rosters.update({player_id: "Bench" for player_id in BENCH})
    return {
        "rosters": rosters,
        "formation": dict(zip(POSITIONS, STARTERS)),
        "formation_type": "1-4-4-2",
    }


@pytest.fixture
def lineup_payload() -> dict[str, Any]:
    return _lineup_payload()


@pytest.fixture
def report_payload() -> dict[str, Any]:
    payload = _lineup_payload()
    payload.update(
        {
            "final_score": {"our_score": 2, "opponent_score": 1},
            "match_duration": {
                "regular_time": 90,
                "first_half_extra_time": 2,
                "second_half_extra_time": 4,
            },
            "team_summary": {
                "defense_summary": "Compact back four",
                "midfield_summary": "Won the second balls",
                "attack_summary": "Clinical on the break",
            },
            "player_reports": {
                player_id: {"minutes_played": 90, "goals": 0, "assists": 0, "rating": 3}
                for player_id in STARTERS
            },
            "player_match_stats": {"p10": {"shots": 3, "shots_on_target": 2}},
        }
    )
    return payload
