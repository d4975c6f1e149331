import pytest

from matchday.drafts.resolver import is_usable_draft, merge_draft, resolve_initial

COMMITTED = {
    "team_summary": {
        "defense_summary": "committed defense",
        "midfield_summary": "committed midfield",
        "attack_summary": "committed attack",
        "general_summary": "committed general",
    },
    "final_score": {"our_score": 1, "opponent_score": 1},
}
DEFAULTS = {
    "team_summary": {
        "defense_summary": "",
        "midfield_summary": "",
        "attack_summary": "",
        "general_summary": "",
    },
    "final_score": {"our_score": 0, "opponent_score": 0},
    "player_reports": {},
}


def test_full_draft_overrides_every_committed_field() -> None:
    draft = {
        "team_summary": {
            "defense_summary": "draft defense",
            "midfield_summary": "draft midfield",
            "attack_summary": "draft attack",
            "general_summary": "draft general",
        },
        "final_score": {"our_score": 3, "opponent_score": 0},
    }
    resolved = resolve_initial("Played", draft, COMMITTED, DEFAULTS)
    assert resolved.source == "draft"
    assert resolved.snapshot["team_summary"] == draft["team_summary"]
    assert resolved.snapshot["final_score"] == {"our_score": 3, "opponent_score": 0}
    assert resolved.snapshot["player_reports"] == {}


def test_partial_draft_keeps_committed_values_for_absent_keys() -> None:
    draft = {"team_summary": {"defense_summary": "draft defense"}}
    resolved = resolve_initial("Played", draft, COMMITTED, DEFAULTS)
    summary = resolved.snapshot["team_summary"]
    assert summary["defense_summary"] == "draft defense"
    assert summary["midfield_summary"] == "committed midfield"
    assert summary["attack_summary"] == "committed attack"
    assert summary["general_summary"] == "committed general"
    assert resolved.snapshot["final_score"] == {"our_score": 1, "opponent_score": 1}


@pytest.mark.parametrize("draft", [None, {}])
def test_missing_or_empty_draft_resolves_to_committed_over_defaults(draft) -> None:
    resolved = resolve_initial("Played", draft, COMMITTED, DEFAULTS)
    assert resolved.source == "defaults"
    assert resolved.snapshot["team_summary"] == COMMITTED["team_summary"]
    assert resolved.snapshot["final_score"] == COMMITTED["final_score"]
    assert resolved.snapshot["player_reports"] == {}


@pytest.mark.parametrize("draft", ["corrupted", ["a", "b"], 42])
def test_non_mapping_draft_is_ignored(draft, caplog) -> None:
    with caplog.at_level("WARNING", logger="matchday.drafts.resolver"):
        resolved = resolve_initial("Scheduled", draft, COMMITTED, DEFAULTS)
    assert resolved.source == "defaults"
    assert resolved.snapshot["final_score"] == COMMITTED["final_score"]
    assert "draft_ignored" in caplog.text


def test_draft_outside_drafting_states_is_ignored() -> None:
    draft = {"final_score": {"our_score": 9, "opponent_score": 9}}
    resolved = resolve_initial("Done", draft, COMMITTED, DEFAULTS)
    assert resolved.source == "defaults"
    assert resolved.snapshot["final_score"] == COMMITTED["final_score"]


def test_draft_ranks_above_cache_and_secondary() -> None:
    resolved = resolve_initial(
        "Scheduled",
        {"formation_type": "1-4-3-3"},
        {},
        {},
        cached={"formation_type": "1-3-5-2"},
        secondary={"formation_type": "1-4-4-2"},
    )
    assert resolved.source == "draft"
    assert resolved.snapshot["formation_type"] == "1-4-3-3"


def test_cache_used_when_backend_draft_is_empty() -> None:
    resolved = resolve_initial(
        "Scheduled",
        None,
        {},
        {},
        cached={"formation_type": "1-3-5-2"},
        secondary={"formation_type": "1-4-4-2"},
    )
    assert resolved.source == "cache"
    assert resolved.snapshot["formation_type"] == "1-3-5-2"


def test_secondary_used_without_draft_or_cache() -> None:
    secondary = {"rosters": {"p1": "Starting Lineup"}, "formation": {"gk": "p1"}}
    resolved = resolve_initial("Played", None, {"formation_type": "1-4-4-2"}, {}, secondary=secondary)
    assert resolved.source == "secondary"
    assert resolved.snapshot == {
        "formation_type": "1-4-4-2",
        "rosters": {"p1": "Starting Lineup"},
        "formation": {"gk": "p1"},
    }


def test_secondary_applies_even_after_drafting_ends() -> None:
    resolved = resolve_initial("Done", None, {}, {}, cached={"x": 1}, secondary={"rosters": {"p1": "Bench"}})
    assert resolved.source == "secondary"
    assert "x" not in resolved.snapshot


def test_merge_replaces_values_nested_below_the_group() -> None:
    committed = {
        "player_reports": {
            "p1": {"minutes_played": 90, "rating": 3},
            "p2": {"minutes_played": 45, "rating": 4},
        }
    }
    draft = {"player_reports": {"p1": {"rating": 5}}}
    merged = merge_draft(committed, draft)
    assert merged["player_reports"]["p1"] == {"rating": 5}
    assert merged["player_reports"]["p2"] == {"minutes_played": 45, "rating": 4}


def test_merge_ignores_none_values_and_does_not_mutate_inputs() -> None:
    base = {"team_summary": {"defense_summary": "kept"}, "formation_type": "1-4-4-2"}
    draft = {"formation_type": None, "team_summary": {"attack_summary": "new"}}
    merged = merge_draft(base, draft)
    assert merged == {
        "team_summary": {"defense_summary": "kept", "attack_summary": "new"},
        "formation_type": "1-4-4-2",
    }
    assert base == {"team_summary": {"defense_summary": "kept"}, "formation_type": "1-4-4-2"}
    assert draft["team_summary"] == {"attack_summary": "new"}


def test_merge_with_empty_draft_is_identity() -> None:
    assert merge_draft(COMMITTED, {}) == COMMITTED
    assert merge_draft(COMMITTED, None) == COMMITTED


def test_is_usable_draft() -> None:
    assert is_usable_draft({"a": 1})
    assert not is_usable_draft({})
    assert not is_usable_draft(None)
    assert not is_usable_draft("draft")


@pytest.mark.parametrize("draft", [None, {}])
def test_committed_none_values_survive_without_draft(draft) -> None:
    committed = {"formation_type": None, "formation": {"gk": "p1"}}
    resolved = resolve_initial("Played", draft, committed, {"formation_type": "1-4-4-2"})
    assert resolved.source == "defaults"
    assert resolved.snapshot == committed


def test_committed_none_kept_under_partial_draft() -> None:
    committed = {"formation_type": None, "team_summary": {"defense_summary": "saved"}}
    resolved = resolve_initial("Played", {"team_summary": {"attack_summary": "draft"}}, committed, {})
    assert resolved.snapshot == {
        "formation_type": None,
        "team_summary": {"defense_summary": "saved", "attack_summary": "draft"},
    }
