from __future__ import annotations

"""
Squad and match-report checks used as lifecycle transition guards.

Design intent:
- Errors block a transition, warnings only ask the coach to confirm.
- Work on plain snapshot payloads so the same checks run in UI and service code.
"""

from typing import Any, Mapping, Optional, Sequence

from matchday.internal_core.contracts import ValidationResult

GOALKEEPER_POSITION = "gk"


def _assigned_players(formation: Optional[Mapping[str, Any]]) -> list[Any]:
    return [player for player in dict(formation or {}).values() if player]


def validate_starting_lineup(
    formation: Optional[Mapping[str, Any]], lineup_size: int = 11
) -> ValidationResult:
    count = len(_assigned_players(formation))
    if count == 0:
        return ValidationResult(is_valid=False, errors=["No players assigned to starting lineup"])
    if count < lineup_size:
        return ValidationResult(
            is_valid=False,
            errors=[
                f"Only {count} players in starting lineup. Need exactly {lineup_size} players."
            ],
        )
    if count > lineup_size:
        return ValidationResult(
            is_valid=False,
            errors=[
                f"Too many players ({count}) in starting lineup. "
                f"Maximum {lineup_size} players allowed."
            ],
        )
    return ValidationResult(is_valid=True)


def validate_bench_size(bench_players: Sequence[Any], min_bench_size: int = 7) -> ValidationResult:
    count = len(bench_players)
    if count >= min_bench_size:
        return ValidationResult(is_valid=True)
    if count == 0:
        return ValidationResult(
            is_valid=True,
            warnings=["You have no players on the bench. Are you sure you want to continue?"],
        )
    return ValidationResult(
        is_valid=True,
        warnings=[f"Only {count} players on bench (recommended: {min_bench_size}+)"],
    )


def validate_goalkeeper(formation: Optional[Mapping[str, Any]]) -> ValidationResult:
    if not dict(formation or {}).get(GOALKEEPER_POSITION):
        return ValidationResult(is_valid=False, errors=["No goalkeeper assigned to the team"])
    return ValidationResult(is_valid=True)


def _combine(*results: ValidationResult) -> ValidationResult:
    errors = [message for item in results for message in item.errors]
    warnings = [message for item in results for message in item.warnings]
    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def players_with_status(rosters: Optional[Mapping[str, Any]], status: str) -> list[str]:
    return [str(player_id) for player_id, value in dict(rosters or {}).items() if value == status]


def validate_squad(
    payload: Mapping[str, Any], *, lineup_size: int = 11, min_bench_size: int = 7
) -> ValidationResult:
    formation = payload.get("formation")
    bench = players_with_status(payload.get("rosters"), "Bench")
    return _combine(
        validate_starting_lineup(formation, lineup_size),
        validate_bench_size(bench, min_bench_size),
        validate_goalkeeper(formation),
    )


def validate_report_completeness(
    starting_player_ids: Optional[Sequence[str]],
    player_reports: Optional[Mapping[str, Any]],
) -> ValidationResult:
    if not starting_player_ids:
        return ValidationResult(is_valid=False, errors=["No starting lineup players found"])

    reports = dict(player_reports or {})
    missing = []
    for player_id in starting_player_ids:
        report = reports.get(str(player_id))
        if not isinstance(report, Mapping) or report.get("minutes_played") is None:
            missing.append(str(player_id))
    if missing:
        return ValidationResult(
            is_valid=False,
            errors=[
                "Starting lineup players must have complete reports: " + ", ".join(missing)
            ],
        )
    return ValidationResult(is_valid=True)


def validate_final_report(payload: Mapping[str, Any]) -> ValidationResult:
    errors = []
    warnings = []

    final_score = payload.get("final_score")
    if not isinstance(final_score, Mapping):
        errors.append("Final score is required")
    elif not final_score.get("our_score") and not final_score.get("opponent_score"):
        warnings.append("Final score is 0-0. Is this correct?")

    if not isinstance(payload.get("match_duration"), Mapping):
        errors.append("Match duration is required")

    team_summary = payload.get("team_summary")
    if not (isinstance(team_summary, Mapping) and any(team_summary.values())):
        warnings.append("No team summary provided. Consider adding performance notes.")

    starters = players_with_status(payload.get("rosters"), "Starting Lineup")
    reports = validate_report_completeness(starters, payload.get("player_reports"))
    return _combine(ValidationResult(is_valid=not errors, errors=errors, warnings=warnings), reports)
