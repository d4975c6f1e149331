import pytest

from matchday.internal_core.config import load_config

_ENV_NAMES = (
    "MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS",
    "MATCHDAY_AUTOSAVE_GRACE_SECONDS",
    "MATCHDAY_STARTING_LINEUP_SIZE",
    "MATCHDAY_MIN_BENCH_SIZE",
    "MATCHDAY_REGULAR_TIME_MINUTES",
    "MATCHDAY_LOG_LEVEL",
)


def _clear_env(monkeypatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_load_config_defaults(monkeypatch) -> None:
    _clear_env(monkeypatch)
    config = load_config()
    assert config.MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS == 2.5
    assert config.MATCHDAY_AUTOSAVE_GRACE_SECONDS == 1.0
    assert config.MATCHDAY_STARTING_LINEUP_SIZE == 11
    assert config.MATCHDAY_MIN_BENCH_SIZE == 7
    assert config.MATCHDAY_REGULAR_TIME_MINUTES == 90
    assert config.MATCHDAY_LOG_LEVEL == "INFO"


def test_load_config_reads_environment(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS", "1.5")
    monkeypatch.setenv("MATCHDAY_STARTING_LINEUP_SIZE", "7")
    monkeypatch.setenv("MATCHDAY_LOG_LEVEL", "debug")
    config = load_config()
    assert config.MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS == 1.5
    assert config.MATCHDAY_STARTING_LINEUP_SIZE == 7
    assert config.MATCHDAY_LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("MATCHDAY_AUTOSAVE_DEBOUNCE_SECONDS", "0"),
        ("MATCHDAY_AUTOSAVE_GRACE_SECONDS", "-1"),
        ("MATCHDAY_MIN_BENCH_SIZE", "seven"),
    ],
)
def test_load_config_rejects_invalid_values(monkeypatch, name: str, value: str) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        load_config()
