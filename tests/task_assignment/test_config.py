from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from task_assignment.config import Config, utc_now
from task_assignment.profiles import SkillProfiler


def test_default_config_is_valid() -> None:
    Config().validate()


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"HISTORY_WINDOW_DAYS": 0}, "HISTORY_WINDOW_DAYS"),
        ({"DEFAULT_ACCURACY": 1.5}, "DEFAULT_ACCURACY"),
        ({"SPEED_JITTER": -0.1}, "SPEED_JITTER"),
        ({"NUM_PARALLEL_WORKERS": 0}, "NUM_PARALLEL_WORKERS"),
        ({"MAX_WORKERS_PER_CALL": 1}, "MAX_WORKERS_PER_CALL"),
        ({"SEED": 1.5}, "SEED"),
        ({"DEFAULT_DEPARTMENT": ""}, "DEFAULT_DEPARTMENT"),
    ],
)
def test_validate_rejects_bad_values(overrides, message) -> None:
    with pytest.raises(ValueError, match=message):
        Config(**overrides).validate()


def test_history_since_uses_window() -> None:
    now = datetime(2024, 3, 31)
    assert Config(HISTORY_WINDOW_DAYS=30).history_since(now) == now - timedelta(days=30)


def test_history_window_defaults_to_utc_clock() -> None:
    before = datetime.now(timezone.utc).replace(tzinfo=None)
    since = Config(HISTORY_WINDOW_DAYS=1).history_since()
    after = datetime.now(timezone.utc).replace(tzinfo=None)
    assert before - timedelta(days=1) <= since <= after - timedelta(days=1)
    assert utc_now().tzinfo is None


def test_profiler_clock_defaults_to_utc(make_store) -> None:
    assert SkillProfiler(make_store())._now is utc_now
