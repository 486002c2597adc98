"""Tests for RetryPolicy, settings and logging configuration."""

from __future__ import annotations

import io
from datetime import timedelta

import orjson
import pytest
from pydantic import ValidationError

from reattempt import NO_RETRY, FixedInterval, Retry, RetryPolicy, configure_logging
from reattempt.foundation.config import clear_settings_cache, get_settings, timer_from_settings
from reattempt.strategy import LimitRetries
from reattempt.testing import FlakyAction, RecordingTimer
from reattempt.timer import LoopTimer, ThreadTimer

S = timedelta(seconds=1)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> object:
    """Isolate each test from REATTEMPT_* variables and the settings cache."""
    for var in ("KIND", "BASE_DELAY", "MAX_DELAY", "MAX_RETRIES", "JITTER"):
        monkeypatch.delenv(f"REATTEMPT_RETRY_{var}", raising=False)
    monkeypatch.delenv("REATTEMPT_TIMER_BACKEND", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# ─────────────────────────────────────────────────────────────────────────────
# RetryPolicy
# ─────────────────────────────────────────────────────────────────────────────


class TestRetryPolicy:
    def test_default_builds_limited_exponential(self) -> None:
        assert RetryPolicy().build().take(10) == [0.1 * S, 0.2 * S, 0.4 * S]

    def test_cap_and_limit(self) -> None:
        policy = RetryPolicy(kind="fixed", base_delay=1, max_delay=0.5, max_retries=2)
        assert policy.build().take(5) == [0.5 * S, 0.5 * S]

    @pytest.mark.parametrize("kind,expected", [
        ("fixed", [1, 1, 1, 1]),
        ("exponential", [1, 2, 4, 8]),
        ("linear", [1, 2, 3, 4]),
        ("fibonacci", [1, 1, 2, 3]),
    ])
    def test_kinds(self, kind: str, expected: list[int]) -> None:
        policy = RetryPolicy(kind=kind, base_delay=1, max_retries=4)
        assert policy.build().take(10) == [n * S for n in expected]

    def test_build_returns_fresh_strategies(self) -> None:
        policy = RetryPolicy(max_retries=2)
        first, second = policy.build(), policy.build()

        assert first is not second
        assert first.take(5) == second.take(5)

    def test_unlimited_retries(self) -> None:
        assert len(RetryPolicy(kind="fixed", base_delay=0, max_retries=None).build().take(50)) == 50

    def test_jitter_stays_within_cap(self) -> None:
        policy = RetryPolicy(kind="exponential", base_delay=1, max_delay=4, max_retries=20, jitter=True)
        values = policy.build().take(20)

        assert len(values) == 20
        assert all(timedelta(0) <= v <= 4 * S for v in values)

    def test_chain_ends_with_retry_limit(self) -> None:
        assert isinstance(RetryPolicy(jitter=True, max_delay=1).build(), LimitRetries)

    def test_no_retry(self) -> None:
        assert NO_RETRY.is_disabled
        assert NO_RETRY.build().take(1) == []

    @pytest.mark.parametrize("kwargs", [
        {"base_delay": -1},
        {"max_retries": -1},
        {"max_delay": 0},
        {"kind": "quadratic"},
        {"unknown": True},
    ])
    def test_validation(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            RetryPolicy(**kwargs)

    def test_frozen(self) -> None:
        policy = RetryPolicy()
        with pytest.raises(ValidationError):
            policy.max_retries = 10  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        policy = RetryPolicy(kind="linear", base_delay=0.25, max_retries=7)
        assert RetryPolicy.model_validate_json(policy.model_dump_json(exclude={"is_disabled"})) == policy


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────


class TestSettings:
    def test_defaults(self) -> None:
        settings = get_settings()

        assert settings.retry.kind == "exponential"
        assert settings.timer.backend == "loop"
        assert settings.retries_enabled

    def test_settings_are_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_policy_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REATTEMPT_RETRY_KIND", "fixed")
        monkeypatch.setenv("REATTEMPT_RETRY_BASE_DELAY", "0.5")
        monkeypatch.setenv("REATTEMPT_RETRY_MAX_RETRIES", "2")
        monkeypatch.setenv("REATTEMPT_RETRY_JITTER", "false")
        clear_settings_cache()

        policy = RetryPolicy.from_settings()

        assert policy.kind == "fixed"
        assert policy.build().take(5) == [0.5 * S, 0.5 * S]

    def test_empty_environment_matches_policy_defaults(self) -> None:
        policy = RetryPolicy.from_settings()

        assert policy == RetryPolicy()
        assert policy.build().take(10) == RetryPolicy().build().take(10)

    def test_zero_retries_disables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REATTEMPT_RETRY_MAX_RETRIES", "0")
        clear_settings_cache()

        assert not get_settings().retries_enabled
        assert RetryPolicy.from_settings().is_disabled

    def test_timer_backend_selection(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert isinstance(timer_from_settings(), LoopTimer)

        monkeypatch.setenv("REATTEMPT_TIMER_BACKEND", "thread")
        clear_settings_cache()
        timer = timer_from_settings()
        try:
            assert isinstance(timer, ThreadTimer)
        finally:
            timer.close()


# ─────────────────────────────────────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────────────────────────────────────


class TestLogging:
    @pytest.fixture(autouse=True)
    def reset_logging(self) -> object:
        yield
        configure_logging("none")

    @pytest.mark.asyncio
    async def test_json_lines_for_retries(self) -> None:
        out = io.StringIO()
        configure_logging("json", "DEBUG", output=out)

        await Retry(FixedInterval(0).limit_retries(1), FlakyAction(failures=None), timer=RecordingTimer(),
                    name="fetch").run()

        records = [orjson.loads(line) for line in out.getvalue().splitlines()]
        events = [(r["level"], r["logger"]) for r in records]

        assert ("info", "reattempt.driver") in events
        assert ("warning", "reattempt.driver") in events
        assert any(r["event"].startswith("[fetch] Retry 1 after 0.000s") for r in records)
        assert all("timestamp" in r for r in records)

    @pytest.mark.asyncio
    async def test_text_format(self) -> None:
        out = io.StringIO()
        configure_logging("text", "INFO", output=out)

        await Retry(FixedInterval(0).limit_retries(1), FlakyAction(failures=1), timer=RecordingTimer(),
                    name="fetch").run()

        assert "[INFO] reattempt.driver: [fetch] Retry 1" in out.getvalue()

    def test_reconfigure_replaces_handler(self) -> None:
        first = configure_logging("text")
        count = len(first.handlers)
        second = configure_logging("json")

        assert first is second
        assert len(second.handlers) == count

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unknown format"):
            configure_logging("xml")

    @pytest.mark.asyncio
    async def test_unknown_format_keeps_existing_handler(self) -> None:
        out = io.StringIO()
        configure_logging("text", "INFO", output=out)

        with pytest.raises(ValueError):
            configure_logging("xml", "DEBUG")

        await Retry(FixedInterval(0).limit_retries(1), FlakyAction(failures=1), timer=RecordingTimer(),
                    name="fetch").run()

        assert "[INFO] reattempt.driver: [fetch] Retry 1" in out.getvalue()
        assert "DEBUG" not in out.getvalue()
