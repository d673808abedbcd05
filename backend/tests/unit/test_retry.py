"""
Unit Tests for the Retry Coordinator
"""
import asyncio
import logging

import pytest

from leadgen.domain.models.request_outcome import (
    ErrorKind,
    HttpStatusFailure,
    TransportFailure,
)
from leadgen.infrastructure.api_client.errors import RequestError, RequestFailure
from leadgen.infrastructure.api_client.retry import (
    InFlightTracker,
    RetryConfig,
    compute_delay_ms,
    execute_with_retry,
)


class RecordingSleep:
    """Captures requested delays (seconds) without waiting"""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


class ScriptedOperation:
    """Fails with the scripted outcomes, then returns the body"""

    def __init__(self, outcomes, body=None):
        self.outcomes = list(outcomes)
        self.body = body
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.outcomes:
            raise RequestFailure(self.outcomes.pop(0))
        return self.body


class TestRetryConfig:

    def test_defaults(self):
        config = RetryConfig()
        assert config.max_attempts == 2
        assert config.base_delay_ms == 1500
        assert config.max_delay_ms == 30000
        assert config.backoff_multiplier == 2
        assert config.attempt_timeout_s == 10.0

    def test_merged_ignores_none(self):
        config = RetryConfig().merged(max_attempts=4, base_delay_ms=None)
        assert config.max_attempts == 4
        assert config.base_delay_ms == 1500

    @pytest.mark.parametrize("kwargs", [
        {"max_attempts": 0},
        {"base_delay_ms": -1},
        {"backoff_multiplier": 0.5},
        {"attempt_timeout_s": 0},
    ])
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RetryConfig(**kwargs)

    def test_from_config_reads_yaml_section(self):
        config = RetryConfig.from_config()
        assert config.max_attempts >= 1
        assert config.base_delay_ms == 1500


class TestBackoff:

    def test_exponential_schedule(self):
        config = RetryConfig(base_delay_ms=1000, backoff_multiplier=2, max_delay_ms=30000)
        assert [compute_delay_ms(i, config) for i in (1, 2, 3, 4)] == [1000, 2000, 4000, 8000]

    def test_monotonic_and_capped(self):
        config = RetryConfig(base_delay_ms=1500, backoff_multiplier=3, max_delay_ms=30000)
        delays = [compute_delay_ms(i, config) for i in range(1, 12)]
        assert delays == sorted(delays)
        assert max(delays) == 30000
        assert all(d <= config.max_delay_ms for d in delays)


class TestExecuteWithRetry:

    @pytest.mark.asyncio
    async def test_success_first_attempt_has_no_delay(self):
        sleep = RecordingSleep()
        op = ScriptedOperation([], body={"ok": True})

        result = await execute_with_retry(op, RetryConfig(), sleep=sleep)

        assert result == {"ok": True}
        assert op.calls == 1
        assert sleep.calls == []

    @pytest.mark.asyncio
    async def test_three_503_then_200(self):
        sleep = RecordingSleep()
        op = ScriptedOperation([HttpStatusFailure(status=503)] * 3, body={"id": "rec-1"})
        config = RetryConfig(max_attempts=4, base_delay_ms=1000, backoff_multiplier=2)

        result = await execute_with_retry(op, config, sleep=sleep)

        assert result == {"id": "rec-1"}
        assert op.calls == 4
        # one backoff per failed attempt
        assert sleep.calls == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_two_503_then_200_sleeps_twice(self):
        sleep = RecordingSleep()
        op = ScriptedOperation([HttpStatusFailure(status=503)] * 2, body="ok")
        config = RetryConfig(max_attempts=4, base_delay_ms=1000, backoff_multiplier=2)

        assert await execute_with_retry(op, config, sleep=sleep) == "ok"
        assert sleep.calls == [1.0, 2.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_attempts", [1, 2, 3, 5])
    async def test_never_exceeds_max_attempts(self, max_attempts):
        sleep = RecordingSleep()
        op = ScriptedOperation([TransportFailure(reason="down")] * 10)
        config = RetryConfig(max_attempts=max_attempts)

        with pytest.raises(RequestError) as exc_info:
            await execute_with_retry(op, config, sleep=sleep)

        assert op.calls == max_attempts
        assert len(sleep.calls) == max_attempts - 1
        assert exc_info.value.attempts == max_attempts
        assert exc_info.value.classification.kind == ErrorKind.CONNECTION

    @pytest.mark.asyncio
    async def test_non_retryable_fails_immediately(self):
        sleep = RecordingSleep()
        op = ScriptedOperation([HttpStatusFailure(status=404, error="Agent not found")])

        with pytest.raises(RequestError) as exc_info:
            await execute_with_retry(op, RetryConfig(max_attempts=5), sleep=sleep)

        assert op.calls == 1
        assert sleep.calls == []
        error = exc_info.value
        assert error.retryable is False
        assert error.status == 404
        assert error.presentation.title == "Not Found"

    @pytest.mark.asyncio
    async def test_attempt_timeout_is_retried_as_timeout(self):
        sleep = RecordingSleep()
        calls = 0

        async def slow_then_fast():
            nonlocal calls
            calls += 1
            if calls == 1:
                await asyncio.sleep(1)
            return "done"

        config = RetryConfig(max_attempts=2, attempt_timeout_s=0.01, base_delay_ms=5)
        result = await execute_with_retry(slow_then_fast, config, sleep=sleep)

        assert result == "done"
        assert calls == 2
        assert sleep.calls == [0.005]

    @pytest.mark.asyncio
    async def test_timeouts_count_against_budget(self):
        sleep = RecordingSleep()

        async def hang():
            await asyncio.sleep(1)

        config = RetryConfig(max_attempts=2, attempt_timeout_s=0.01)
        with pytest.raises(RequestError) as exc_info:
            await execute_with_retry(hang, config, sleep=sleep)

        assert exc_info.value.classification.kind == ErrorKind.TIMEOUT
        assert exc_info.value.attempts == 2

    @pytest.mark.asyncio
    async def test_unexpected_exceptions_propagate(self):
        async def broken():
            raise KeyError("bug")

        with pytest.raises(KeyError):
            await execute_with_retry(broken, RetryConfig(max_attempts=3), sleep=RecordingSleep())


class TestInFlightTracker:

    @pytest.mark.asyncio
    async def test_warns_above_threshold_without_blocking(self, caplog):
        tracker = InFlightTracker(threshold=2)
        release = asyncio.Event()

        async def op():
            await release.wait()
            return "ok"

        with caplog.at_level(logging.WARNING, logger="leadgen.infrastructure.api_client.retry"):
            tasks = [
                asyncio.create_task(
                    execute_with_retry(op, RetryConfig(), resource="GET /agents", tracker=tracker)
                )
                for _ in range(3)
            ]
            await asyncio.sleep(0)
            assert tracker.count("GET /agents") == 3
            release.set()
            results = await asyncio.gather(*tasks)

        assert results == ["ok", "ok", "ok"]
        assert tracker.count("GET /agents") == 0
        assert any("More than 2 concurrent requests" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_released_after_failure(self):
        tracker = InFlightTracker()
        op = ScriptedOperation([HttpStatusFailure(status=400)])

        with pytest.raises(RequestError):
            await execute_with_retry(op, resource="POST /records", tracker=tracker, sleep=RecordingSleep())

        assert tracker.count("POST /records") == 0
