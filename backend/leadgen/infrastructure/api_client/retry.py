"""
Retry Coordinator
Bounded-attempt retry with exponential backoff around a single request.

Each attempt has its own hard timeout. Failures are classified after every
attempt; non-retryable failures and the last attempt's failure are raised
immediately as RequestError. Backoff suspends only the awaiting task.
"""
import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, Optional

from leadgen.core.config import ConfigManager
from leadgen.domain.models.request_outcome import TransportFailure
from leadgen.domain.services.error_classifier import classify
from leadgen.infrastructure.api_client.errors import RequestError, RequestFailure

logger = logging.getLogger(__name__)

DEFAULT_IN_FLIGHT_THRESHOLD = 10

Operation = Callable[[], Awaitable[Any]]
Sleeper = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RetryConfig:
    """Retry schedule; delays are in milliseconds"""
    max_attempts: int = 2
    base_delay_ms: float = 1500
    max_delay_ms: float = 30000
    backoff_multiplier: float = 2
    attempt_timeout_s: float = 10.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must not be negative")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if self.attempt_timeout_s <= 0:
            raise ValueError("attempt_timeout_s must be positive")

    def merged(self, **overrides: Any) -> "RetryConfig":
        """Copy with the given fields replaced; None values are ignored"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_config(cls, config: Optional[ConfigManager] = None) -> "RetryConfig":
        """Build from the `client.retry` section of the YAML config"""
        section = (config or ConfigManager()).get_section("client.retry")
        known = {k: v for k, v in section.items() if k in cls.__dataclass_fields__}
        return cls(**known)


def compute_delay_ms(attempt: int, config: RetryConfig) -> float:
    """
    Backoff delay after a failed attempt (1-based).

    Example with defaults: attempt 1 -> 1500, attempt 2 -> 3000, capped at 30000.
    """
    delay = config.base_delay_ms * (config.backoff_multiplier ** (attempt - 1))
    return min(delay, config.max_delay_ms)


class InFlightTracker:
    """
    Counts concurrent calls per logical resource and warns above a threshold.

    Diagnostic only: requests are never deduplicated or delayed.
    """

    def __init__(self, threshold: int = DEFAULT_IN_FLIGHT_THRESHOLD):
        self.threshold = threshold
        self._counts: Dict[str, int] = defaultdict(int)

    def acquire(self, resource: str) -> int:
        self._counts[resource] += 1
        count = self._counts[resource]
        if count > self.threshold:
            logger.warning(
                f"More than {self.threshold} concurrent requests to {resource}. Count: {count}"
            )
        return count

    def release(self, resource: str) -> None:
        remaining = max(0, self._counts.get(resource, 1) - 1)
        if remaining:
            self._counts[resource] = remaining
        else:
            self._counts.pop(resource, None)

    def count(self, resource: str) -> int:
        return self._counts.get(resource, 0)


# Shared across coordinators in this process, like the single event loop
default_tracker = InFlightTracker()


async def execute_with_retry(
    op: Operation,
    config: Optional[RetryConfig] = None,
    *,
    resource: Optional[str] = None,
    sleep: Sleeper = asyncio.sleep,
    tracker: Optional[InFlightTracker] = None,
) -> Any:
    """
    Run `op` with retries.

    Args:
        op: Zero-argument coroutine factory; raises RequestFailure on failure
        config: Retry schedule (defaults to RetryConfig())
        resource: Logical resource name for the in-flight counter
        sleep: Awaitable sleep taking seconds (injected in tests)
        tracker: In-flight counter (defaults to the process-wide one)

    Returns:
        Whatever `op` returns on the first successful attempt

    Raises:
        RequestError: Non-retryable failure, or retryable failure on the last attempt
    """
    config = config or RetryConfig()
    tracker = tracker or default_tracker
    resource = resource or getattr(op, "__name__", "request")

    tracker.acquire(resource)
    try:
        for attempt in range(1, config.max_attempts + 1):
            try:
                return await asyncio.wait_for(op(), timeout=config.attempt_timeout_s)
            except RequestFailure as e:
                outcome = e.outcome
            except asyncio.TimeoutError:
                outcome = TransportFailure(
                    reason=f"no response within {config.attempt_timeout_s}s",
                    timed_out=True,
                )

            classification = classify(outcome)
            if not classification.retryable or attempt == config.max_attempts:
                logger.warning(
                    f"{resource}: giving up after attempt {attempt}/{config.max_attempts} "
                    f"({classification.kind.value}, retryable={classification.retryable})"
                )
                raise RequestError(classification, attempts=attempt)

            delay_ms = compute_delay_ms(attempt, config)
            logger.info(
                f"{resource}: attempt {attempt}/{config.max_attempts} failed "
                f"({classification.kind.value}), retrying in {delay_ms:.0f}ms"
            )
            await sleep(delay_ms / 1000)
    finally:
        tracker.release(resource)
