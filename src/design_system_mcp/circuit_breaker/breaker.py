"""Per-resource circuit breaker.

Admits or rejects asynchronous operations based on recent failure
history, bounds each admitted call by a timeout, and moves through
CLOSED -> OPEN -> HALF_OPEN -> (CLOSED | OPEN).

All state transitions happen synchronously between awaits, so a single
event loop never interleaves two transitions of the same breaker.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from ..circuit_breaker_config import CircuitBreakerConfig, CircuitState
from ..errors import DesignSystemError, normalize_error, service_unavailable, timeout_error
from ..events import EventChannel

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CircuitBreakerStats:
    """Point-in-time view of a breaker.

    Times are readings of the breaker's monotonic clock.
    """

    name: str
    state: CircuitState
    failure_count: int
    success_count: int
    half_open_call_count: int
    last_failure_time: float | None
    last_success_time: float | None
    next_attempt_time: float | None
    total_requests: int
    total_failures: int
    total_successes: int
    total_rejections: int

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly dict."""
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "success_count": self.success_count,
            "half_open_call_count": self.half_open_call_count,
            "last_failure_time": self.last_failure_time,
            "last_success_time": self.last_success_time,
            "next_attempt_time": self.next_attempt_time,
            "total_requests": self.total_requests,
            "total_failures": self.total_failures,
            "total_successes": self.total_successes,
            "total_rejections": self.total_rejections,
        }


class CircuitBreaker:
    """Circuit breaker guarding one logical dependency.

    Usage:
        breaker = registry.get_circuit_breaker(CircuitBreakerConfig(name="tokens"))
        tokens = await breaker.execute(lambda: fetch_tokens(), {"method": "list"})

    Failures are counted over a rolling window of ``monitoring_period``
    seconds; a success while CLOSED clears the window. While HALF_OPEN,
    the first trial call to settle decides the next state; outcomes of
    other trials from the same episode are ignored.

    Events (``breaker.events``):
        state_change(from_state, to_state, stats)
        call_rejected(error)
        call_failure(error)
    """

    def __init__(self, config: CircuitBreakerConfig, clock: Clock | None = None) -> None:
        """Initialize the breaker in CLOSED state.

        Args:
            config: Breaker configuration.
            clock: Monotonic time source in seconds. Defaults to time.monotonic.
        """
        self._config = config
        self._clock = clock or time.monotonic
        self.events = EventChannel(f"CircuitBreaker[{config.name}]")

        self._state = CircuitState.CLOSED
        self._failure_times: deque[float] = deque()
        self._success_count = 0
        self._half_open_calls = 0
        self._half_open_episode = 0
        self._last_failure_time: float | None = None
        self._last_success_time: float | None = None
        self._next_attempt_time: float | None = None

        self._total_requests = 0
        self._total_failures = 0
        self._total_successes = 0
        self._total_rejections = 0

        # Operations abandoned after a timeout, kept referenced until they settle
        self._abandoned: set[asyncio.Future[Any]] = set()

        logger.info(
            "Circuit breaker '%s' initialized (threshold=%d, recovery=%.3fs, timeout=%.3fs)",
            config.name,
            config.failure_threshold,
            config.recovery_timeout,
            config.request_timeout,
        )

    @property
    def name(self) -> str:
        """Return the resource name."""
        return self._config.name

    @property
    def config(self) -> CircuitBreakerConfig:
        """Return the breaker configuration."""
        return self._config

    @property
    def state(self) -> CircuitState:
        """Return the current state without evaluating recovery."""
        return self._state

    @property
    def failure_count(self) -> int:
        """Return failures inside the monitoring window."""
        self._prune_failures(self._clock())
        return len(self._failure_times)

    @property
    def half_open_call_count(self) -> int:
        """Return trial calls admitted in the current HALF_OPEN episode."""
        return self._half_open_calls

    @property
    def next_attempt_time(self) -> float | None:
        """Return the clock reading after which an OPEN breaker admits a trial."""
        return self._next_attempt_time

    @property
    def last_failure_time(self) -> float | None:
        return self._last_failure_time

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        context: dict[str, Any] | None = None,
    ) -> T:
        """Run operation under breaker protection.

        Args:
            operation: Zero-argument callable returning an awaitable.
            context: Extra fields for log and error context.

        Returns:
            The operation's result.

        Raises:
            DesignSystemError: SERVICE_UNAVAILABLE when rejected without
                invoking the operation, TIMEOUT when request_timeout elapses.
            Exception: The operation's own error, re-raised after bookkeeping.
        """
        ctx = {**(context or {}), "circuit_name": self.name}
        self._total_requests += 1

        trial_episode = self._admit(ctx)
        start = self._clock()
        try:
            result = await self._call_with_timeout(operation, ctx)
        except asyncio.CancelledError:
            self._release_trial(trial_episode)
            raise
        except Exception as exc:
            self._on_failure(exc, trial_episode, start, ctx)
            raise
        self._on_success(trial_episode, start, ctx)
        return result

    def get_stats(self) -> CircuitBreakerStats:
        """Return a snapshot of counters and state."""
        return CircuitBreakerStats(
            name=self.name,
            state=self._state,
            failure_count=self.failure_count,
            success_count=self._success_count,
            half_open_call_count=self._half_open_calls,
            last_failure_time=self._last_failure_time,
            last_success_time=self._last_success_time,
            next_attempt_time=self._next_attempt_time,
            total_requests=self._total_requests,
            total_failures=self._total_failures,
            total_successes=self._total_successes,
            total_rejections=self._total_rejections,
        )

    def reset(self) -> None:
        """Return to a pristine CLOSED breaker, clearing all counters."""
        previous = self._state
        self._state = CircuitState.CLOSED
        self._failure_times.clear()
        self._success_count = 0
        self._half_open_calls = 0
        self._half_open_episode += 1
        self._last_failure_time = None
        self._last_success_time = None
        self._next_attempt_time = None
        self._total_requests = 0
        self._total_failures = 0
        self._total_successes = 0
        self._total_rejections = 0
        logger.info("Circuit breaker '%s' reset", self.name)
        if previous is not CircuitState.CLOSED:
            self.events.emit("state_change", previous, CircuitState.CLOSED, self.get_stats())

    def _admit(self, ctx: dict[str, Any]) -> int | None:
        """Admit or reject a call.

        Returns:
            The HALF_OPEN episode number for a trial call, None otherwise.
        """
        if self._state is CircuitState.OPEN:
            next_attempt = self._next_attempt_time
            if next_attempt is not None and self._clock() < next_attempt:
                raise self._reject("Circuit breaker is OPEN", ctx)
            self._transition(CircuitState.HALF_OPEN)

        if self._state is CircuitState.HALF_OPEN:
            if self._half_open_calls >= self._config.half_open_max_calls:
                raise self._reject("Circuit breaker is HALF_OPEN and at call limit", ctx)
            self._half_open_calls += 1
            return self._half_open_episode

        return None

    def _reject(self, reason: str, ctx: dict[str, Any]) -> DesignSystemError:
        self._total_rejections += 1
        retry_after = 0.0
        if self._next_attempt_time is not None:
            retry_after = max(0.0, self._next_attempt_time - self._clock())
        if self._state is CircuitState.OPEN:
            reason = f"{reason}. Next attempt in {retry_after:.1f}s"
        error = service_unavailable(
            self.name,
            reason,
            {
                **ctx,
                "circuit_state": self._state.value,
                "next_attempt_time": self._next_attempt_time,
                "retry_after": retry_after,
            },
        )
        self.events.emit("call_rejected", error)
        return error

    async def _call_with_timeout(
        self,
        operation: Callable[[], Awaitable[T]],
        ctx: dict[str, Any],
    ) -> T:
        """Race operation against request_timeout without cancelling it."""
        future: asyncio.Future[T] = asyncio.ensure_future(operation())
        try:
            return await asyncio.wait_for(
                asyncio.shield(future), timeout=self._config.request_timeout
            )
        except asyncio.CancelledError:
            self._abandon(future)
            raise
        except TimeoutError:
            if future.done() and not future.cancelled():
                if isinstance(future.exception(), TimeoutError):
                    # The operation raised TimeoutError itself
                    raise
                # Settled in the same turn the timer fired
                return future.result()
            self._abandon(future)
            raise timeout_error(self.name, self._config.request_timeout, ctx) from None

    def _abandon(self, future: asyncio.Future[Any]) -> None:
        """Detach from a still-running operation; its outcome is discarded."""
        if future.done():
            self._consume_late_outcome(future)
            return
        self._abandoned.add(future)
        future.add_done_callback(self._consume_late_outcome)

    def _consume_late_outcome(self, future: asyncio.Future[Any]) -> None:
        self._abandoned.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.debug(
                "Circuit breaker '%s' discarded late failure: %s", self.name, exc
            )
        else:
            logger.debug("Circuit breaker '%s' discarded late result", self.name)

    def _on_success(self, trial_episode: int | None, start: float, ctx: dict[str, Any]) -> None:
        now = self._clock()
        self._success_count += 1
        self._total_successes += 1
        self._last_success_time = now

        if trial_episode is not None:
            if self._is_current_trial(trial_episode):
                self._transition(CircuitState.CLOSED)
        elif self._state is CircuitState.CLOSED:
            self._failure_times.clear()

        logger.debug(
            "Circuit breaker '%s' success in %.1fms (state=%s)",
            self.name,
            (now - start) * 1000,
            self._state.value,
        )

    def _on_failure(
        self,
        exc: Exception,
        trial_episode: int | None,
        start: float,
        ctx: dict[str, Any],
    ) -> None:
        now = self._clock()
        self._total_failures += 1
        self._last_failure_time = now

        if trial_episode is not None:
            if self._is_current_trial(trial_episode):
                self._failure_times.append(now)
                self._transition(CircuitState.OPEN)
        elif self._state is CircuitState.CLOSED:
            self._failure_times.append(now)
            self._prune_failures(now)
            if len(self._failure_times) >= self._config.failure_threshold:
                self._transition(CircuitState.OPEN)

        logger.warning(
            "Circuit breaker '%s' failure %d/%d after %.1fms (state=%s): %s",
            self.name,
            len(self._failure_times),
            self._config.failure_threshold,
            (now - start) * 1000,
            self._state.value,
            exc,
        )
        # Normalized copy only for listeners; the caller gets the original
        if isinstance(exc, DesignSystemError):
            self.events.emit("call_failure", exc)
        else:
            self.events.emit("call_failure", normalize_error(exc, dict(ctx)))

    def _release_trial(self, trial_episode: int | None) -> None:
        """Give back a trial slot whose caller was cancelled."""
        if trial_episode is not None and self._is_current_trial(trial_episode):
            self._half_open_calls = max(0, self._half_open_calls - 1)

    def _is_current_trial(self, trial_episode: int) -> bool:
        return (
            self._state is CircuitState.HALF_OPEN
            and trial_episode == self._half_open_episode
        )

    def _prune_failures(self, now: float) -> None:
        cutoff = now - self._config.monitoring_period
        while self._failure_times and self._failure_times[0] <= cutoff:
            self._failure_times.popleft()

    def _transition(self, new_state: CircuitState) -> None:
        previous = self._state
        if previous is new_state:
            return
        self._state = new_state
        now = self._clock()

        if new_state is CircuitState.OPEN:
            self._next_attempt_time = now + self._config.recovery_timeout
            self._half_open_calls = 0
            logger.warning(
                "Circuit breaker '%s' moved %s -> OPEN (failures=%d, retry in %.3fs)",
                self.name,
                previous.value,
                len(self._failure_times),
                self._config.recovery_timeout,
            )
        elif new_state is CircuitState.HALF_OPEN:
            self._half_open_calls = 0
            self._half_open_episode += 1
            logger.info("Circuit breaker '%s' moved OPEN -> HALF_OPEN", self.name)
        else:
            self._failure_times.clear()
            self._half_open_calls = 0
            self._success_count = 0
            self._next_attempt_time = None
            logger.info("Circuit breaker '%s' moved %s -> CLOSED", self.name, previous.value)

        self.events.emit("state_change", previous, new_state, self.get_stats())
