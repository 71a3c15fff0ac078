"""Circuit breaker for outbound hand-offs to external services.

Lifecycle operations hand notification events to the event bus and must not
stall when it is down: after `fail_max` consecutive failures the breaker opens
and every further hand-off fails fast until `reset_timeout` has elapsed, then
a single trial call decides whether to close it again.
"""

import logging
import time
from enum import Enum
from threading import Lock
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerError(Exception):
    """Raised instead of calling through while the circuit is open."""
    pass


class CircuitBreaker:
    """
    Thread-safe failure counter guarding calls to one external service.

    Usage:
        breaker = CircuitBreaker(name="event_bus", fail_max=3, reset_timeout=60)
        breaker.call(client.send_sync, event)
    """

    def __init__(self, name: str, fail_max: int = 5, reset_timeout: float = 60):
        self.name = name
        self.fail_max = fail_max
        self.reset_timeout = reset_timeout

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._lock = Lock()

    @property
    def state(self) -> CircuitState:
        """Current state; an open circuit turns half-open once the timeout passes."""
        with self._lock:
            if (
                self._state == CircuitState.OPEN
                and self._opened_at is not None
                and time.monotonic() - self._opened_at >= self.reset_timeout
            ):
                logger.info(f"[CircuitBreaker:{self.name}] Trial call allowed (HALF_OPEN)")
                self._state = CircuitState.HALF_OPEN
            return self._state

    def call(self, func: Callable, *args, **kwargs):
        """Call `func` through the breaker, failing fast while it is open."""
        if self.state == CircuitState.OPEN:
            raise CircuitBreakerError(f"Circuit breaker '{self.name}' is open")

        try:
            result = func(*args, **kwargs)
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def _on_success(self) -> None:
        with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info(f"[CircuitBreaker:{self.name}] Closing circuit")
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._opened_at = None

    def _on_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            if self._state == CircuitState.HALF_OPEN or self._failure_count >= self.fail_max:
                logger.warning(
                    f"[CircuitBreaker:{self.name}] Opening circuit after {self._failure_count} failures"
                )
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()

    def reset(self) -> None:
        """Force the breaker back to closed."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._opened_at = None

    def get_status(self) -> dict:
        """Breaker status for the health endpoint."""
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self._failure_count,
            "fail_max": self.fail_max,
            "reset_timeout": self.reset_timeout,
        }


event_bus_circuit_breaker = CircuitBreaker(
    name="inngest_event_bus",
    fail_max=3,
    reset_timeout=60,
)
