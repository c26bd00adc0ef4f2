"""
Circuit breaker protecting the live pricing source.

While the source keeps failing, price resolution skips it and falls through
to cached or default price lists instead of waiting on a timeout every call.
"""
from enum import Enum
from datetime import datetime
import logging
import threading
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


FAILURE_THRESHOLD = 3  # Consecutive failures that trip the breaker
OPEN_STATE_DURATION = 60  # Seconds before a tripped breaker lets a probe through
HALF_OPEN_MAX_REQUESTS = 1  # Probes allowed while recovering


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"  # Source is called normally
    OPEN = "open"  # Source is skipped
    HALF_OPEN = "half_open"  # Probing the source


class CircuitBreakerError(Exception):
    """Raised when the live pricing source is skipped because its circuit is open."""
    pass


class CircuitBreaker:
    """
    Consecutive-failure breaker for one pricing source.

    CLOSED trips to OPEN at failure_threshold failures in a row. OPEN lets a
    probe through after open_duration seconds (HALF_OPEN). A successful probe
    closes the circuit and a failed one reopens it.
    """

    def __init__(
        self,
        service_name: str,
        failure_threshold: int = FAILURE_THRESHOLD,
        open_duration: int = OPEN_STATE_DURATION,
        half_open_max_requests: int = HALF_OPEN_MAX_REQUESTS,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            service_name: Source name used in log messages (e.g., "live_pricing")
            failure_threshold: Failures in a row before the circuit opens
            open_duration: Seconds the circuit stays open before probing
            half_open_max_requests: Probes allowed while half-open
            clock: Time source (defaults to datetime.utcnow)
        """
        self.service_name = service_name
        self.failure_threshold = failure_threshold
        self.open_duration = open_duration
        self.half_open_max_requests = half_open_max_requests
        self._clock = clock or datetime.utcnow
        self._lock = threading.Lock()

        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.last_failure_time: Optional[datetime] = None
        self.opened_at: Optional[datetime] = None
        self.probes_in_flight = 0

    def _move_to(self, state: CircuitState, reason: str) -> None:
        # Caller holds the lock
        logger.warning(
            f"Pricing source {self.service_name}: "
            f"{self.state.name} -> {state.name} ({reason})"
        )
        self.state = state
        self.probes_in_flight = 0
        self.opened_at = self._clock() if state == CircuitState.OPEN else None

    def _open_window_elapsed(self) -> bool:
        if self.opened_at is None:
            return False
        return (self._clock() - self.opened_at).total_seconds() >= self.open_duration

    def allow_request(self) -> bool:
        """
        Decide whether the source may be called now.

        Returns:
            False while the circuit is open or the probe budget is used up
        """
        with self._lock:
            if self.state == CircuitState.OPEN:
                if not self._open_window_elapsed():
                    return False
                self._move_to(CircuitState.HALF_OPEN, "probing source")

            if self.state == CircuitState.HALF_OPEN:
                if self.probes_in_flight >= self.half_open_max_requests:
                    return False
                self.probes_in_flight += 1

            return True

    def guard(self) -> None:
        """
        Raises:
            CircuitBreakerError: If the source may not be called now
        """
        if not self.allow_request():
            raise CircuitBreakerError(f"Circuit open for {self.service_name}")

    def record_success(self) -> None:
        """Clear the failure streak; a successful probe closes the circuit."""
        with self._lock:
            if self.state == CircuitState.HALF_OPEN:
                self._move_to(CircuitState.CLOSED, "source recovered")
            self.failure_count = 0

    def record_failure(self) -> None:
        """Extend the failure streak; reopen on a failed probe."""
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = self._clock()

            if self.state == CircuitState.HALF_OPEN:
                self._move_to(CircuitState.OPEN, "probe failed")
            elif self.state == CircuitState.CLOSED and self.failure_count >= self.failure_threshold:
                self._move_to(CircuitState.OPEN, f"{self.failure_count} failures in a row")

    def current_state(self) -> CircuitState:
        return self.state


# One breaker per named source, shared process-wide
_circuit_breakers: Dict[str, CircuitBreaker] = {}
_registry_lock = threading.Lock()


def get_circuit_breaker(service_name: str) -> CircuitBreaker:
    """Return the shared breaker for a source, creating it on first use."""
    with _registry_lock:
        breaker = _circuit_breakers.get(service_name)
        if breaker is None:
            breaker = _circuit_breakers[service_name] = CircuitBreaker(service_name)
        return breaker


def reset_circuit_breakers() -> None:
    """Forget all breakers (test isolation)."""
    with _registry_lock:
        _circuit_breakers.clear()
