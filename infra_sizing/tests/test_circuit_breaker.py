"""
Tests for the circuit breaker.
"""

import pytest

from infra_sizing.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerError,
    CircuitState,
    get_circuit_breaker,
)


@pytest.fixture
def breaker(clock):
    return CircuitBreaker("live_pricing", failure_threshold=3, open_duration=60, clock=clock)


def test_opens_after_threshold(breaker):
    """Consecutive failures trip the breaker."""
    breaker.record_failure()
    breaker.record_failure()
    assert breaker.allow_request()
    breaker.record_failure()
    assert breaker.current_state() == CircuitState.OPEN
    assert not breaker.allow_request()


def test_success_resets_failures(breaker):
    """A success clears the failure count."""
    breaker.record_failure()
    breaker.record_failure()
    breaker.record_success()
    breaker.record_failure()
    assert breaker.current_state() == CircuitState.CLOSED


def test_half_open_after_duration(breaker, clock):
    """After the open period one trial request is let through."""
    for _ in range(3):
        breaker.record_failure()

    clock.advance(seconds=59)
    assert not breaker.allow_request()

    clock.advance(seconds=1)
    assert breaker.allow_request()
    assert breaker.current_state() == CircuitState.HALF_OPEN
    assert not breaker.allow_request()


def test_half_open_success_closes(breaker, clock):
    """A successful trial closes the circuit."""
    for _ in range(3):
        breaker.record_failure()
    clock.advance(seconds=60)
    breaker.allow_request()
    breaker.record_success()
    assert breaker.current_state() == CircuitState.CLOSED
    assert breaker.allow_request()


def test_half_open_failure_reopens(breaker, clock):
    """A failed trial reopens the circuit."""
    for _ in range(3):
        breaker.record_failure()
    clock.advance(seconds=60)
    breaker.allow_request()
    breaker.record_failure()
    assert breaker.current_state() == CircuitState.OPEN
    assert not breaker.allow_request()


def test_guard_raises_when_open(breaker):
    """guard() fails fast while open."""
    breaker.guard()
    for _ in range(3):
        breaker.record_failure()
    with pytest.raises(CircuitBreakerError):
        breaker.guard()


def test_registry_returns_same_instance():
    """Breakers are shared per source name."""
    assert get_circuit_breaker("live_pricing") is get_circuit_breaker("live_pricing")
    assert get_circuit_breaker("live_pricing") is not get_circuit_breaker("other")
