"""Resilience patterns: per-dependency circuit breakers.

Short-circuits calls to a downstream dependency once it has been
observed to be unreachable, so one dead backend cannot tie up the
gateway's request handling.
"""

from src.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerRegistry,
    CircuitState,
)

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerRegistry",
    "CircuitState",
]
