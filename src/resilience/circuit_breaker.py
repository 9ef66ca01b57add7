"""Per-dependency circuit breaker.

A deliberately small two-state breaker:

    CLOSED  →  (one transport failure)  →  OPEN
    OPEN    →  (explicit close only)    →  CLOSED

There is no failure counter, no recovery timer and no half-open probe.
Once a dependency is observed to be unreachable it stays OPEN until an
operator closes it (see ``src.admin_router``).

Each downstream dependency gets exactly one ``CircuitBreaker``, created at
startup through ``CircuitBreakerRegistry`` and shared by every request
that targets that dependency.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from src.core.errors import UnknownDependencyError

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"


class CircuitBreaker:
    """Async-safe availability gate for a single dependency.

    Args:
        name: Dependency name (for logging and snapshots).
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._state = CircuitState.CLOSED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    def is_available(self) -> bool:
        """Return ``True`` iff the circuit is CLOSED.  No side effects."""
        return self._state is CircuitState.CLOSED

    async def open(self) -> None:
        """Forbid further calls.  Opening an open circuit is a no-op."""
        async with self._lock:
            if self._state is CircuitState.OPEN:
                return
            self._state = CircuitState.OPEN
        logger.error("Circuit for %s is now OPEN", self.name)

    async def close(self) -> None:
        """Permit calls again.  Closing a closed circuit is a no-op."""
        async with self._lock:
            if self._state is CircuitState.CLOSED:
                return
            self._state = CircuitState.CLOSED
        logger.info("Circuit for %s is now CLOSED", self.name)

    def snapshot(self) -> dict:
        """Return a JSON-serializable snapshot for health/admin endpoints."""
        return {"name": self.name, "state": self._state.value}


class CircuitBreakerRegistry:
    """Owns one ``CircuitBreaker`` per registered dependency.

    Breakers are created once via ``register`` at startup and never
    removed.  Usage::

        registry = CircuitBreakerRegistry(["user-service"])
        cb = registry.get("user-service")
        if not cb.is_available():
            ...
    """

    def __init__(self, names: list[str] | None = None) -> None:
        self._breakers: dict[str, CircuitBreaker] = {}
        for name in names or []:
            self.register(name)

    def register(self, name: str) -> CircuitBreaker:
        """Create the breaker for *name*, or return the existing one."""
        if name not in self._breakers:
            self._breakers[name] = CircuitBreaker(name)
        return self._breakers[name]

    def get(self, name: str) -> CircuitBreaker:
        """Return the breaker for *name*.

        Raises:
            UnknownDependencyError: If *name* was never registered.
        """
        try:
            return self._breakers[name]
        except KeyError:
            raise UnknownDependencyError(name) from None

    def names(self) -> list[str]:
        return list(self._breakers)

    def all_snapshots(self) -> list[dict]:
        """Return snapshots for every registered breaker."""
        return [cb.snapshot() for cb in self._breakers.values()]

    async def close_all(self) -> None:
        """Close every breaker."""
        for cb in self._breakers.values():
            await cb.close()
