"""Service registry: dependency name → base address lookup.

Seeded from ``Settings`` and optionally overridden by a YAML file::

    services:
      user-service: http://users.internal:8081/users
      notification-service: http://notify.internal:8082/notifications

The core only ever asks "given a dependency name, what is its base
address".
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from src.core.config import Settings
from src.core.errors import ServiceNotRegisteredError


class ServiceRegistry:
    """In-memory name → base URL table."""

    def __init__(self, services: dict[str, str] | None = None) -> None:
        self._services: dict[str, str] = {}
        for name, url in (services or {}).items():
            self.register(name, url)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceRegistry":
        """Build the registry from settings, then apply YAML overrides."""
        registry = cls(
            {
                settings.USER_SERVICE_NAME: settings.USER_SERVICE_URL,
                settings.NOTIFICATION_SERVICE_NAME: settings.NOTIFICATION_SERVICE_URL,
            }
        )
        if settings.SERVICE_REGISTRY_PATH:
            registry.load_yaml(settings.SERVICE_REGISTRY_PATH)
        return registry

    # ── Loading ─────────────────────────────────────────────────────

    def load_yaml(self, config_path: str | Path) -> None:
        """Register every ``services:`` entry from *config_path*.

        Raises:
            FileNotFoundError: If the YAML file does not exist.
            ValueError: If the YAML is invalid or has no ``services`` mapping.
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Service registry config not found: {path}")

        raw = path.read_text(encoding="utf-8")
        try:
            data: Any = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("services"), dict):
            raise ValueError(f"YAML must contain a top-level 'services' mapping in {path}")

        for name, url in data["services"].items():
            if not url:
                raise ValueError(f"Service '{name}' has no URL in {path}")
            self.register(str(name), str(url))

    # ── Access ──────────────────────────────────────────────────────

    def register(self, name: str, url: str) -> None:
        self._services[name] = url.rstrip("/")

    def get_url(self, name: str) -> str | None:
        """Return the base URL for *name*, or ``None``."""
        return self._services.get(name)

    def require_url(self, name: str) -> str:
        """Return the base URL for *name*.

        Raises:
            ServiceNotRegisteredError: If *name* has no base address.
        """
        url = self._services.get(name)
        if not url:
            raise ServiceNotRegisteredError(name)
        return url
