"""Driver interfaces."""

from __future__ import annotations

from typing import Any, Protocol

from zwthings.core.model import ValueKey


class Driver(Protocol):
    """Outward writes towards the Z-Wave radio driver."""

    def set_value(self, key: ValueKey, data: Any) -> None:
        """Write ``data`` to the raw value addressed by ``key``."""

    def set_config_param(self, node_id: int, param_id: int, value: int, size: int) -> None:
        """Write a configuration parameter of ``size`` bytes."""

    def enable_poll(self, key: ValueKey, intensity: int) -> None:
        """Ask the driver to poll the raw value addressed by ``key``."""
