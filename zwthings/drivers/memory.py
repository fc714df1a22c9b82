"""In-memory driver that records outward writes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from zwthings.core.model import ValueKey


@dataclass(frozen=True)
class DriverWrite:
    op: str
    target: str
    data: Any
    size: int | None = None

    def describe(self) -> str:
        if self.op == "config":
            return f"config {self.target} = {self.data} (size {self.size})"
        return f"{self.op} {self.target} = {self.data}"


class RecordingDriver:
    """Keeps every write instead of sending it to a radio."""

    def __init__(self) -> None:
        self.writes: list[DriverWrite] = []

    def set_value(self, key: ValueKey, data: Any) -> None:
        self.writes.append(DriverWrite(op="set", target=str(key), data=data))

    def set_config_param(self, node_id: int, param_id: int, value: int, size: int) -> None:
        self.writes.append(
            DriverWrite(op="config", target=f"node{node_id} param {param_id}", data=value, size=size)
        )

    def enable_poll(self, key: ValueKey, intensity: int) -> None:
        self.writes.append(DriverWrite(op="poll", target=str(key), data=intensity))

    def config_writes(self) -> list[DriverWrite]:
        return [write for write in self.writes if write.op == "config"]

    def value_writes(self) -> list[DriverWrite]:
        return [write for write in self.writes if write.op == "set"]
