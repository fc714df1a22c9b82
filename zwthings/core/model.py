"""Core data models used across the store, classifier, node, and CLI."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, NamedTuple

LOGGER = logging.getLogger(__name__)


class ValueKind(StrEnum):
    BOOL = "bool"
    BYTE = "byte"
    SHORT = "short"
    INT = "int"
    DECIMAL = "decimal"
    LIST = "list"
    STRING = "string"
    BUTTON = "button"
    SCHEDULE = "schedule"
    BITSET = "bitset"
    RAW = "raw"


class ValueKey(NamedTuple):
    node_id: int
    class_id: int
    instance: int
    index: int

    def __str__(self) -> str:
        return f"{self.node_id}-{self.class_id}-{self.instance}-{self.index}"

    @classmethod
    def parse(cls, value_id: str) -> ValueKey:
        node_id, class_id, instance, index = (int(part) for part in value_id.split("-"))
        return cls(node_id, class_id, instance, index)


@dataclass
class RawValue:
    """One protocol-level datum, mutated in place on value-changed."""

    node_id: int
    class_id: int
    instance: int = 1
    index: int = 0
    kind: ValueKind = ValueKind.BYTE
    label: str = ""
    genre: str = "user"
    read_only: bool = False
    write_only: bool = False
    values: tuple[str, ...] | None = None
    minimum: float | None = None
    maximum: float | None = None
    value: Any = None
    units: str = ""

    @property
    def key(self) -> ValueKey:
        return ValueKey(self.node_id, self.class_id, self.instance, self.index)

    @property
    def value_id(self) -> str:
        return str(self.key)

    @classmethod
    def from_driver(cls, data: Mapping[str, Any]) -> RawValue:
        """Build a value from a driver notification payload.

        Raises ``KeyError``/``TypeError``/``ValueError`` when the address
        fields are missing or not integers. Unknown value types become
        ``ValueKind.RAW``.
        """
        values = data.get("values")
        kind_name = data.get("type", ValueKind.BYTE)
        try:
            kind = ValueKind(kind_name)
        except ValueError:
            LOGGER.warning("value %s: unknown value type %r - treating as raw", data.get("index"), kind_name)
            kind = ValueKind.RAW
        return cls(
            node_id=int(data["node_id"]),
            class_id=int(data["class_id"]),
            instance=int(data.get("instance", 1)),
            index=int(data.get("index", 0)),
            kind=kind,
            label=str(data.get("label", "")),
            genre=str(data.get("genre", "user")),
            read_only=bool(data.get("read_only", False)),
            write_only=bool(data.get("write_only", False)),
            values=tuple(str(v) for v in values) if values is not None else None,
            minimum=data.get("min"),
            maximum=data.get("max"),
            value=data.get("value"),
            units=str(data.get("units") or ""),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "value_id": self.value_id,
            "node_id": self.node_id,
            "class_id": self.class_id,
            "instance": self.instance,
            "index": self.index,
            "type": str(self.kind),
            "label": self.label,
            "genre": self.genre,
            "read_only": self.read_only,
            "write_only": self.write_only,
            "values": list(self.values) if self.values is not None else None,
            "min": self.minimum,
            "max": self.maximum,
            "value": self.value,
            "units": self.units,
        }


class NodeStatus(StrEnum):
    CONSTRUCTED = "constructed"
    ADDED = "added"
    NAMED = "named"
    READY = "ready"
    CLASSIFIED = "classified"
    REMOVED = "removed"
    DEAD = "dead"
    SLEEPING = "sleeping"
    AWAKE = "awake"
    ALIVE = "alive"
    TIMEOUT = "timeout"
    MSG_COMPLETE = "msgCmplt"
    NOP = "nop"
    VALUE_ADDED = "value-added"
    VALUE_CHANGED = "value-changed"
    VALUE_REMOVED = "value-removed"


@dataclass(frozen=True)
class NodeIdentity:
    node_id: int
    location: str = ""
    manufacturer: str = ""
    manufacturer_id: str = ""
    product: str = ""
    product_id: str = ""
    product_type: str = ""
    type: str = ""
    generic: int | None = None
    basic: int | None = None
    specific: int | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PropertyDescr:
    type: str
    at_type: str | None = None
    label: str | None = None
    unit: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    enum: tuple[str, ...] | None = None
    read_only: bool = False

    def as_dict(self) -> dict[str, Any]:
        descr: dict[str, Any] = {"type": self.type}
        if self.at_type:
            descr["@type"] = self.at_type
        if self.label is not None:
            descr["title"] = self.label
        if self.unit is not None:
            descr["unit"] = self.unit
        if self.minimum is not None:
            descr["minimum"] = self.minimum
        if self.maximum is not None:
            descr["maximum"] = self.maximum
        if self.enum is not None:
            descr["enum"] = list(self.enum)
        if self.read_only:
            descr["readOnly"] = True
        return descr


@dataclass(frozen=True)
class ConfigWrite:
    param_id: int
    value: int
    size: int = 1


@dataclass(frozen=True)
class QuirkMatch:
    manufacturer_id: str
    product_id: str | None = None
    product_ids: tuple[str, ...] = ()
    product_type: str | None = None


@dataclass(frozen=True)
class QuirkHints:
    not_light: bool | None = None
    report_on_change: bool | None = None
    scene_layout: str | None = None
    slide_travel: int | None = None
    alarm_smoke_co: bool | None = None
    binary_sensor_contact: bool | None = None
    lock_alarm_codes: Mapping[str, tuple[int, ...]] | None = None


@dataclass(frozen=True)
class Quirk:
    id: str
    match: QuirkMatch
    description: str = ""
    exclude_properties: tuple[str, ...] = ()
    set_configs: tuple[ConfigWrite, ...] = ()
    disable_poll: bool | None = None
    hints: QuirkHints = QuirkHints()


@dataclass(frozen=True)
class QuirkOverrides:
    """Result of folding every quirk that matches one node."""

    quirk_ids: tuple[str, ...] = ()
    exclude_properties: frozenset[str] = frozenset()
    set_configs: tuple[ConfigWrite, ...] = ()
    disable_poll: bool = False
    not_light: bool = False
    report_on_change: bool = False
    scene_layout: str | None = None
    slide_travel: int | None = None
    alarm_smoke_co: bool = False
    binary_sensor_contact: bool = False
    lock_alarm_codes: Mapping[str, tuple[int, ...]] | None = None


class ActionStatus(StrEnum):
    CREATED = "created"
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass
class Action:
    id: str
    name: str
    future: asyncio.Future[Any]
    input: Any = None
    status: ActionStatus = ActionStatus.CREATED
    time_requested: str = field(default_factory=utc_now)
    time_completed: str | None = None
    reason: str | None = None

    def as_dict(self) -> dict[str, Any]:
        action: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "status": str(self.status),
            "timeRequested": self.time_requested,
        }
        if self.input is not None:
            action["input"] = self.input
        if self.time_completed is not None:
            action["timeCompleted"] = self.time_completed
        if self.reason is not None:
            action["reason"] = self.reason
        return action
