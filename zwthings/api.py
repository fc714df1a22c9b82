"""Stable public API for building tooling on top of zwthings.

This module is the supported integration surface for third-party callers
(gateway adapters, scripts, tests). Avoid importing from internal modules
unless intentionally depending on non-stable internals.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from zwthings.core.classifier import Classifier
from zwthings.core.errors import (
    ActionRejectedError,
    PropertyError,
    PropertyReadOnlyError,
    PropertyValueError,
    QuirkLoadError,
    QuirkValidationError,
    SnapshotError,
    UnknownActionError,
    UnknownCodecError,
    UnknownNodeError,
    UnknownPropertyError,
    ZWThingsError,
)
from zwthings.core.listener import DeviceListener
from zwthings.core.model import Action, NodeIdentity, Quirk, RawValue, ValueKey
from zwthings.core.node import Node
from zwthings.core.quirks import QuirkTable, load_quirks
from zwthings.core.service import AdapterService
from zwthings.core.snapshot import NodeSnapshot, load_snapshot, replay_snapshot
from zwthings.drivers.base import Driver
from zwthings.drivers.memory import RecordingDriver

__all__ = [
    "ZWThingsError",
    "ActionRejectedError",
    "PropertyError",
    "PropertyReadOnlyError",
    "PropertyValueError",
    "QuirkLoadError",
    "QuirkValidationError",
    "SnapshotError",
    "UnknownActionError",
    "UnknownCodecError",
    "UnknownNodeError",
    "UnknownPropertyError",
    "Action",
    "AdapterService",
    "Classifier",
    "DeviceListener",
    "Driver",
    "Node",
    "NodeIdentity",
    "NodeSnapshot",
    "Quirk",
    "QuirkTable",
    "RawValue",
    "RecordingDriver",
    "ValueKey",
    "Client",
    "load_quirks",
]


class Client:
    """Public client wrapping one adapter service.

    A `Client` owns the quirk catalog, the classifier and the node table for
    one controller. Driver notifications go in through `service`, and
    property sets and actions come back out through the driver.
    """

    def __init__(
        self,
        driver: Driver | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        listener: DeviceListener | None = None,
        quirks: QuirkTable | None = None,
        adapter_id: str = "zwave",
    ) -> None:
        self.driver = driver if driver is not None else RecordingDriver()
        self._service = AdapterService(
            self.driver,
            loop=loop,
            listener=listener,
            quirks=quirks,
            adapter_id=adapter_id,
        )

    @property
    def service(self) -> AdapterService:
        return self._service

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_quirks(self) -> list[Quirk]:
        return list(self._service.quirks.quirks)

    def list_nodes(self) -> list[Node]:
        return [self._service.nodes[node_id] for node_id in sorted(self._service.nodes)]

    def get_node(self, node_id: int) -> Node:
        return self._service.get_node(node_id)

    def set_property(self, node_id: int, name: str, value: Any) -> asyncio.Future[Any]:
        return self._service.set_property(node_id, name, value)

    def perform_action(self, node_id: int, name: str, action_input: Any = None) -> Action:
        return self._service.perform_action(node_id, name, action_input)

    def classify_snapshot(self, snapshot: NodeSnapshot | Path) -> Node:
        if not isinstance(snapshot, NodeSnapshot):
            snapshot = load_snapshot(Path(snapshot))
        return replay_snapshot(self._service, snapshot)

    def dump(self) -> list[str]:
        return self._service.dump()
