from __future__ import annotations

import asyncio
from collections.abc import Iterator
from typing import Any

import pytest

from zwthings.core.quirks import QuirkTable
from zwthings.core.service import AdapterService
from zwthings.drivers.memory import RecordingDriver


class RecordingListener:
    def __init__(self) -> None:
        self.added: list[str] = []
        self.removed: list[str] = []
        self.changes: list[tuple[str, Any]] = []
        self.events: list[str] = []
        self.finished: list[str] = []
        self.rejected: list[str] = []

    def device_added(self, node) -> None:
        self.added.append(node.id)

    def device_removed(self, node) -> None:
        self.removed.append(node.id)

    def property_changed(self, node, binding) -> None:
        self.changes.append((binding.name, binding.value))

    def event(self, node, name, data=None) -> None:
        self.events.append(name)

    def action_started(self, node, action) -> None:
        pass

    def action_finished(self, node, action) -> None:
        self.finished.append(action.name)

    def action_rejected(self, node, action) -> None:
        self.rejected.append(action.name)


@pytest.fixture
def loop() -> Iterator[asyncio.AbstractEventLoop]:
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def make_service(loop, listener):
    def _make(quirks: QuirkTable | None = None) -> AdapterService:
        return AdapterService(RecordingDriver(), loop=loop, listener=listener, quirks=quirks or QuirkTable())

    return _make


@pytest.fixture
def add_node(make_service):
    """Drive one node through added, values, naming and ready."""

    def _add(
        values: list[dict[str, Any]],
        *,
        generic: int,
        info: dict[str, Any] | None = None,
        quirks: QuirkTable | None = None,
        service: AdapterService | None = None,
        node_id: int = 2,
    ):
        service = service or make_service(quirks)
        service.node_added(node_id)
        for value in values:
            service.value_added(node_id, value["class_id"], value)
        service.node_naming(node_id, info or {})
        service.node_ready(node_id, {"generic": generic, "basic": 4, "specific": 1})
        return service, service.get_node(node_id)

    return _add
