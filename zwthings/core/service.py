"""Adapter service: routes driver notifications to nodes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from zwthings.core.classifier import Classifier
from zwthings.core.constants import CONTROLLER_NODE_ID, CommandClass
from zwthings.core.errors import UnknownNodeError, UnknownPropertyError
from zwthings.core.listener import DeviceListener, NullListener
from zwthings.core.model import Action, NodeStatus, RawValue, ValueKey
from zwthings.core.node import Node
from zwthings.core.quirks import QuirkTable, load_quirks
from zwthings.drivers.base import Driver

LOGGER = logging.getLogger(__name__)

# Driver notification codes.
_NOTIFICATION_STATUS: dict[int, NodeStatus] = {
    0: NodeStatus.MSG_COMPLETE,
    1: NodeStatus.TIMEOUT,
    2: NodeStatus.NOP,
    3: NodeStatus.AWAKE,
    4: NodeStatus.SLEEPING,
    5: NodeStatus.DEAD,
    6: NodeStatus.ALIVE,
}

_POLLED_CLASSES = frozenset({CommandClass.SWITCH_BINARY, CommandClass.SWITCH_MULTILEVEL})
POLL_INTENSITY = 1


class AdapterService:
    def __init__(
        self,
        driver: Driver,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        listener: DeviceListener | None = None,
        quirks: QuirkTable | None = None,
        adapter_id: str = "zwave",
    ) -> None:
        if quirks is None:
            quirks = load_quirks()
        self.driver = driver
        self.loop = loop or asyncio.new_event_loop()
        self.listener: DeviceListener = listener or NullListener()
        self.quirks = quirks
        self.load_warnings = quirks.warnings
        self.classifier = Classifier(quirks)
        self.adapter_id = adapter_id
        self.nodes: dict[int, Node] = {}
        self.nodes_being_added: dict[int, Node] = {}
        self.scan_done = False

    # -- lookups ------------------------------------------------------------

    def get_node(self, node_id: int) -> Node:
        node = self.nodes.get(node_id)
        if node is None:
            known = ", ".join(str(n) for n in sorted(self.nodes)) or "<none>"
            raise UnknownNodeError(f"Unknown node {node_id}. Known nodes: {known}")
        return node

    def set_property(self, node_id: int, name: str, value: Any) -> asyncio.Future[Any]:
        node = self.get_node(node_id)
        binding = node.properties.get(name)
        if binding is None or not binding.visible:
            available = ", ".join(sorted(n for n, b in node.properties.items() if b.visible)) or "<none>"
            raise UnknownPropertyError(f"Node {node.id} has no property '{name}'. Available: {available}")
        return binding.set_value(value)

    def perform_action(self, node_id: int, name: str, action_input: Any = None) -> Action:
        return self.get_node(node_id).perform_action(name, action_input)

    # -- upstream notifications ---------------------------------------------

    def node_added(self, node_id: int) -> Node:
        LOGGER.debug("node%d added", node_id)
        # The name is filled in once the node is named or ready.
        node = Node(node_id, self.driver, loop=self.loop, listener=self.listener, adapter_id=self.adapter_id)
        node.last_status = NodeStatus.ADDED
        self.nodes[node_id] = node
        self.nodes_being_added[node_id] = node
        return node

    def node_naming(self, node_id: int, info: Mapping[str, Any]) -> None:
        node = self.nodes.get(node_id)
        if node is None:
            LOGGER.debug("node%d naming: unknown node (ignored)", node_id)
            return
        first = not node.named
        node.apply_naming(info)
        node.apply_device_class(info)
        if first or LOGGER.isEnabledFor(logging.DEBUG):
            identity = node.identity
            LOGGER.info(
                "node%d: Named %s %s",
                node_id,
                identity.manufacturer or f"id={identity.manufacturer_id}",
                identity.product or f"product={identity.product_id}, type={identity.product_type}",
            )
            LOGGER.info('node%d: name="%s", type="%s", location="%s"', node_id, node.name, identity.type, identity.location)

    def node_ready(self, node_id: int, info: Mapping[str, Any] | None = None) -> None:
        node = self.nodes.get(node_id)
        if node is None:
            LOGGER.debug("node%d ready: unknown node (ignored)", node_id)
            return
        if info:
            if not node.named:
                node.apply_naming(info)
            node.apply_device_class(info)
        node.last_status = NodeStatus.READY
        node.ready = True
        if node_id in self.nodes_being_added:
            self._handle_device_added(node)

    def node_removed(self, node_id: int) -> None:
        LOGGER.debug("node%d removed", node_id)
        node = self.nodes.pop(node_id, None)
        self.nodes_being_added.pop(node_id, None)
        if node is None:
            return
        node.last_status = NodeStatus.REMOVED
        node.teardown()
        self.listener.device_removed(node)

    def node_notification(self, node_id: int, notification: int) -> None:
        status = _NOTIFICATION_STATUS.get(notification)
        if status is None:
            LOGGER.info("node%d: unknown notification %d", node_id, notification)
            return
        if status == NodeStatus.NOP:
            LOGGER.debug("node%d: %s", node_id, status)
        else:
            LOGGER.info("node%d: %s", node_id, status)
        node = self.nodes.get(node_id)
        if node is not None:
            node.last_status = status

    def node_event(self, node_id: int, data: Any) -> None:
        LOGGER.info("node%d event: Basic set %s", node_id, data)

    def scene_event(self, node_id: int, scene_id: int) -> None:
        LOGGER.info("scene event: nodeId: %d sceneId %d", node_id, scene_id)

    def value_added(self, node_id: int, class_id: int, value: RawValue | Mapping[str, Any]) -> None:
        node = self.nodes.get(node_id)
        if node is not None:
            raw = self._raw(node_id, class_id, value)
            if raw is not None:
                node.value_added(raw)

    def value_changed(self, node_id: int, class_id: int, value: RawValue | Mapping[str, Any]) -> None:
        node = self.nodes.get(node_id)
        if node is not None:
            raw = self._raw(node_id, class_id, value)
            if raw is not None:
                node.value_changed(raw)

    def value_removed(self, node_id: int, class_id: int, instance: int, index: int) -> None:
        node = self.nodes.get(node_id)
        if node is not None:
            node.value_removed(class_id, instance, index)

    def scan_complete(self) -> None:
        # Sleeping devices never report ready; add them unless they're dead.
        for node in list(self.nodes_being_added.values()):
            if node.last_status != NodeStatus.DEAD:
                self._handle_device_added(node)
        LOGGER.info("Scan complete")
        self.scan_done = True
        for line in self.dump():
            LOGGER.info("%s", line)

    # -- internals ----------------------------------------------------------

    @staticmethod
    def _raw(node_id: int, class_id: int, value: RawValue | Mapping[str, Any]) -> RawValue | None:
        if isinstance(value, RawValue):
            return value
        try:
            return RawValue.from_driver({"node_id": node_id, "class_id": class_id, **value})
        except (KeyError, OverflowError, TypeError, ValueError) as exc:
            LOGGER.warning("node%d: dropping malformed value for class 0x%02x: %r (%s)", node_id, class_id, value, exc)
            return None

    def _handle_device_added(self, node: Node) -> None:
        LOGGER.debug("handleDeviceAdded: %d", node.node_id)
        self.nodes_being_added.pop(node.node_id, None)
        if node.node_id <= CONTROLLER_NODE_ID:
            return
        self.classifier.classify(node)
        self._enable_polling(node)
        self.listener.device_added(node)

    def _enable_polling(self, node: Node) -> None:
        if node.disable_poll:
            LOGGER.debug("node%d: polling disabled", node.node_id)
            return
        polled: set[ValueKey] = set()
        for binding in node.properties.values():
            for key in binding.value_keys:
                if key.class_id in _POLLED_CLASSES and key not in polled:
                    polled.add(key)
                    self.driver.enable_poll(key, POLL_INTENSITY)

    # -- diagnostics --------------------------------------------------------

    def one_line_summary(self) -> str:
        return f"Controller: {self.adapter_id} Nodes: {len(self.nodes)}"

    def dump(self) -> list[str]:
        lines = [self.one_line_summary(), Node.one_line_header(0), Node.one_line_header(1)]
        lines.extend(self.nodes[node_id].one_line_summary() for node_id in sorted(self.nodes))
        lines.append("----")
        return lines
