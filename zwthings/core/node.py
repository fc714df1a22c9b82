"""A node on the Z-Wave network and its semantic device model."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable, Mapping
from typing import Any
from uuid import uuid4

from zwthings.core.binding import PropertyBinding
from zwthings.core.constants import (
    BASIC_TYPE_STR,
    CENTRAL_SCENE_INDEX_COUNT,
    CENTRAL_SCENE_INDEX_COUNT_V15,
    CommandClass,
    ThingType,
)
from zwthings.core.errors import ActionRejectedError, UnknownActionError
from zwthings.core.listener import DeviceListener, NullListener
from zwthings.core.model import (
    Action,
    ActionStatus,
    NodeIdentity,
    NodeStatus,
    QuirkOverrides,
    RawValue,
    ValueKey,
    utc_now,
)
from zwthings.core.value_store import ValueStore
from zwthings.drivers.base import Driver

LOGGER = logging.getLogger(__name__)

ActionHandler = Callable[[Action], None]


class Node:
    """Aggregate root: one ValueStore plus the properties, actions and events
    derived from it by the classifier."""

    def __init__(
        self,
        node_id: int,
        driver: Driver,
        *,
        loop: asyncio.AbstractEventLoop,
        listener: DeviceListener | None = None,
        adapter_id: str = "zwave",
    ) -> None:
        # Node ids are only unique within one controller.
        self.id = f"{adapter_id}-{node_id}"
        self.node_id = node_id
        self.driver = driver
        self.loop = loop
        self.listener: DeviceListener = listener or NullListener()
        self.identity = NodeIdentity(node_id=node_id)
        self.values = ValueStore(node_id)
        self.properties: dict[str, PropertyBinding] = {}
        self.actions: dict[str, dict[str, Any]] = {}
        self.events: dict[str, dict[str, Any]] = {}
        self.action_handlers: dict[str, ActionHandler] = {}
        self.pending_actions: dict[str, Action] = {}
        self.name = ""
        self.default_name = ""
        self.named = False
        self.ready = False
        self.classified = False
        self.disable_poll = False
        self.thing_type: str = ThingType.THING
        self.capabilities: list[str] = []
        self.overrides = QuirkOverrides()
        self.last_status = NodeStatus.CONSTRUCTED

    # -- identity -----------------------------------------------------------

    def apply_naming(self, info: Mapping[str, Any]) -> None:
        product = str(info.get("product", ""))
        manufacturer = str(info.get("manufacturer", ""))
        if product.startswith("Unknown: "):
            product = f"{manufacturer} {product}"
        self.identity = dataclasses.replace(
            self.identity,
            location=str(info.get("loc", "")),
            manufacturer=manufacturer,
            manufacturer_id=str(info.get("manufacturerid", "")),
            product=product,
            product_id=str(info.get("productid", "")),
            product_type=str(info.get("producttype", "")),
            type=str(info.get("type", "")),
        )
        if info.get("name"):
            self.name = str(info["name"])
        elif self.default_name:
            self.name = self.default_name
        else:
            self.name = self.id
        self.named = True
        self.last_status = NodeStatus.NAMED

    def apply_device_class(self, info: Mapping[str, Any]) -> None:
        changes = {k: int(info[k]) for k in ("generic", "basic", "specific") if info.get(k) is not None}
        if changes:
            self.identity = dataclasses.replace(self.identity, **changes)

    def scene_count(self) -> int:
        for index in (CENTRAL_SCENE_INDEX_COUNT, CENTRAL_SCENE_INDEX_COUNT_V15):
            raw = self.values.get(self.values.find(CommandClass.CENTRAL_SCENE, 1, index))
            if raw is not None and raw.value is not None:
                try:
                    return int(raw.value)
                except (OverflowError, TypeError, ValueError):
                    LOGGER.warning("node%d: bad scene count %r", self.node_id, raw.value)
        return 0

    # -- raw values ---------------------------------------------------------

    def find_value_key(
        self,
        class_id: int,
        instance: int | None = None,
        index: int | None = None,
    ) -> ValueKey | None:
        return self.values.find(class_id, instance, index)

    def bindings_for(self, key: ValueKey) -> list[PropertyBinding]:
        return [binding for binding in self.properties.values() if binding.matches(key)]

    def value_added(self, raw: RawValue) -> None:
        self.last_status = NodeStatus.VALUE_ADDED
        self.values.put(raw)
        units = f" {raw.units}" if raw.units else ""
        bindings = self.bindings_for(raw.key)
        for binding in bindings:
            decoded = binding.decode(raw, raw.value)
            binding.set_cached_value(decoded.value)
            LOGGER.info(
                "node%d valueAdded: %s:%s property: %s = %s%s",
                self.node_id,
                raw.value_id,
                raw.label,
                binding.name,
                decoded.trace,
                units,
            )
        if not bindings and raw.genre == "user":
            LOGGER.debug("node%d valueAdded: %s:%s = %s%s", self.node_id, raw.value_id, raw.label, raw.value, units)
        if raw.genre == "user" and not self.default_name:
            # The first user value label helps to tell similar nodes apart.
            self.default_name = f"{self.id}-{raw.label}"
            if not self.name:
                self.name = self.default_name

    def value_changed(self, raw: RawValue) -> None:
        self.last_status = NodeStatus.VALUE_CHANGED
        self.values.put(raw)
        units = f" {raw.units}" if raw.units else ""
        bindings = self.bindings_for(raw.key)
        for binding in bindings:
            decoded = binding.decode(raw, raw.value)
            binding.set_cached_value(decoded.value)
            LOGGER.info(
                "node%d valueChanged: %s:%s property: %s = %s%s",
                self.node_id,
                raw.value_id,
                raw.label,
                binding.name,
                decoded.trace,
                units,
            )
            self.notify_property_changed(binding)
        if not bindings:
            LOGGER.info(
                "node%d valueChanged: %s:%s = %s%s (no property found)",
                self.node_id,
                raw.value_id,
                raw.label,
                raw.value,
                units,
            )

    def value_removed(self, class_id: int, instance: int, index: int) -> None:
        self.last_status = NodeStatus.VALUE_REMOVED
        raw = self.values.remove(class_id, instance, index)
        if raw is None:
            return
        bindings = self.bindings_for(raw.key)
        for binding in bindings:
            if binding.aux_value_key == raw.key:
                binding.aux_value_key = None
            elif binding.aux_value_key is not None:
                binding.value_key, binding.aux_value_key = binding.aux_value_key, None
            else:
                binding.detach()
                del self.properties[binding.name]
                LOGGER.info("node%d valueRemoved: %s removed property %s", self.node_id, raw.value_id, binding.name)
                continue
            LOGGER.info("node%d valueRemoved: %s unlinked from property %s", self.node_id, raw.value_id, binding.name)
        if not bindings:
            LOGGER.info("node%d valueRemoved: %s:%s = %s", self.node_id, raw.value_id, raw.label, raw.value)

    # -- properties ---------------------------------------------------------

    def add_binding(self, binding: PropertyBinding) -> PropertyBinding:
        self.properties[binding.name] = binding
        return binding

    def set_property_value(self, binding: PropertyBinding, value: Any) -> None:
        """Set a property from internal logic, bypassing read-only checks."""
        binding.set_cached_value(value)
        unit = binding.descr.unit or ""
        LOGGER.info("node%d setPropertyValue: %s = %s%s", self.node_id, binding.name, value, unit)
        self.notify_property_changed(binding)

    def notify_property_changed(self, binding: PropertyBinding) -> None:
        binding.resolve_pending()
        if binding.visible:
            self.listener.property_changed(self, binding)
        if binding.updated is not None:
            binding.updated(binding)

    # -- events -------------------------------------------------------------

    def add_event(self, name: str, descr: dict[str, Any]) -> None:
        self.events[name] = descr

    def notify_event(self, name: str, data: Any = None) -> None:
        if data is None:
            LOGGER.info("%s event: %s", self.name or self.id, name)
        else:
            LOGGER.info("%s event: %s data: %s", self.name or self.id, name, data)
        self.listener.event(self, name, data)

    # -- actions ------------------------------------------------------------

    def add_action(self, name: str, descr: dict[str, Any], handler: ActionHandler) -> None:
        self.actions[name] = descr
        self.action_handlers[name] = handler

    def perform_action(self, name: str, action_input: Any = None) -> Action:
        handler = self.action_handlers.get(name)
        if handler is None:
            available = ", ".join(sorted(self.actions)) or "<none>"
            raise UnknownActionError(f"Node {self.id} does not define action '{name}'. Available: {available}")
        action = Action(id=uuid4().hex, name=name, input=action_input, future=self.loop.create_future())
        action.status = ActionStatus.PENDING
        self.pending_actions[action.id] = action
        self.listener.action_started(self, action)
        handler(action)
        return action

    def finish_action(self, action: Action) -> None:
        self.pending_actions.pop(action.id, None)
        action.status = ActionStatus.COMPLETED
        action.time_completed = utc_now()
        if not action.future.done():
            action.future.set_result(action)
        self.listener.action_finished(self, action)

    def reject_action(self, action: Action, reason: str) -> None:
        LOGGER.warning("node%d action %s rejected: %s", self.node_id, action.name, reason)
        self.pending_actions.pop(action.id, None)
        action.status = ActionStatus.REJECTED
        action.reason = reason
        if not action.future.done():
            action.future.set_exception(ActionRejectedError(reason))
        self.listener.action_rejected(self, action)

    # -- lifecycle ----------------------------------------------------------

    def teardown(self) -> None:
        """Release timers and fail everything still waiting on this node."""
        for binding in self.properties.values():
            binding.detach()
        for action in list(self.pending_actions.values()):
            self.reject_action(action, f"node {self.id} removed")

    # -- diagnostics --------------------------------------------------------

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.thing_type,
            "@type": list(self.capabilities),
            "lastStatus": str(self.last_status),
            "classified": self.classified,
            "zwInfo": self.identity.as_dict(),
            "quirks": list(self.overrides.quirk_ids),
            "zwClasses": list(self.values.classes),
            "zwValues": {raw.value_id: raw.as_dict() for raw in self.values},
            "properties": {name: binding.as_dict() for name, binding in self.properties.items()},
            "actions": dict(self.actions),
            "events": dict(self.events),
        }

    @staticmethod
    def one_line_header(line: int) -> str:
        if line == 0:
            return (
                f"Node LastStat {'Basic Type':<16} {'Type':<24} "
                f"{'Product Name':<50} {'Name':<30} Location"
            )
        return f"{'-' * 4} {'-' * 8} {'-' * 16} {'-' * 24} {'-' * 50} {'-' * 30} {'-' * 30}"

    def one_line_summary(self) -> str:
        basic = self.identity.basic
        if basic is not None and 1 <= basic < len(BASIC_TYPE_STR):
            basic_str = BASIC_TYPE_STR[basic]
        else:
            basic_str = f"??? {basic} ???"
        return (
            f"{self.node_id:>3}: {str(self.last_status):<8} {basic_str:<16} "
            f"{self.identity.type:<24} {self.identity.product:<50} "
            f"{self.name:<30} {self.identity.location}"
        )
