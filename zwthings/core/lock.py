"""Door lock state machine with a pending-action timeout."""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from zwthings.core.binding import PropertyBinding
from zwthings.core.codecs import Codec
from zwthings.core.constants import ALARM_INDEX_TYPE, DOOR_LOCK_INDEX_LOCKED, CommandClass, ThingType
from zwthings.core.model import Action, PropertyDescr
from zwthings.core.node import Node

if TYPE_CHECKING:
    from zwthings.core.classifier import Classifier

LOGGER = logging.getLogger(__name__)

LOCK_TIMEOUT_S = 10


class LockState(StrEnum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    JAMMED = "jammed"
    UNKNOWN = "unknown"


def _state_from_raw(value: Any) -> LockState:
    if value is None:
        return LockState.UNKNOWN
    return LockState.LOCKED if value else LockState.UNLOCKED


class LockController:
    """Drives ``locked`` from the raw door lock value and the lock actions.

    At most one lock/unlock action is pending. It finishes when the raw
    value confirms the target state, or when the timeout fires, in which
    case the lock is reported as jammed.
    """

    def __init__(self, node: Node, raw: PropertyBinding, state: PropertyBinding) -> None:
        self.node = node
        self.raw = raw
        self.state = state
        self.pending: Action | None = None
        self.target: LockState | None = None
        self.alarm_codes: dict[int, LockState] = {}
        raw.updated = self._raw_updated

    def perform(self, action: Action, target: LockState) -> None:
        if self.pending is not None:
            self.node.reject_action(action, f"{self.pending.name} already pending")
            return
        if self.state.value == target:
            LOGGER.info("node%d %s: already %s", self.node.node_id, action.name, target)
            self.node.finish_action(action)
            return

        self.pending = action
        self.target = target
        future = self.raw.set_value(target == LockState.LOCKED)
        if future.done() and future.exception() is not None:
            self._clear_pending()
            self.node.reject_action(action, str(future.exception()))
            return
        future.add_done_callback(self._write_done)
        self._set_state(LockState.UNKNOWN)
        self.state.start_timer(LOCK_TIMEOUT_S, self._timed_out)

    def _write_done(self, future: asyncio.Future[Any]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None or self.pending is None:
            return
        action = self.pending
        self._clear_pending()
        if not action.future.done():
            self.node.reject_action(action, str(exc))

    def _raw_updated(self, binding: PropertyBinding) -> None:
        self._observe(_state_from_raw(binding.value))

    def alarm_updated(self, binding: PropertyBinding) -> None:
        try:
            code = int(binding.value)
        except (OverflowError, TypeError, ValueError):
            LOGGER.warning("node%d: unexpected alarm type %r", self.node.node_id, binding.value)
            return
        state = self.alarm_codes.get(code)
        if state is None:
            LOGGER.debug("node%d: alarm type %d does not affect the lock", self.node.node_id, code)
            return
        LOGGER.info("node%d: alarm type %d means %s", self.node.node_id, code, state)
        self._observe(state)

    def _observe(self, state: LockState) -> None:
        if self.pending is not None and state in (self.target, LockState.JAMMED):
            action = self.pending
            self._clear_pending()
            self._set_state(state)
            self.node.finish_action(action)
            return
        if self.pending is None:
            self._set_state(state)

    def _timed_out(self) -> None:
        LOGGER.warning("node%d: no lock confirmation after %ss - jammed", self.node.node_id, LOCK_TIMEOUT_S)
        action = self.pending
        self.pending = None
        self.target = None
        self._set_state(LockState.JAMMED)
        if action is not None:
            self.node.finish_action(action)

    def _clear_pending(self) -> None:
        self.state.cancel_timer()
        self.pending = None
        self.target = None

    def _set_state(self, state: LockState) -> None:
        if self.state.value != state:
            self.node.set_property_value(self.state, str(state))


def init_lock(classifier: Classifier, node: Node) -> LockController | None:
    key = node.find_value_key(CommandClass.DOOR_LOCK, 1, DOOR_LOCK_INDEX_LOCKED)
    if key is None:
        LOGGER.error("initLock: %s has no door lock value", node.id)
        return None

    node.thing_type = ThingType.LOCK
    if "Lock" not in node.capabilities:
        node.capabilities.append("Lock")

    raw = classifier.add_property(
        node,
        "_lockedRaw",
        PropertyDescr(type="boolean"),
        key,
        encoder=Codec.BOOLEAN,
        decoder=Codec.BOOLEAN,
    )
    state = classifier.add_property(
        node,
        "locked",
        PropertyDescr(
            type="string",
            at_type="LockedProperty",
            label="Current Lock State",
            enum=tuple(str(s) for s in LockState),
            read_only=True,
        ),
    )
    if raw is None or state is None:
        return None
    state.value = str(_state_from_raw(raw.value))

    controller = LockController(node, raw, state)
    node.add_action(
        "lock",
        {"@type": "LockAction", "title": "Lock", "description": "Lock the locking mechanism"},
        lambda action: controller.perform(action, LockState.LOCKED),
    )
    node.add_action(
        "unlock",
        {"@type": "UnlockAction", "title": "Unlock", "description": "Unlock the locking mechanism"},
        lambda action: controller.perform(action, LockState.UNLOCKED),
    )

    codes = node.overrides.lock_alarm_codes
    if codes:
        # Manual and keypad operation only shows up as an alarm type.
        for kind, values in codes.items():
            for code in values:
                controller.alarm_codes[code] = LockState(kind)
        alarm_key = node.find_value_key(CommandClass.ALARM, 1, ALARM_INDEX_TYPE)
        if alarm_key is None:
            LOGGER.error("initLock: %s has no alarm type value for manual operation", node.id)
            return controller
        alarm = classifier.add_property(node, "_alarmType", PropertyDescr(type="number", read_only=True), alarm_key)
        if alarm is not None:
            alarm.updated = controller.alarm_updated
    return controller
