"""Light color composition over the packed Color Switch value."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from zwthings.core.binding import PropertyBinding
from zwthings.core.codecs import Codec, normalize_packed_color
from zwthings.core.constants import (
    COLOR_CHANNEL_BLUE,
    COLOR_CHANNEL_COLD_WHITE,
    COLOR_CHANNEL_GREEN,
    COLOR_CHANNEL_RED,
    COLOR_CHANNEL_WARM_WHITE,
    SWITCH_BINARY_INDEX_SWITCH,
    SWITCH_COLOR_INDEX_CHANNELS,
    SWITCH_MULTILEVEL_INDEX_LEVEL,
    CommandClass,
    ThingType,
)
from zwthings.core.model import PropertyDescr, ValueKey
from zwthings.core.node import Node

if TYPE_CHECKING:
    from zwthings.core.classifier import Classifier

LOGGER = logging.getLogger(__name__)

_RGB_BITS = (1 << COLOR_CHANNEL_RED) | (1 << COLOR_CHANNEL_GREEN) | (1 << COLOR_CHANNEL_BLUE)
_WARM_BIT = 1 << COLOR_CHANNEL_WARM_WHITE
_COOL_BIT = 1 << COLOR_CHANNEL_COLD_WHITE


def _byte_to_percent(value: int) -> int:
    return round(value * 100 / 255)


def _percent_to_byte(value: float) -> int:
    return round(min(max(value, 0), 100) * 255 / 100)


class ColorComposer:
    """Keeps ``_color`` (``#RRGGBBWWCW``) and the channel properties in step.

    Decoding the packed value sets the channels, and setting a channel
    re-encodes the packed value. ``_updating`` stops each direction from
    triggering the other.
    """

    def __init__(
        self,
        node: Node,
        packed: PropertyBinding,
        rgb: PropertyBinding | None,
        warm: PropertyBinding | None,
        cool: PropertyBinding | None,
    ) -> None:
        self.node = node
        self.packed = packed
        self.rgb = rgb
        self.warm = warm
        self.cool = cool
        self._updating = False

        packed.updated = self._packed_updated
        for channel in (rgb, warm, cool):
            if channel is not None:
                channel.updated = self._channel_updated
        if packed.value is not None:
            self._split(packed.value, notify=False)

    def compose(self) -> str:
        current = self._current()
        rgb = (self.rgb.value if self.rgb is not None else None) or f"#{current[1:7]}"
        warm = _percent_to_byte(self.warm.value) if self.warm is not None else int(current[7:9], 16)
        cool = _percent_to_byte(self.cool.value) if self.cool is not None else int(current[9:11], 16)
        return normalize_packed_color(f"{rgb}{warm:02x}{cool:02x}")

    def _current(self) -> str:
        try:
            return normalize_packed_color(str(self.packed.value))
        except ValueError:
            return "#0000000000"

    def _packed_updated(self, binding: PropertyBinding) -> None:
        if self._updating:
            return
        self._updating = True
        try:
            self._split(binding.value, notify=True)
        finally:
            self._updating = False

    def _channel_updated(self, binding: PropertyBinding) -> None:
        if self._updating:
            return
        self._updating = True
        try:
            try:
                packed = self.compose()
            except (TypeError, ValueError) as exc:
                LOGGER.error("node%d %s: %s", self.node.node_id, binding.name, exc)
                return
            LOGGER.debug("node%d %s changed - packed color %s", self.node.node_id, binding.name, packed)
            self.packed.set_value(packed).add_done_callback(self._packed_write_done)
        finally:
            self._updating = False

    def _packed_write_done(self, future: asyncio.Future[Any]) -> None:
        if not future.cancelled() and future.exception() is not None:
            LOGGER.error("node%d: packed color write failed: %s", self.node.node_id, future.exception())

    def _split(self, value: object, *, notify: bool) -> None:
        try:
            packed = normalize_packed_color(str(value))
        except ValueError:
            LOGGER.warning("node%d: unexpected packed color %r", self.node.node_id, value)
            return
        updates = (
            (self.rgb, f"#{packed[1:7]}".lower()),
            (self.warm, _byte_to_percent(int(packed[7:9], 16))),
            (self.cool, _byte_to_percent(int(packed[9:11], 16))),
        )
        for channel, channel_value in updates:
            if channel is None or channel.value == channel_value:
                continue
            if notify:
                self.node.set_property_value(channel, channel_value)
            else:
                channel.set_cached_value(channel_value)


def _channel_mask(node: Node) -> int:
    raw = node.values.get(node.find_value_key(CommandClass.SWITCH_COLOR, 1, SWITCH_COLOR_INDEX_CHANNELS))
    if raw is None or raw.value is None:
        LOGGER.info("initLight: %s has no channel capabilities - assuming RGB", node.id)
        return _RGB_BITS
    try:
        return int(raw.value)
    except (OverflowError, TypeError, ValueError):
        LOGGER.warning("initLight: %s unexpected channel capabilities %r - assuming RGB", node.id, raw.value)
        return _RGB_BITS


def init_light(classifier: Classifier, node: Node, color_key: ValueKey) -> ColorComposer | None:
    binary_key = node.find_value_key(CommandClass.SWITCH_BINARY, 1, SWITCH_BINARY_INDEX_SWITCH)
    level_key = node.find_value_key(CommandClass.SWITCH_MULTILEVEL, 1, SWITCH_MULTILEVEL_INDEX_LEVEL)

    node.capabilities[:] = ["Light", "OnOffSwitch", "ColorControl"]
    node.thing_type = ThingType.ON_OFF_COLOR_LIGHT
    on_descr = PropertyDescr(type="boolean", at_type="OnOffProperty", label="On/Off")
    if binary_key is not None:
        classifier.add_property(node, "on", on_descr, binary_key, encoder=Codec.BOOLEAN, decoder=Codec.BOOLEAN)
    elif level_key is not None:
        classifier.add_property(
            node, "on", on_descr, level_key, encoder=Codec.ON_OFF_LEVEL, decoder=Codec.ON_OFF_LEVEL
        )
    if level_key is not None:
        node.thing_type = ThingType.DIMMABLE_COLOR_LIGHT
        classifier.add_property(
            node,
            "level",
            PropertyDescr(
                type="number",
                at_type="BrightnessProperty",
                label="Brightness",
                unit="percent",
                minimum=0,
                maximum=100,
            ),
            level_key,
            encoder=Codec.LEVEL,
            decoder=Codec.LEVEL,
        )

    packed = classifier.add_property(
        node,
        "_color",
        PropertyDescr(type="string"),
        color_key,
        encoder=Codec.PACKED_COLOR,
        decoder=Codec.PACKED_COLOR,
    )
    if packed is None:
        return None

    mask = _channel_mask(node)
    rgb = warm = cool = None
    if mask & _RGB_BITS == _RGB_BITS:
        rgb = classifier.add_property(
            node,
            "color",
            PropertyDescr(type="string", at_type="ColorProperty", label="Color"),
            default="#000000",
            encoder=Codec.RGB,
            decoder=Codec.RGB,
        )
    if mask & _WARM_BIT:
        warm = classifier.add_property(
            node,
            "warmLevel",
            PropertyDescr(type="number", label="Warm White", unit="percent", minimum=0, maximum=100),
            default=0,
            encoder=Codec.PERCENT,
            decoder=Codec.PERCENT,
        )
    if mask & _COOL_BIT:
        cool = classifier.add_property(
            node,
            "coolLevel",
            PropertyDescr(type="number", label="Cool White", unit="percent", minimum=0, maximum=100),
            default=0,
            encoder=Codec.PERCENT,
            decoder=Codec.PERCENT,
        )
    if rgb is None:
        node.capabilities.remove("ColorControl")
    return ColorComposer(node, packed, rgb, warm, cool)
