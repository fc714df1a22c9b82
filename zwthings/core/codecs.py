"""Encode/decode strategies between semantic property values and raw data.

Every strategy is a pair of plain functions. Decoders return a ``Decoded``
whose ``level`` carries the hardware-scale value (0-99) when there is one;
encoders return an ``Encoded`` with the raw data to write. Decoders may raise
``TypeError``/``ValueError``/``IndexError``/``OverflowError`` on malformed
input: the binding catches those and keeps its previous value.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, Any, NamedTuple

from zwthings.core.constants import (
    ALARM_EVENT_HOME_SECURITY_CLEAR,
    ALARM_EVENT_HOME_SECURITY_MOTION,
    ALARM_EVENT_HOME_SECURITY_TAMPER,
    LEVEL_MAX_RAW,
)
from zwthings.core.errors import PropertyValueError, UnknownCodecError
from zwthings.core.model import RawValue, ValueKind

if TYPE_CHECKING:
    from zwthings.core.binding import PropertyBinding

LOGGER = logging.getLogger(__name__)

_RGB_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")
_PACKED_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{6})([0-9a-fA-F]{2})?([0-9a-fA-F]{2})?$")
_TRUE_STRINGS = frozenset({"true", "on", "1", "yes"})


class Decoded(NamedTuple):
    value: Any
    trace: str
    level: int | None = None


class Encoded(NamedTuple):
    data: Any
    trace: str
    level: int | None = None


class Codec(StrEnum):
    IDENTITY = "identity"
    BOOLEAN = "boolean"
    LEVEL = "level"
    ON_OFF_LEVEL = "on_off_level"
    ALARM_MOTION = "alarm_motion"
    ALARM_TAMPER = "alarm_tamper"
    VALUE_MAP = "value_map"
    SCENE = "scene"
    TEMPERATURE = "temperature"
    LOWER_CASE = "lower_case"
    CONFIG_BOOLEAN = "config_boolean"
    CONFIG_LIST = "config_list"
    CONFIG_RGBX = "config_rgbx"
    PACKED_COLOR = "packed_color"
    RGB = "rgb"
    PERCENT = "percent"


DecodeFn = Callable[["PropertyBinding", RawValue | None, Any], Decoded]
EncodeFn = Callable[["PropertyBinding", RawValue | None, Any], Encoded]


def resolve_codec(name: Codec | str) -> Codec:
    try:
        return Codec(name)
    except ValueError as exc:
        raise UnknownCodecError(f"Unknown codec '{name}'") from exc


def catalog_index(values: Sequence[str] | None, item: Any) -> int:
    """Position of ``item`` in an enumerated catalog, or -1.

    Configuration catalogs from the device database can carry trailing
    duplicates, so the catalog is treated as ending at its first repeat.
    """
    if not values:
        return -1
    seen: set[str] = set()
    for idx, entry in enumerate(values):
        if entry in seen:
            break
        seen.add(entry)
        if entry == item:
            return idx
    return -1


def _catalog_entry(raw: RawValue | None, data: Any) -> Any:
    # List values normally arrive as the catalog string, but some drivers
    # report the position instead.
    if isinstance(data, int) and not isinstance(data, bool) and raw is not None and raw.values:
        return raw.values[data]
    return data


def _previous_bool(binding: PropertyBinding) -> bool:
    return bool(binding.value) if binding.value is not None else False


def _require_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PropertyValueError(f"Property '{name}' needs a number, got {value!r}")
    if not math.isfinite(value):
        raise PropertyValueError(f"Property '{name}' needs a finite number, got {value!r}")
    return float(value)


def _to_bool(data: Any) -> bool:
    if isinstance(data, str):
        return data.strip().lower() in _TRUE_STRINGS
    return bool(data)


# -- identity ---------------------------------------------------------------


def _decode_identity(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    return Decoded(data, str(data))


def _encode_identity(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    return Encoded(value, str(value))


def _decode_boolean(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    value = _to_bool(data)
    return Decoded(value, f"{value} (zw: {data})")


def _encode_boolean(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    if not isinstance(value, bool):
        raise PropertyValueError(f"Property '{binding.name}' needs a boolean, got {value!r}")
    return Encoded(value, str(value))


# -- multilevel -------------------------------------------------------------


def _decode_level(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    if isinstance(data, bool):
        raise TypeError(f"level data must be numeric, got {data!r}")
    number = float(data)
    if not math.isfinite(number):
        raise ValueError(f"level data must be finite, got {data!r}")
    level = max(int(round(number)), 0)
    percent = 100 if level >= LEVEL_MAX_RAW else level
    return Decoded(percent, f"{percent:.1f}% (zw: {level})", level)


def _encode_level(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    percent = _require_number(value, binding.name)
    if binding.descr.minimum is not None:
        percent = max(percent, binding.descr.minimum)
    if binding.descr.maximum is not None:
        percent = min(percent, binding.descr.maximum)
    level = round(min(max(percent, 0), LEVEL_MAX_RAW))
    return Encoded(level, f"zw: {level} ({percent:.1f}%)", level)


def _decode_on_off_level(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    # On/off faked from a level value, for dimmers without a binary switch.
    level = _decode_level(binding, raw, data).level
    value = bool(level)
    return Decoded(value, f"{value} (zw: {level})", level)


def _encode_on_off_level(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    if not isinstance(value, bool):
        raise PropertyValueError(f"Property '{binding.name}' needs a boolean, got {value!r}")
    level = LEVEL_MAX_RAW if value else 0
    return Encoded(level, f"zw: {level} ({value})", level)


# -- alarm / notification ---------------------------------------------------


def _decode_alarm_motion(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    motion = _previous_bool(binding)
    entry = data
    if isinstance(data, str):
        if data.startswith("Clear"):
            entry = ALARM_EVENT_HOME_SECURITY_CLEAR
        elif data.startswith("Motion Detected"):
            entry = ALARM_EVENT_HOME_SECURITY_MOTION
    if entry == ALARM_EVENT_HOME_SECURITY_CLEAR:
        motion = False
    elif entry == ALARM_EVENT_HOME_SECURITY_MOTION:
        motion = True
    return Decoded(motion, f"{motion} (zw: {data})")


def _decode_alarm_tamper(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    tamper = _previous_bool(binding)
    entry = data
    if isinstance(data, str):
        if data.startswith("Clear"):
            entry = ALARM_EVENT_HOME_SECURITY_CLEAR
        elif data.startswith("Tampering"):
            entry = ALARM_EVENT_HOME_SECURITY_TAMPER
    if entry == ALARM_EVENT_HOME_SECURITY_CLEAR:
        tamper = False
    elif entry == ALARM_EVENT_HOME_SECURITY_TAMPER:
        tamper = True
    return Decoded(tamper, f"{tamper} (zw: {data})")


def _decode_value_map(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    if raw is not None and raw.kind == ValueKind.BOOL:
        # A binary sensor corroborating a notification reading.
        value = _to_bool(data)
        return Decoded(value, f"{value} (zw: {data})")
    entry = str(_catalog_entry(raw, data))
    value = binding.value if binding.value is not None else binding.default
    for prefix, mapped in binding.value_map:
        if entry.startswith(prefix):
            value = mapped
            break
    else:
        LOGGER.debug("%s: no mapping for '%s' - keeping %r", binding.name, entry, value)
    return Decoded(value, f"{value} (zw: {entry})")


def _decode_scene(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    if isinstance(data, bool):
        raise TypeError(f"scene data must be an index, got {data!r}")
    if isinstance(data, str):
        idx = catalog_index(raw.values if raw else None, data)
        if idx < 0:
            idx = int(data)
    else:
        idx = int(data)
    return Decoded(idx, f"{idx} (zw: {data})")


# -- temperature / enumerated -----------------------------------------------


def _decode_temperature(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    value = float(data)
    if raw is not None and raw.units == "F":
        celsius = round((value - 32) / 1.8, 1)
        return Decoded(celsius, f"{celsius}C (zw: {data} F)")
    return Decoded(value, f"{value}C (zw: {data} C)")


def _encode_temperature(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    celsius = _require_number(value, binding.name)
    if raw is not None and raw.units == "F":
        fahrenheit = round(celsius * 1.8 + 32, 1)
        return Encoded(fahrenheit, f"{celsius}C zw:{fahrenheit}F")
    return Encoded(celsius, f"{celsius}C zw:{celsius}C")


def _decode_lower_case(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    value = str(_catalog_entry(raw, data)).lower()
    return Decoded(value, f"{value} zw: {data}")


def _encode_lower_case(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    if not isinstance(value, str):
        raise PropertyValueError(f"Property '{binding.name}' needs a string, got {value!r}")
    value = value.lower()
    if raw is None or not raw.values:
        return Encoded(value, value)
    idx = catalog_index([entry.lower() for entry in raw.values], value)
    if idx < 0:
        LOGGER.error(
            "%s: '%s' not in catalog %s - using '%s'",
            binding.name,
            value,
            list(raw.values),
            raw.values[0],
        )
        idx = 0
    data = raw.values[idx]
    return Encoded(data, f"{value} zw: {data}")


# -- configuration parameters -----------------------------------------------


def _decode_config_boolean(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    value = _to_bool(data) if isinstance(data, str) else bool(int(data))
    return Decoded(value, f"{value} (zw: {data})")


def _encode_config_boolean(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    if not isinstance(value, bool):
        raise PropertyValueError(f"Property '{binding.name}' needs a boolean, got {value!r}")
    data = 1 if value else 0
    return Encoded(data, f"{value} ({data})")


def _decode_config_list(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    value = str(_catalog_entry(raw, data))
    return Decoded(value, f"{value} (zw: {data})")


def _encode_config_list(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    # The driver sets list configuration parameters by catalog position.
    if raw is None:
        LOGGER.error("%s: raw value missing - using 0", binding.name)
        return Encoded(0, f"{value} (raw value missing) - using 0")
    idx = catalog_index(raw.values, value)
    if idx < 0:
        LOGGER.error("%s: '%s' not found in %s - using 0", binding.name, value, raw.values)
        return Encoded(0, f"{value} not found - using 0")
    return Encoded(idx, f"{value} ({idx})")


def rgb_to_hex(red: int, green: int, blue: int) -> str:
    return f"#{red:02x}{green:02x}{blue:02x}"


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    match = _RGB_RE.match(value.strip())
    if not match:
        raise ValueError(f"'{value}' is not an #RRGGBB color")
    packed = int(match.group(1), 16)
    return (packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF


def _decode_config_rgbx(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    packed = int(data)
    color = rgb_to_hex((packed >> 24) & 0xFF, (packed >> 16) & 0xFF, (packed >> 8) & 0xFF)
    return Decoded(color, f"{color} (zw: 0x{packed:08x})")


def _encode_config_rgbx(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    try:
        red, green, blue = hex_to_rgb(str(value))
    except ValueError as exc:
        raise PropertyValueError(f"Property '{binding.name}': {exc}") from exc
    packed = (red << 24) | (green << 16) | (blue << 8)
    return Encoded(packed, rgb_to_hex(red, green, blue))


def normalize_packed_color(value: str) -> str:
    """Normalize a ``#RRGGBB[WW[CW]]`` string to ``#RRGGBBWWCW``."""
    match = _PACKED_COLOR_RE.match(value.strip())
    if not match:
        raise ValueError(f"'{value}' is not a #RRGGBBWWCW color")
    rgb, warm, cool = match.groups()
    return f"#{rgb}{warm or '00'}{cool or '00'}".upper()


def _decode_packed_color(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    color = normalize_packed_color(str(data))
    return Decoded(color, f"{color} (zw: {data})")


def _encode_packed_color(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    try:
        color = normalize_packed_color(str(value))
    except ValueError as exc:
        raise PropertyValueError(f"Property '{binding.name}': {exc}") from exc
    return Encoded(color, color)


# -- synthetic light channels -----------------------------------------------


def _decode_rgb(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    color = rgb_to_hex(*hex_to_rgb(str(data)))
    return Decoded(color, color)


def _encode_rgb(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    if not isinstance(value, str):
        raise PropertyValueError(f"Property '{binding.name}' needs an #RRGGBB string, got {value!r}")
    try:
        color = rgb_to_hex(*hex_to_rgb(value))
    except ValueError as exc:
        raise PropertyValueError(f"Property '{binding.name}': {exc}") from exc
    return Encoded(color, color)


def _decode_percent(binding: PropertyBinding, raw: RawValue | None, data: Any) -> Decoded:
    if isinstance(data, bool):
        raise TypeError(f"percent data must be numeric, got {data!r}")
    percent = float(data)
    if not math.isfinite(percent):
        raise ValueError(f"percent data must be finite, got {data!r}")
    value = round(min(max(percent, 0), 100))
    return Decoded(value, f"{value}%")


def _encode_percent(binding: PropertyBinding, raw: RawValue | None, value: Any) -> Encoded:
    percent = _require_number(value, binding.name)
    low = binding.descr.minimum if binding.descr.minimum is not None else 0
    high = binding.descr.maximum if binding.descr.maximum is not None else 100
    percent = min(max(percent, low), high)
    return Encoded(percent, f"{percent:.1f}%")


DECODERS: dict[Codec, DecodeFn] = {
    Codec.IDENTITY: _decode_identity,
    Codec.BOOLEAN: _decode_boolean,
    Codec.LEVEL: _decode_level,
    Codec.ON_OFF_LEVEL: _decode_on_off_level,
    Codec.ALARM_MOTION: _decode_alarm_motion,
    Codec.ALARM_TAMPER: _decode_alarm_tamper,
    Codec.VALUE_MAP: _decode_value_map,
    Codec.SCENE: _decode_scene,
    Codec.TEMPERATURE: _decode_temperature,
    Codec.LOWER_CASE: _decode_lower_case,
    Codec.CONFIG_BOOLEAN: _decode_config_boolean,
    Codec.CONFIG_LIST: _decode_config_list,
    Codec.CONFIG_RGBX: _decode_config_rgbx,
    Codec.PACKED_COLOR: _decode_packed_color,
    Codec.RGB: _decode_rgb,
    Codec.PERCENT: _decode_percent,
}

ENCODERS: dict[Codec, EncodeFn] = {
    Codec.IDENTITY: _encode_identity,
    Codec.BOOLEAN: _encode_boolean,
    Codec.LEVEL: _encode_level,
    Codec.ON_OFF_LEVEL: _encode_on_off_level,
    Codec.TEMPERATURE: _encode_temperature,
    Codec.LOWER_CASE: _encode_lower_case,
    Codec.CONFIG_BOOLEAN: _encode_config_boolean,
    Codec.CONFIG_LIST: _encode_config_list,
    Codec.CONFIG_RGBX: _encode_config_rgbx,
    Codec.PACKED_COLOR: _encode_packed_color,
    Codec.RGB: _encode_rgb,
    Codec.PERCENT: _encode_percent,
}


def decoder_for(codec: Codec) -> DecodeFn:
    return DECODERS[codec]


def encoder_for(codec: Codec) -> EncodeFn:
    # Read-only strategies (alarms, scenes, value maps) write through unchanged.
    return ENCODERS.get(codec, _encode_identity)
