from __future__ import annotations

from types import SimpleNamespace

import pytest

from zwthings.core.codecs import (
    Codec,
    catalog_index,
    decoder_for,
    encoder_for,
    hex_to_rgb,
    normalize_packed_color,
    resolve_codec,
)
from zwthings.core.errors import PropertyValueError, UnknownCodecError
from zwthings.core.model import PropertyDescr, RawValue


def test_level_99_decodes_as_full_brightness() -> None:
    decoded = decoder_for(Codec.LEVEL)(None, None, 99)
    assert decoded.value == 100
    assert decoded.level == 99


def test_level_50_is_unchanged() -> None:
    assert decoder_for(Codec.LEVEL)(None, None, 50).value == 50


def test_fahrenheit_temperature_is_reported_in_celsius() -> None:
    raw = RawValue(node_id=2, class_id=0x31, index=1, kind="decimal", units="F")
    assert decoder_for(Codec.TEMPERATURE)(None, raw, 72).value == 22.2


def test_catalog_index_stops_at_first_repeat() -> None:
    catalog = ("Off", "On", "Off", "Auto")
    assert catalog_index(catalog, "On") == 1
    assert catalog_index(catalog, "Auto") == -1
    assert catalog_index(None, "On") == -1


def test_packed_color_is_padded_and_upper_cased() -> None:
    assert normalize_packed_color("#ff8000") == "#FF80000000"
    assert normalize_packed_color("00ff00aa") == "#00FF00AA00"
    with pytest.raises(ValueError):
        normalize_packed_color("red")


def test_hex_to_rgb() -> None:
    assert hex_to_rgb("#102030") == (0x10, 0x20, 0x30)


def test_read_only_strategies_write_through() -> None:
    assert encoder_for(Codec.SCENE)(None, None, 3).data == 3


def test_unknown_codec_rejected() -> None:
    with pytest.raises(UnknownCodecError):
        resolve_codec("sideways")


def _binding(name: str = "prop", **descr) -> SimpleNamespace:
    # Codecs only read these attributes off a binding.
    return SimpleNamespace(
        name=name,
        descr=PropertyDescr(type="number", **descr),
        value=None,
        default=None,
        value_map=(),
    )


@pytest.mark.parametrize(
    ("codec", "raw", "value"),
    [
        (Codec.BOOLEAN, None, True),
        (Codec.LEVEL, None, 100),
        (Codec.LEVEL, None, 42),
        (Codec.ON_OFF_LEVEL, None, False),
        (Codec.TEMPERATURE, RawValue(node_id=2, class_id=0x43, units="F"), 21.5),
        (Codec.LOWER_CASE, RawValue(node_id=2, class_id=0x40, values=("Off", "Heat", "Cool")), "heat"),
        (Codec.CONFIG_BOOLEAN, None, True),
        (Codec.CONFIG_LIST, RawValue(node_id=2, class_id=0x70, values=("Off", "On")), "On"),
        (Codec.CONFIG_RGBX, None, "#10ff80"),
        (Codec.PACKED_COLOR, None, "#FF000080FF"),
        (Codec.RGB, None, "#00ff00"),
        (Codec.PERCENT, None, 30),
    ],
)
def test_decode_of_encode_keeps_the_value(codec: Codec, raw: RawValue | None, value) -> None:
    binding = _binding()
    encoded = encoder_for(codec)(binding, raw, value)
    assert decoder_for(codec)(binding, raw, encoded.data).value == value


@pytest.mark.parametrize("value", [float("nan"), float("inf"), "50", True])
def test_level_encode_rejects_non_numbers(value) -> None:
    with pytest.raises(PropertyValueError):
        encoder_for(Codec.LEVEL)(_binding("level", minimum=0, maximum=100), None, value)


@pytest.mark.parametrize("data", [float("inf"), float("nan"), "dim"])
def test_level_decode_raises_for_the_binding_to_catch(data) -> None:
    with pytest.raises((ValueError, OverflowError)):
        decoder_for(Codec.LEVEL)(_binding(), None, data)


def test_rgb_channel_rejects_non_colors() -> None:
    with pytest.raises(PropertyValueError):
        encoder_for(Codec.RGB)(_binding("color"), None, "banana")
    assert encoder_for(Codec.RGB)(_binding("color"), None, "#00FF00").data == "#00ff00"


def test_percent_channel_is_clamped() -> None:
    assert encoder_for(Codec.PERCENT)(_binding("warmLevel"), None, 150).data == 100
    with pytest.raises(PropertyValueError):
        encoder_for(Codec.PERCENT)(_binding("warmLevel"), None, float("nan"))
