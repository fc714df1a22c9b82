from __future__ import annotations

from zwthings.core.model import RawValue, ValueKey
from zwthings.core.value_store import ValueStore


def _raw(class_id: int, instance: int = 1, index: int = 0, value=None) -> RawValue:
    return RawValue(node_id=2, class_id=class_id, instance=instance, index=index, value=value)


def test_put_find_and_remove() -> None:
    store = ValueStore(2)
    assert store.put(_raw(0x25, value=True))
    assert not store.put(_raw(0x25, value=False))
    store.put(_raw(0x26, instance=3))

    assert len(store) == 2
    assert store.classes == [0x25, 0x26]
    assert store.find(0x26) == ValueKey(2, 0x26, 3, 0)
    assert store.find(0x26, 1) is None
    assert store.get(ValueKey(2, 0x25, 1, 0)).value is False

    assert store.remove(0x25, 1, 0) is not None
    assert store.remove(0x25, 1, 0) is None
    assert store.get(None) is None


def test_value_id_round_trips_through_key() -> None:
    raw = _raw(0x71, index=10)
    assert raw.value_id == "2-113-1-10"
    assert ValueKey.parse(raw.value_id) == raw.key


def test_aux_value_removal_keeps_binding(add_node) -> None:
    from zwthings.core.model import Quirk, QuirkHints, QuirkMatch
    from zwthings.core.quirks import QuirkTable

    quirks = QuirkTable(
        quirks=(
            Quirk(id="contact", match=QuirkMatch(manufacturer_id="0x0086"), hints=QuirkHints(binary_sensor_contact=True)),
        )
    )
    values = [
        {
            "class_id": 0x71,
            "index": 9,
            "type": "list",
            "label": "Access Control",
            "values": ["Clear", "Window/Door is open", "Window/Door is closed"],
            "value": "Window/Door is closed",
        },
        {"class_id": 0x30, "index": 0, "type": "bool", "label": "Sensor", "value": False},
    ]
    service, node = add_node(values, generic=0x07, info={"manufacturerid": "0x0086"}, quirks=quirks)
    opened = node.properties["open"]
    assert opened.aux_value_key == ValueKey(2, 0x30, 1, 0)

    service.value_changed(2, 0x30, {"index": 0, "type": "bool", "value": True})
    assert opened.value is True

    service.value_removed(2, 0x30, 1, 0)
    assert node.properties["open"] is opened
    assert opened.aux_value_key is None
