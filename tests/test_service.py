from __future__ import annotations

import pytest

from zwthings.core.errors import PropertyError, UnknownNodeError
from zwthings.core.model import ValueKey, ValueKind

SENSOR_BINARY = 0x30
SWITCH_BINARY = 0x25
SENSOR_VALUES = [{"class_id": SENSOR_BINARY, "index": 0, "type": "bool", "label": "Sensor", "value": False}]


def test_scan_complete_classifies_nodes_that_never_became_ready(make_service, listener) -> None:
    service = make_service()
    service.node_added(3)
    service.value_added(3, SENSOR_BINARY, SENSOR_VALUES[0])
    service.node_naming(3, {"generic": 0x20, "basic": 4})

    assert not service.get_node(3).classified
    service.scan_complete()

    assert service.get_node(3).classified
    assert listener.added == ["zwave-3"]
    assert service.nodes_being_added == {}


def test_scan_complete_skips_dead_nodes(make_service, listener) -> None:
    service = make_service()
    service.node_added(4)
    service.value_added(4, SENSOR_BINARY, SENSOR_VALUES[0])
    service.node_notification(4, 5)

    service.scan_complete()

    assert not service.get_node(4).classified
    assert listener.added == []


def test_controller_node_is_not_classified(make_service, listener) -> None:
    service = make_service()
    service.node_added(1)
    service.node_ready(1, {"generic": 0x02})
    assert not service.get_node(1).classified
    assert listener.added == []


def test_node_removed_fails_pending_sets(add_node, loop, listener) -> None:
    values = [{"class_id": SWITCH_BINARY, "index": 0, "type": "bool", "label": "Switch", "value": True}]
    service, _ = add_node(values, generic=0x10)
    future = service.set_property(2, "on", False)

    service.node_removed(2)

    assert listener.removed == ["zwave-2"]
    with pytest.raises(PropertyError):
        loop.run_until_complete(future)
    with pytest.raises(UnknownNodeError):
        service.get_node(2)


def test_notifications_update_last_status(make_service) -> None:
    service = make_service()
    node = service.node_added(5)
    service.node_notification(5, 4)
    assert node.last_status == "sleeping"
    service.node_notification(5, 42)
    assert node.last_status == "sleeping"


def test_dump_lists_every_node(add_node) -> None:
    service, _ = add_node(SENSOR_VALUES, generic=0x20, info={"product": "Door Sensor", "loc": "Hall"})
    lines = service.dump()
    assert lines[0] == "Controller: zwave Nodes: 1"
    assert "Door Sensor" in lines[3]
    assert "Hall" in lines[3]


def test_as_dict_includes_values_and_properties(add_node) -> None:
    _, node = add_node(SENSOR_VALUES, generic=0x20)
    dumped = node.as_dict()
    assert dumped["type"] == "binarySensor"
    assert "2-48-1-0" in dumped["zwValues"]
    assert dumped["properties"]["on"]["valueId"] == "2-48-1-0"
    assert dumped["zwInfo"]["generic"] == 0x20


def test_unknown_product_is_prefixed_with_manufacturer(make_service) -> None:
    service = make_service()
    node = service.node_added(6)
    service.node_naming(6, {"manufacturer": "Acme", "product": "Unknown: type=0001, id=0002"})
    assert node.identity.product == "Acme Unknown: type=0001, id=0002"


def test_unknown_value_types_are_kept_as_raw(add_node) -> None:
    service, node = add_node(SENSOR_VALUES, generic=0x20)

    service.value_added(2, 0x53, {"index": 0, "type": "schedule", "label": "Schedule", "value": None})
    service.value_added(2, 0x53, {"index": 1, "type": "timeline", "value": "0x01"})

    assert node.values.get(ValueKey(2, 0x53, 1, 0)).kind == ValueKind.SCHEDULE
    assert node.values.get(ValueKey(2, 0x53, 1, 1)).kind == ValueKind.RAW


@pytest.mark.parametrize(
    "value",
    [
        {"index": "first", "type": "bool", "value": True},
        {"instance": None, "index": 0, "type": "bool", "value": True},
        {"index": float("inf"), "type": "bool", "value": True},
    ],
)
def test_malformed_notifications_are_dropped(add_node, value) -> None:
    service, node = add_node(SENSOR_VALUES, generic=0x20)
    count = len(node.values)

    service.value_changed(2, SENSOR_BINARY, value)
    service.value_added(2, SENSOR_BINARY, value)

    assert len(node.values) == count
    assert node.properties["on"].value is False
