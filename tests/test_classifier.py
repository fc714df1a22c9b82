from __future__ import annotations

import pytest

from zwthings.core.errors import PropertyReadOnlyError, PropertyValueError, UnknownPropertyError
from zwthings.core.model import ConfigWrite, Quirk, QuirkHints, QuirkMatch
from zwthings.core.quirks import QuirkTable

SWITCH_BINARY = 0x25
SWITCH_MULTILEVEL = 0x26
SENSOR_BINARY = 0x30
SENSOR_MULTILEVEL = 0x31
THERMOSTAT_MODE = 0x40
ALARM = 0x71
BATTERY = 0x80
CONFIGURATION = 0x70
METER = 0x32

DIMMER_VALUES = [
    {"class_id": SWITCH_BINARY, "index": 0, "type": "bool", "label": "Switch", "value": True},
    {"class_id": SWITCH_MULTILEVEL, "index": 0, "type": "byte", "label": "Level", "value": 99},
]


def test_dimmer_gets_on_and_level(add_node) -> None:
    service, node = add_node(DIMMER_VALUES, generic=0x11)

    assert node.classified
    assert node.thing_type == "multiLevelSwitch"
    assert node.capabilities == ["OnOffSwitch", "MultiLevelSwitch"]
    assert node.properties["on"].value is True
    assert node.properties["level"].value == 100
    assert node.properties["level"].level == 99
    polled = [w.target for w in service.driver.writes if w.op == "poll"]
    assert polled == ["2-37-1-0", "2-38-1-0"]


def test_default_name_comes_from_first_user_value(add_node) -> None:
    _, node = add_node(DIMMER_VALUES, generic=0x11)
    assert node.name == "zwave-2-Switch"


def test_user_name_wins(add_node) -> None:
    _, node = add_node(DIMMER_VALUES, generic=0x11, info={"name": "Porch"})
    assert node.name == "Porch"


def test_quirk_suppresses_level_and_polling(add_node) -> None:
    quirks = QuirkTable(
        quirks=(
            Quirk(
                id="no_level",
                match=QuirkMatch(manufacturer_id="0x0086", product_id="0x0060"),
                exclude_properties=("level",),
                disable_poll=True,
            ),
        )
    )
    info = {"manufacturerid": "0x0086", "productid": "0x0060", "producttype": "0x0003"}
    service, node = add_node(DIMMER_VALUES, generic=0x11, info=info, quirks=quirks)

    assert "on" in node.properties
    assert "level" not in node.properties
    assert node.thing_type == "onOffSwitch"
    assert node.capabilities == ["OnOffSwitch"]
    assert node.overrides.quirk_ids == ("no_level",)
    assert not [w for w in service.driver.writes if w.op == "poll"]


def test_quirk_config_write_uses_catalog_position(add_node) -> None:
    quirks = QuirkTable(
        quirks=(
            Quirk(
                id="basic_reports",
                match=QuirkMatch(manufacturer_id="0x0086"),
                set_configs=(ConfigWrite(80, 2, 1),),
            ),
        )
    )
    values = DIMMER_VALUES + [
        {
            "class_id": CONFIGURATION,
            "index": 80,
            "type": "list",
            "genre": "config",
            "label": "Notification",
            "values": ["Nothing", "Hail", "Basic"],
            "value": "Hail",
        }
    ]
    service, _ = add_node(values, generic=0x11, info={"manufacturerid": "0x0086"}, quirks=quirks)
    assert [w.describe() for w in service.driver.config_writes()] == ["config node2 param 80 = 2 (size 1)"]


def test_config_write_skipped_when_value_matches(add_node) -> None:
    quirks = QuirkTable(
        quirks=(Quirk(id="q", match=QuirkMatch(manufacturer_id="0x0086"), set_configs=(ConfigWrite(5, 1, 1),)),)
    )
    values = DIMMER_VALUES + [{"class_id": CONFIGURATION, "index": 5, "type": "byte", "genre": "config", "value": 1}]
    service, _ = add_node(values, generic=0x11, info={"manufacturerid": "0x0086"}, quirks=quirks)
    assert service.driver.config_writes() == []


def test_second_outlet_starts_at_instance_three(add_node) -> None:
    values = DIMMER_VALUES + [
        {"class_id": SWITCH_BINARY, "instance": 2, "index": 0, "type": "bool", "value": False},
        {"class_id": SWITCH_BINARY, "instance": 3, "index": 0, "type": "bool", "value": False},
    ]
    _, node = add_node(values, generic=0x10)
    assert "on2" in node.properties
    assert node.properties["on2"].value_key.instance == 3
    assert "on3" not in node.properties


def test_set_property_writes_and_resolves_on_confirmation(add_node, loop) -> None:
    service, node = add_node(DIMMER_VALUES, generic=0x11)

    future = service.set_property(2, "on", False)
    assert [w.describe() for w in service.driver.value_writes()] == ["set 2-37-1-0 = False"]
    assert not future.done()

    service.value_changed(2, SWITCH_BINARY, {"index": 0, "type": "bool", "value": False})
    assert loop.run_until_complete(future) is False


def test_set_level_is_encoded_to_hardware_scale(add_node) -> None:
    service, _ = add_node(DIMMER_VALUES, generic=0x11)
    service.set_property(2, "level", 100)
    assert service.driver.value_writes()[-1].data == 99


def test_set_unknown_property_raises(add_node) -> None:
    service, _ = add_node(DIMMER_VALUES, generic=0x11)
    with pytest.raises(UnknownPropertyError):
        service.set_property(2, "brightness", 10)


def test_battery_level_is_read_only_percent(add_node, loop) -> None:
    values = [
        {"class_id": SENSOR_BINARY, "index": 0, "type": "bool", "label": "Sensor", "value": False},
        {"class_id": BATTERY, "index": 0, "type": "byte", "label": "Battery Level", "value": 42},
    ]
    service, node = add_node(values, generic=0x20)

    battery = node.properties["batteryLevel"]
    assert battery.value == 42
    assert battery.as_dict()["unit"] == "percent"
    assert battery.as_dict()["readOnly"] is True

    future = service.set_property(2, "batteryLevel", 50)
    with pytest.raises(PropertyReadOnlyError):
        loop.run_until_complete(future)
    assert battery.value == 42
    assert service.driver.value_writes() == []


def test_binary_sensor_gets_on_and_open(add_node) -> None:
    values = [{"class_id": SENSOR_BINARY, "index": 0, "type": "bool", "label": "Sensor", "value": True}]
    _, node = add_node(values, generic=0x20)
    assert list(node.properties) == ["on", "open"]
    assert node.thing_type == "binarySensor"
    assert node.properties["open"].value is True


def test_fahrenheit_temperature_reported_in_celsius(add_node) -> None:
    values = [
        {
            "class_id": SENSOR_MULTILEVEL,
            "index": 1,
            "type": "decimal",
            "label": "Temperature",
            "units": "F",
            "value": 72,
        }
    ]
    _, node = add_node(values, generic=0x21)
    temperature = node.properties["temperature"]
    assert temperature.value == 22.2
    assert temperature.descr.unit == "degree celsius"
    assert node.thing_type == "multiLevelSensor"


def test_water_leak_notification(add_node, listener) -> None:
    values = [
        {
            "class_id": ALARM,
            "index": 8,
            "type": "list",
            "label": "Water",
            "values": ["Clear", "Water Leak detected"],
            "value": "Clear",
        }
    ]
    service, node = add_node(values, generic=0x07)
    assert node.properties["waterLeak"].value is False
    assert node.name == "zwave-2-leak"
    assert "LeakSensor" in node.capabilities

    service.value_changed(2, ALARM, {**values[0], "value": "Water Leak detected"})
    assert node.properties["waterLeak"].value is True
    assert ("waterLeak", True) in listener.changes


def test_motion_and_tamper_from_home_security(add_node) -> None:
    values = [
        {
            "class_id": ALARM,
            "index": 10,
            "type": "list",
            "label": "Home Security",
            "values": ["Clear", "Tampering -  Cover Removed", "Motion Detected at Unknown Location"],
            "value": "Clear",
        }
    ]
    service, node = add_node(values, generic=0x07)
    assert node.properties["motion"].value is False
    assert node.properties["tamper"].value is False

    service.value_changed(2, ALARM, {**values[0], "value": "Motion Detected at Unknown Location"})
    assert node.properties["motion"].value is True
    assert node.properties["tamper"].value is False


def test_smoke_and_co_from_legacy_alarm(add_node) -> None:
    quirks = QuirkTable(
        quirks=(
            Quirk(
                id="smoke_co",
                match=QuirkMatch(manufacturer_id="0x0138"),
                hints=QuirkHints(alarm_smoke_co=True),
            ),
        )
    )
    values = [
        {"class_id": ALARM, "index": 0, "type": "byte", "label": "Alarm Type", "value": 0},
        {"class_id": ALARM, "index": 1, "type": "byte", "label": "Alarm Level", "value": 0},
    ]
    service, node = add_node(values, generic=0xA1, info={"manufacturerid": "0x0138"}, quirks=quirks)
    assert node.properties["smoke"].value is False
    assert node.properties["co"].value is False

    service.value_changed(2, ALARM, {"index": 0, "type": "byte", "value": 1})
    service.value_changed(2, ALARM, {"index": 1, "type": "byte", "value": 255})
    assert node.properties["smoke"].value is True

    service.value_changed(2, ALARM, {"index": 0, "type": "byte", "value": 2})
    assert node.properties["co"].value is True

    service.value_changed(2, ALARM, {"index": 0, "type": "byte", "value": 0})
    assert node.properties["smoke"].value is False
    assert node.properties["co"].value is False


def test_thermostat_mode_is_lower_cased(add_node) -> None:
    values = [
        {
            "class_id": THERMOSTAT_MODE,
            "index": 0,
            "type": "list",
            "label": "Mode",
            "values": ["Off", "Heat", "Cool"],
            "value": "Heat",
        }
    ]
    service, node = add_node(values, generic=0x08)
    mode = node.properties["thermostatMode"]
    assert mode.value == "heat"
    assert mode.descr.enum == ("off", "heat", "cool")

    service.set_property(2, "thermostatMode", "COOL")
    assert service.driver.value_writes()[-1].data == "Cool"
    assert mode.value == "cool"


def test_classify_twice_is_a_no_op(add_node) -> None:
    service, node = add_node(DIMMER_VALUES, generic=0x11)
    bindings = dict(node.properties)
    writes = list(service.driver.writes)

    service.classifier.classify(node)

    assert node.properties == bindings
    assert service.driver.writes == writes


def test_value_removal_drops_sole_key_binding(add_node) -> None:
    service, node = add_node(DIMMER_VALUES, generic=0x11)
    service.value_removed(2, SWITCH_MULTILEVEL, 1, 0)
    assert "level" not in node.properties
    assert "on" in node.properties


def test_wakeup_interval_omitted_for_event_only_devices(add_node) -> None:
    values = [
        {"class_id": SENSOR_BINARY, "index": 0, "type": "bool", "value": False},
        {"class_id": 0x84, "index": 0, "type": "int", "value": 3600},
        {"class_id": 0x84, "index": 1, "type": "int", "value": 0},
        {"class_id": 0x84, "index": 2, "type": "int", "value": 0},
    ]
    _, node = add_node(values, generic=0x20)
    assert "wakeupInterval" not in node.properties


def test_level_reading_follows_the_raw_value(add_node) -> None:
    service, node = add_node(DIMMER_VALUES, generic=0x11)
    level = node.properties["level"]

    service.value_changed(2, SWITCH_MULTILEVEL, {"index": 0, "type": "byte", "value": 40})
    assert level.value == 40
    assert level.level == 40
    assert level.as_dict()["level"] == 40
    assert "level" not in node.properties["on"].as_dict()


@pytest.mark.parametrize("data", ["bright", float("inf"), float("nan"), True])
def test_malformed_level_keeps_previous_value(add_node, data) -> None:
    service, node = add_node(DIMMER_VALUES, generic=0x11)

    service.value_changed(2, SWITCH_MULTILEVEL, {"index": 0, "type": "byte", "value": data})

    assert node.properties["level"].value == 100
    assert node.properties["on"].value is True


def test_set_level_to_nan_fails_the_future(add_node, loop) -> None:
    service, node = add_node(DIMMER_VALUES, generic=0x11)

    future = service.set_property(2, "level", float("nan"))

    with pytest.raises(PropertyValueError):
        loop.run_until_complete(future)
    assert node.properties["level"].value == 100
    assert service.driver.value_writes() == []


def test_set_level_caches_the_hardware_rounded_value(add_node) -> None:
    service, node = add_node(DIMMER_VALUES, generic=0x11)
    service.set_property(2, "level", 150)
    assert service.driver.value_writes()[-1].data == 99
    assert node.properties["level"].value == 100


REPORTING = QuirkTable(
    quirks=(Quirk(id="reporting", match=QuirkMatch(manufacturer_id="0x0086"), hints=QuirkHints(report_on_change=True)),)
)


def test_report_on_change_asks_for_basic_reports(add_node) -> None:
    service, _ = add_node(DIMMER_VALUES, generic=0x10, info={"manufacturerid": "0x0086"}, quirks=REPORTING)
    assert [w.describe() for w in service.driver.value_writes()] == ["set 2-112-1-80 = Basic"]


def test_report_on_change_enables_meter_reports_on_smart_plugs(add_node) -> None:
    values = DIMMER_VALUES + [
        {"class_id": METER, "index": 8, "type": "decimal", "label": "Power", "value": 3.5, "units": "W"}
    ]
    service, node = add_node(values, generic=0x10, info={"manufacturerid": "0x0086"}, quirks=REPORTING)

    assert node.thing_type == "smartPlug"
    assert [w.describe() for w in service.driver.value_writes()] == [
        "set 2-112-1-80 = Basic",
        "set 2-112-1-90 = 1",
        "set 2-112-1-91 = 1",
    ]


def test_no_report_on_change_without_the_hint(add_node) -> None:
    service, _ = add_node(DIMMER_VALUES, generic=0x10, info={"manufacturerid": "0x0086"})
    assert service.driver.value_writes() == []
