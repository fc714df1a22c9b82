"""Determines a node's properties, actions and events from its raw values.

The classifier runs once per node, after the node is ready. It applies the
quirks matching the node's hardware identity, dispatches on the declared
generic type to one category initializer, then adds the sensors any kind
of device may carry (temperature, humidity, battery and so on).

Every binding goes through :meth:`Classifier.add_property`, which is where
quirk suppression is enforced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from zwthings.core import color, lock, scene
from zwthings.core.binding import PropertyBinding
from zwthings.core.codecs import Codec, catalog_index
from zwthings.core.constants import (
    ALARM_INDEX_ACCESS_CONTROL,
    ALARM_INDEX_CARBON_MONOXIDE,
    ALARM_INDEX_GAS,
    ALARM_INDEX_HEAT,
    ALARM_INDEX_HOME_SECURITY,
    ALARM_INDEX_LEVEL,
    ALARM_INDEX_SMOKE,
    ALARM_INDEX_TYPE,
    ALARM_INDEX_WATER,
    BATTERY_INDEX_LEVEL,
    GENERIC_TYPE_STR,
    METER_INDEX_ELECTRIC_INSTANT_CURRENT,
    METER_INDEX_ELECTRIC_INSTANT_POWER,
    METER_INDEX_ELECTRIC_INSTANT_VOLTAGE,
    SENSOR_BINARY_INDEX_SENSOR,
    SENSOR_MULTILEVEL_INDEX_CARBON_MONOXIDE,
    SENSOR_MULTILEVEL_INDEX_LUMINANCE,
    SENSOR_MULTILEVEL_INDEX_RELATIVE_HUMIDITY,
    SENSOR_MULTILEVEL_INDEX_TEMPERATURE,
    SENSOR_MULTILEVEL_INDEX_ULTRAVIOLET,
    SWITCH_BINARY_INDEX_SWITCH,
    SWITCH_COLOR_INDEX_COLOR,
    SWITCH_MULTILEVEL_INDEX_LEVEL,
    THERMOSTAT_INDEX_FAN_MODE,
    THERMOSTAT_INDEX_FAN_STATE,
    THERMOSTAT_INDEX_MODE,
    THERMOSTAT_INDEX_OPERATING_STATE,
    THERMOSTAT_SETPOINT_INDEX_COOLING,
    THERMOSTAT_SETPOINT_INDEX_HEATING,
    WAKE_UP_INDEX_INTERVAL,
    WAKE_UP_INDEX_MAX_INTERVAL,
    WAKE_UP_INDEX_MIN_INTERVAL,
    CommandClass,
    GenericType,
    ThingType,
)
from zwthings.core.model import NodeStatus, PropertyDescr, ValueKey, ValueKind
from zwthings.core.node import Node
from zwthings.core.quirks import QuirkTable

LOGGER = logging.getLogger(__name__)

# Multi-outlet probing starts here: several dimmers and plugs advertise
# instance 2 without it controlling anything.
MULTI_OUTLET_FIRST_INSTANCE = 3

# Legacy alarm reports used by combination smoke/CO alarms.
ALARM_TYPE_SMOKE = 1
ALARM_TYPE_CARBON_MONOXIDE = 2
ALARM_LEVEL_ACTIVE = 255

# Aeotec configuration parameters for unsolicited reports.
_REPORT_ON_CHANGE_PARAM = 80
_METER_REPORT_PARAM = 90
_METER_REPORT_WATTS_PARAM = 91


@dataclass(frozen=True)
class NotificationSensor:
    """One notification type, recognized by marker strings in its catalog."""

    name: str
    index: int
    at_type: str
    label: str
    capability: str
    markers: tuple[str, ...]
    value_map: tuple[tuple[str, Any], ...]
    name_suffix: str


NOTIFICATION_SENSORS: tuple[NotificationSensor, ...] = (
    NotificationSensor(
        name="smoke",
        index=ALARM_INDEX_SMOKE,
        at_type="SmokeProperty",
        label="Smoke",
        capability="SmokeSensor",
        markers=("Smoke Detected",),
        value_map=(("Clear", False), ("Smoke Detected", True), ("Smoke detected", True)),
        name_suffix="smoke",
    ),
    NotificationSensor(
        name="co",
        index=ALARM_INDEX_CARBON_MONOXIDE,
        at_type="AlarmProperty",
        label="Carbon Monoxide",
        capability="Alarm",
        markers=("Carbon Monoxide detected",),
        value_map=(("Clear", False), ("Carbon Monoxide detected", True)),
        name_suffix="co",
    ),
    NotificationSensor(
        name="overheat",
        index=ALARM_INDEX_HEAT,
        at_type="AlarmProperty",
        label="Overheat",
        capability="Alarm",
        markers=("Overheat detected",),
        value_map=(("Clear", False), ("Overheat detected", True)),
        name_suffix="heat",
    ),
    NotificationSensor(
        name="waterLeak",
        index=ALARM_INDEX_WATER,
        at_type="LeakProperty",
        label="Water Leak",
        capability="LeakSensor",
        markers=("Water Leak detected",),
        value_map=(("Clear", False), ("Water Leak detected", True)),
        name_suffix="leak",
    ),
    NotificationSensor(
        name="open",
        index=ALARM_INDEX_ACCESS_CONTROL,
        at_type="OpenProperty",
        label="Open",
        capability="DoorSensor",
        markers=("Window/Door is open", "Window/Door is closed"),
        value_map=(("Window/Door is open", True), ("Window/Door is closed", False)),
        name_suffix="door",
    ),
    NotificationSensor(
        name="motion",
        index=ALARM_INDEX_HOME_SECURITY,
        at_type="MotionProperty",
        label="Motion",
        capability="MotionSensor",
        markers=("Motion Detected",),
        value_map=(),
        name_suffix="motion",
    ),
    NotificationSensor(
        name="gas",
        index=ALARM_INDEX_GAS,
        at_type="AlarmProperty",
        label="Gas",
        capability="Alarm",
        markers=("Combustible Gas detected",),
        value_map=(("Clear", False), ("Combustible Gas detected", True)),
        name_suffix="gas",
    ),
)


def _catalog_has(values: tuple[str, ...] | None, markers: tuple[str, ...]) -> bool:
    if not values:
        return False
    return any(entry.startswith(marker) for entry in values for marker in markers)


def suggest_name(node: Node, suffix: str) -> None:
    """Replace a generated node name; user-assigned names are kept."""
    name = f"{node.id}-{suffix}"
    if node.name in ("", node.id, node.default_name):
        node.name = name
    node.default_name = name


def add_capability(node: Node, *capabilities: str) -> None:
    for capability in capabilities:
        if capability not in node.capabilities:
            node.capabilities.append(capability)


class Classifier:
    def __init__(self, quirks: QuirkTable | None = None) -> None:
        self.quirks = quirks or QuirkTable()

    # -- entry point --------------------------------------------------------

    def classify(self, node: Node) -> None:
        if node.classified:
            LOGGER.warning("classify: %s is already classified (ignored)", node.id)
            return
        LOGGER.debug("classify: called for %s name = %s defaultName = %s", node.id, node.name, node.default_name)

        node.overrides = self.quirks.overrides_for(node.identity)
        self._apply_quirks(node)
        self._classify_category(node)
        self._add_cross_cutting(node)

        # Any type of device can be battery powered.
        battery_key = node.find_value_key(CommandClass.BATTERY, 1, BATTERY_INDEX_LEVEL)
        if battery_key is not None:
            self.add_battery_property(node, battery_key)

        node.classified = True
        node.last_status = NodeStatus.CLASSIFIED
        LOGGER.debug("classify: %s named %s types: %s", node.id, node.name, node.capabilities)

    # -- quirks -------------------------------------------------------------

    def _apply_quirks(self, node: Node) -> None:
        overrides = node.overrides
        if overrides.quirk_ids:
            LOGGER.info("Device %s matches quirks: %s", node.id, ", ".join(overrides.quirk_ids))
        if overrides.disable_poll:
            LOGGER.info("Device %s setting disablePoll to True", node.id)
            node.disable_poll = True

        for config in overrides.set_configs:
            key = node.find_value_key(CommandClass.CONFIGURATION, 1, config.param_id)
            raw = node.values.get(key)
            if raw is None:
                LOGGER.error("Device %s config paramId: %d unable to find value", node.id, config.param_id)
                continue

            value = raw.value
            value_str = str(value)
            if raw.kind == ValueKind.LIST and not isinstance(value, int):
                # List values hold the catalog string; writes use the position.
                idx = catalog_index(raw.values, value)
                if idx < 0:
                    LOGGER.error(
                        "Device %s config paramId: %d unable to determine index of '%s'",
                        node.id,
                        config.param_id,
                        value,
                    )
                    continue
                value = idx
                value_str = f"(index {idx})"

            if value == config.value:
                LOGGER.info(
                    "Device %s config paramId: %d already has value: %s",
                    node.id,
                    config.param_id,
                    value_str,
                )
            else:
                LOGGER.info(
                    "Setting device %s config paramId: %d to value: %d size: %d",
                    node.id,
                    config.param_id,
                    config.value,
                    config.size,
                )
                node.driver.set_config_param(node.node_id, config.param_id, config.value, config.size)

    # -- properties ---------------------------------------------------------

    def add_property(
        self,
        node: Node,
        name: str,
        descr: PropertyDescr,
        value_key: ValueKey | None = None,
        **kwargs: Any,
    ) -> PropertyBinding | None:
        """Create and register a binding unless a quirk suppresses ``name``."""
        if name in node.overrides.exclude_properties:
            LOGGER.info("Not adding property %s to device %s due to quirk.", name, node.id)
            return None
        if name in node.properties:
            LOGGER.debug("classify: %s already has property %s (skipped)", node.id, name)
            return None
        LOGGER.debug("classify: %s adding property: %s", node.id, name)
        return node.add_binding(PropertyBinding(node, name, descr, value_key, **kwargs))

    def add_config_boolean(self, node: Node, param_id: int, label: str) -> PropertyBinding | None:
        key = node.find_value_key(CommandClass.CONFIGURATION, 1, param_id)
        if key is None:
            LOGGER.error("addConfigBoolean: %s no config parameter with id: %d", node.id, param_id)
            return None
        return self.add_property(
            node,
            f"config-{param_id}",
            PropertyDescr(type="boolean", at_type="BooleanProperty", label=label),
            key,
            encoder=Codec.CONFIG_BOOLEAN,
            decoder=Codec.CONFIG_BOOLEAN,
            fire_and_forget=True,
        )

    def add_config_list(self, node: Node, param_id: int, label: str) -> PropertyBinding | None:
        key = node.find_value_key(CommandClass.CONFIGURATION, 1, param_id)
        raw = node.values.get(key)
        if raw is None:
            LOGGER.error("addConfigList: %s no config parameter with id: %d", node.id, param_id)
            return None
        return self.add_property(
            node,
            f"config-{param_id}",
            PropertyDescr(type="string", label=label, enum=raw.values),
            key,
            encoder=Codec.CONFIG_LIST,
            decoder=Codec.CONFIG_LIST,
            fire_and_forget=True,
        )

    def add_config_rgbx(self, node: Node, param_id: int, label: str) -> PropertyBinding | None:
        key = node.find_value_key(CommandClass.CONFIGURATION, 1, param_id)
        if key is None:
            LOGGER.error("addConfigColorRGBX: %s no config parameter with id: %d", node.id, param_id)
            return None
        return self.add_property(
            node,
            f"config-{param_id}",
            PropertyDescr(type="string", at_type="ColorProperty", label=label),
            key,
            encoder=Codec.CONFIG_RGBX,
            decoder=Codec.CONFIG_RGBX,
            fire_and_forget=True,
        )

    # -- category dispatch --------------------------------------------------

    def _classify_category(self, node: Node) -> None:
        generic = node.identity.generic
        if LOGGER.isEnabledFor(logging.DEBUG):
            generic_str = GENERIC_TYPE_STR.get(generic, "unknown") if generic is not None else "unknown"
            LOGGER.debug(
                "classify: called for node %s, genericType = %s (0x%02x)",
                node.id,
                generic_str,
                generic or 0,
            )
            for raw in node.values:
                LOGGER.debug("classify:   %s %s = %r", raw.value_id, raw.label, raw.value)

        # Just in case it doesn't classify as anything else.
        node.thing_type = ThingType.THING

        if generic in (GenericType.SWITCH_BINARY, GenericType.SWITCH_MULTILEVEL):
            color_key = node.find_value_key(CommandClass.SWITCH_COLOR, 1, SWITCH_COLOR_INDEX_COLOR)
            if color_key is not None and not node.overrides.not_light:
                color.init_light(self, node, color_key)
            else:
                self.init_switches(node)
        elif generic == GenericType.SENSOR_BINARY:
            self.init_binary_sensor(node)
        elif generic in (GenericType.SENSOR_MULTILEVEL, GenericType.SENSOR_NOTIFICATION):
            self.init_notification_sensors(node)
        elif generic == GenericType.SENSOR_ALARM:
            self.init_alarm_sensor(node)
        elif generic == GenericType.WALL_CONTROLLER:
            scene.init_central_scene(self, node)
        elif generic == GenericType.ENTRY_CONTROL:
            lock.init_lock(self, node)
        elif generic == GenericType.THERMOSTAT:
            self.init_thermostat(node)
        else:
            LOGGER.error("Node: %d unknown genericType: %s", node.node_id, generic)

        if node.overrides.alarm_smoke_co and generic != GenericType.SENSOR_ALARM:
            self.init_alarm_sensor(node)

    # -- switches -----------------------------------------------------------

    def init_switches(self, node: Node) -> None:
        binary_key = node.find_value_key(CommandClass.SWITCH_BINARY, 1, SWITCH_BINARY_INDEX_SWITCH)
        level_key = node.find_value_key(CommandClass.SWITCH_MULTILEVEL, 1, SWITCH_MULTILEVEL_INDEX_LEVEL)
        self.init_switch(node, binary_key, level_key, "")

        # Instance 1 is the first outlet; further outlets start at 3.
        instance = MULTI_OUTLET_FIRST_INSTANCE
        switch_count = 1
        while True:
            binary_key = node.find_value_key(CommandClass.SWITCH_BINARY, instance, SWITCH_BINARY_INDEX_SWITCH)
            level_key = node.find_value_key(CommandClass.SWITCH_MULTILEVEL, instance, SWITCH_MULTILEVEL_INDEX_LEVEL)
            if binary_key is None and level_key is None:
                break
            switch_count += 1
            self.init_switch(node, binary_key, level_key, str(switch_count))
            instance += 1

        if node.overrides.report_on_change:
            self._enable_report_on_change(node)

    def init_switch(
        self,
        node: Node,
        binary_key: ValueKey | None,
        level_key: ValueKey | None,
        suffix: str,
    ) -> None:
        if binary_key is None and level_key is None:
            LOGGER.error("initSwitch: %s has no switch values for outlet '%s'", node.id, suffix or "1")
            return

        add_capability(node, "OnOffSwitch")
        on_descr = PropertyDescr(
            type="boolean",
            at_type="BooleanProperty" if suffix else "OnOffProperty",
            label=f"On/Off ({suffix})" if suffix else "On/Off",
        )
        level_descr = PropertyDescr(
            type="number",
            at_type=None if suffix else "LevelProperty",
            label=f"Level ({suffix})" if suffix else "Level",
            unit="percent",
            minimum=0,
            maximum=100,
        )

        if binary_key is not None:
            if suffix:
                # Secondary outlets only show up on a generic thing.
                node.thing_type = ThingType.THING
            else:
                node.thing_type = ThingType.ON_OFF_SWITCH
            self.add_property(node, f"on{suffix}", on_descr, binary_key, encoder=Codec.BOOLEAN, decoder=Codec.BOOLEAN)
            if level_key is not None:
                level = self.add_property(
                    node, f"level{suffix}", level_descr, level_key, encoder=Codec.LEVEL, decoder=Codec.LEVEL
                )
                if level is not None and not suffix:
                    node.thing_type = ThingType.MULTI_LEVEL_SWITCH
                    add_capability(node, "MultiLevelSwitch")
        else:
            # Switches without a binary value fake on/off from the level.
            if not suffix:
                node.thing_type = ThingType.ON_OFF_SWITCH
            self.add_property(
                node,
                f"on{suffix}",
                on_descr,
                level_key,
                encoder=Codec.ON_OFF_LEVEL,
                decoder=Codec.ON_OFF_LEVEL,
            )
            level = self.add_property(
                node, f"level{suffix}", level_descr, level_key, encoder=Codec.LEVEL, decoder=Codec.LEVEL
            )
            if level is not None and not suffix:
                node.thing_type = ThingType.MULTI_LEVEL_SWITCH
                add_capability(node, "MultiLevelSwitch")

        if not suffix:
            self._add_meters(node)

    def _add_meters(self, node: Node) -> None:
        meters = (
            (METER_INDEX_ELECTRIC_INSTANT_POWER, "instantaneousPower", "InstantaneousPowerProperty", "Power", "watt"),
            (METER_INDEX_ELECTRIC_INSTANT_VOLTAGE, "voltage", "VoltageProperty", "Voltage", "volt"),
            (METER_INDEX_ELECTRIC_INSTANT_CURRENT, "current", "CurrentProperty", "Current", "ampere"),
        )
        for index, name, at_type, label, unit in meters:
            key = node.find_value_key(CommandClass.METER, 1, index)
            if key is None:
                continue
            binding = self.add_property(
                node,
                name,
                PropertyDescr(type="number", at_type=at_type, label=label, unit=unit, read_only=True),
                key,
            )
            if binding is not None:
                node.thing_type = ThingType.SMART_PLUG
                add_capability(node, "SmartPlug", "EnergyMonitor")

    def _enable_report_on_change(self, node: Node) -> None:
        driver = node.driver
        # Report button presses as a Basic report.
        driver.set_value(
            ValueKey(node.node_id, CommandClass.CONFIGURATION, 1, _REPORT_ON_CHANGE_PARAM),
            "Basic",
        )
        if node.thing_type == ThingType.SMART_PLUG:
            # Enable meter reports, on changes of 1 watt.
            driver.set_value(ValueKey(node.node_id, CommandClass.CONFIGURATION, 1, _METER_REPORT_PARAM), 1)
            driver.set_value(ValueKey(node.node_id, CommandClass.CONFIGURATION, 1, _METER_REPORT_WATTS_PARAM), 1)

    # -- sensors ------------------------------------------------------------

    def init_binary_sensor(self, node: Node) -> None:
        key = node.find_value_key(CommandClass.SENSOR_BINARY, 1, SENSOR_BINARY_INDEX_SENSOR)
        if key is None:
            LOGGER.error("initBinarySensor: %s has no binary sensor value", node.id)
            return
        first = not node.properties
        if first:
            node.thing_type = ThingType.BINARY_SENSOR
            add_capability(node, "BinarySensor")
        self.add_property(
            node,
            "on",
            PropertyDescr(type="boolean", at_type="BooleanProperty", read_only=True),
            key,
            decoder=Codec.BOOLEAN,
        )
        if first:
            # Contact-style alias for door/window sensors.
            self.add_property(
                node,
                "open",
                PropertyDescr(type="boolean", at_type="OpenProperty", label="Open", read_only=True),
                key,
                decoder=Codec.BOOLEAN,
            )
        if node.thing_type == ThingType.THING and node.name == node.default_name:
            suggest_name(node, "thing")

    def init_notification_sensors(self, node: Node) -> None:
        named = False
        for sensor in NOTIFICATION_SENSORS:
            key = node.find_value_key(CommandClass.ALARM, 1, sensor.index)
            raw = node.values.get(key)
            if raw is None or not _catalog_has(raw.values, sensor.markers):
                continue

            if sensor.index == ALARM_INDEX_HOME_SECURITY:
                binding = self._add_motion_tamper(node, key)
            else:
                binding = self._add_notification_property(node, sensor, key)
            if binding is None:
                continue

            add_capability(node, sensor.capability)
            if node.thing_type == ThingType.THING:
                node.thing_type = ThingType.BINARY_SENSOR
            if not named:
                suggest_name(node, sensor.name_suffix)
                named = True

        if node.thing_type == ThingType.THING:
            # Multilevel sensors without a notification still get readings.
            node.thing_type = ThingType.MULTI_LEVEL_SENSOR
            add_capability(node, "MultiLevelSensor")

    def _add_notification_property(
        self,
        node: Node,
        sensor: NotificationSensor,
        key: ValueKey,
    ) -> PropertyBinding | None:
        aux_key = None
        if sensor.index == ALARM_INDEX_ACCESS_CONTROL and node.overrides.binary_sensor_contact:
            # Some firmware only updates the binary sensor on open/close.
            aux_key = node.find_value_key(CommandClass.SENSOR_BINARY, 1, SENSOR_BINARY_INDEX_SENSOR)
        return self.add_property(
            node,
            sensor.name,
            PropertyDescr(type="boolean", at_type=sensor.at_type, label=sensor.label, read_only=True),
            key,
            aux_value_key=aux_key,
            decoder=Codec.VALUE_MAP,
            value_map=sensor.value_map,
            default=False,
        )

    def _add_motion_tamper(self, node: Node, key: ValueKey) -> PropertyBinding | None:
        motion = self.add_property(
            node,
            "motion",
            PropertyDescr(type="boolean", at_type="MotionProperty", label="Motion", read_only=True),
            key,
            decoder=Codec.ALARM_MOTION,
            default=False,
        )
        tamper = self.add_property(
            node,
            "tamper",
            PropertyDescr(type="boolean", at_type="BooleanProperty", label="Tamper", read_only=True),
            key,
            decoder=Codec.ALARM_TAMPER,
            default=False,
        )
        if motion is not None:
            add_capability(node, "MotionSensor")
        return motion or tamper

    def init_alarm_sensor(self, node: Node) -> None:
        type_key = node.find_value_key(CommandClass.ALARM, 1, ALARM_INDEX_TYPE)
        level_key = node.find_value_key(CommandClass.ALARM, 1, ALARM_INDEX_LEVEL)
        if type_key is None or level_key is None:
            LOGGER.error("initAlarmSensor: %s is missing alarm type or level", node.id)
            return
        alarm_type = self.add_property(
            node,
            "_alarmType",
            PropertyDescr(type="number", read_only=True),
            type_key,
        )
        alarm_level = self.add_property(
            node,
            "_alarmLevel",
            PropertyDescr(type="number", read_only=True),
            level_key,
        )
        if node.thing_type == ThingType.THING:
            node.thing_type = ThingType.ALARM
        add_capability(node, "Alarm")
        if not node.overrides.alarm_smoke_co or alarm_type is None or alarm_level is None:
            return

        smoke = self.add_property(
            node,
            "smoke",
            PropertyDescr(type="boolean", at_type="SmokeProperty", label="Smoke", read_only=True),
            default=False,
        )
        co = self.add_property(
            node,
            "co",
            PropertyDescr(type="boolean", at_type="AlarmProperty", label="Carbon Monoxide", read_only=True),
            default=False,
        )
        add_capability(node, "SmokeSensor")
        suggest_name(node, "smoke")

        def _alarm_updated(_binding: PropertyBinding) -> None:
            _update_smoke_co(node, alarm_type, alarm_level, smoke, co)

        alarm_type.updated = _alarm_updated
        alarm_level.updated = _alarm_updated

    def init_thermostat(self, node: Node) -> None:
        node.thing_type = ThingType.THERMOSTAT
        add_capability(node, "Thermostat", "TemperatureSensor")

        mode_key = node.find_value_key(CommandClass.THERMOSTAT_MODE, 1, THERMOSTAT_INDEX_MODE)
        if mode_key is not None:
            self._add_enumerated(node, "thermostatMode", "ThermostatModeProperty", "Mode", mode_key, read_only=False)

        state_key = node.find_value_key(
            CommandClass.THERMOSTAT_OPERATING_STATE, 1, THERMOSTAT_INDEX_OPERATING_STATE
        )
        if state_key is not None:
            self._add_enumerated(
                node, "heatingCooling", "HeatingCoolingProperty", "Heating/Cooling", state_key, read_only=True
            )

        setpoints = (
            (THERMOSTAT_SETPOINT_INDEX_HEATING, "heatingTargetTemperature", "Heating Target"),
            (THERMOSTAT_SETPOINT_INDEX_COOLING, "coolingTargetTemperature", "Cooling Target"),
        )
        for index, name, label in setpoints:
            key = node.find_value_key(CommandClass.THERMOSTAT_SETPOINT, 1, index)
            if key is None:
                continue
            self.add_property(
                node,
                name,
                PropertyDescr(type="number", at_type="TargetTemperatureProperty", label=label, unit="degree celsius"),
                key,
                encoder=Codec.TEMPERATURE,
                decoder=Codec.TEMPERATURE,
            )

        fan_mode_key = node.find_value_key(CommandClass.THERMOSTAT_FAN_MODE, 1, THERMOSTAT_INDEX_FAN_MODE)
        if fan_mode_key is not None:
            self._add_enumerated(node, "fanMode", None, "Fan Mode", fan_mode_key, read_only=False)
        fan_state_key = node.find_value_key(CommandClass.THERMOSTAT_FAN_STATE, 1, THERMOSTAT_INDEX_FAN_STATE)
        if fan_state_key is not None:
            self._add_enumerated(node, "fanState", None, "Fan State", fan_state_key, read_only=True)

    def _add_enumerated(
        self,
        node: Node,
        name: str,
        at_type: str | None,
        label: str,
        key: ValueKey,
        *,
        read_only: bool,
    ) -> PropertyBinding | None:
        raw = node.values.get(key)
        enum = tuple(entry.lower() for entry in raw.values) if raw is not None and raw.values else None
        return self.add_property(
            node,
            name,
            PropertyDescr(type="string", at_type=at_type, label=label, enum=enum, read_only=read_only),
            key,
            encoder=Codec.LOWER_CASE,
            decoder=Codec.LOWER_CASE,
        )

    # -- cross-cutting ------------------------------------------------------

    def _add_cross_cutting(self, node: Node) -> None:
        security_key = node.find_value_key(CommandClass.ALARM, 1, ALARM_INDEX_HOME_SECURITY)
        if security_key is not None:
            self._add_motion_tamper(node, security_key)

        temperature_key = node.find_value_key(CommandClass.SENSOR_MULTILEVEL, 1, SENSOR_MULTILEVEL_INDEX_TEMPERATURE)
        if temperature_key is not None:
            self.add_temperature_property(node, temperature_key)

        readings = (
            (SENSOR_MULTILEVEL_INDEX_CARBON_MONOXIDE, "coLevel", None, "Carbon Monoxide Level", "ppm", None),
            (SENSOR_MULTILEVEL_INDEX_LUMINANCE, "luminance", None, "Luminance", "lux", None),
            (SENSOR_MULTILEVEL_INDEX_RELATIVE_HUMIDITY, "humidity", "LevelProperty", "Humidity", "percent", (0, 100)),
            (SENSOR_MULTILEVEL_INDEX_ULTRAVIOLET, "uvIndex", None, "UV Index", None, None),
        )
        for index, name, at_type, label, unit, bounds in readings:
            key = node.find_value_key(CommandClass.SENSOR_MULTILEVEL, 1, index)
            if key is None:
                continue
            minimum, maximum = bounds or (None, None)
            self.add_property(
                node,
                name,
                PropertyDescr(
                    type="number",
                    at_type=at_type,
                    label=label,
                    unit=unit,
                    minimum=minimum,
                    maximum=maximum,
                    read_only=True,
                ),
                key,
            )

        wakeup_key = node.find_value_key(CommandClass.WAKE_UP, 1, WAKE_UP_INDEX_INTERVAL)
        if wakeup_key is not None:
            self.add_wakeup_property(node, wakeup_key)

    def add_temperature_property(self, node: Node, key: ValueKey) -> PropertyBinding | None:
        binding = self.add_property(
            node,
            "temperature",
            PropertyDescr(
                type="number",
                at_type="TemperatureProperty",
                label="Temperature",
                unit="degree celsius",
                read_only=True,
            ),
            key,
            decoder=Codec.TEMPERATURE,
        )
        if binding is not None:
            add_capability(node, "TemperatureSensor")
        return binding

    def add_wakeup_property(self, node: Node, key: ValueKey) -> PropertyBinding | None:
        minimum = node.values.get(node.find_value_key(CommandClass.WAKE_UP, 1, WAKE_UP_INDEX_MIN_INTERVAL))
        maximum = node.values.get(node.find_value_key(CommandClass.WAKE_UP, 1, WAKE_UP_INDEX_MAX_INTERVAL))
        min_value = minimum.value if minimum is not None else None
        max_value = maximum.value if maximum is not None else None
        if min_value == 0 and max_value == 0:
            # Event-only sleeping device: there is no periodic wake-up.
            LOGGER.debug("classify: %s wake-up interval bounds are 0/0 - no wakeupInterval", node.id)
            return None
        return self.add_property(
            node,
            "wakeupInterval",
            PropertyDescr(
                type="integer",
                label="Wake-up Interval",
                unit="second",
                minimum=min_value,
                maximum=max_value,
            ),
            key,
        )

    def add_battery_property(self, node: Node, key: ValueKey) -> PropertyBinding | None:
        return self.add_property(
            node,
            "batteryLevel",
            PropertyDescr(
                type="number",
                at_type="LevelProperty",
                label="Battery",
                unit="percent",
                minimum=0,
                maximum=100,
                read_only=True,
            ),
            key,
        )


def _update_smoke_co(
    node: Node,
    alarm_type: PropertyBinding,
    alarm_level: PropertyBinding,
    smoke: PropertyBinding | None,
    co: PropertyBinding | None,
) -> None:
    try:
        type_code = int(alarm_type.value)
        active = int(alarm_level.value) == ALARM_LEVEL_ACTIVE
    except (OverflowError, TypeError, ValueError):
        LOGGER.warning(
            "node%d: unexpected alarm type/level %r/%r", node.node_id, alarm_type.value, alarm_level.value
        )
        return

    smoke_value = smoke.value if smoke is not None else False
    co_value = co.value if co is not None else False
    if type_code == ALARM_TYPE_SMOKE:
        smoke_value = active
    elif type_code == ALARM_TYPE_CARBON_MONOXIDE:
        co_value = active
    else:
        smoke_value = co_value = False

    for binding, value in ((smoke, smoke_value), (co, co_value)):
        if binding is not None and binding.value != value:
            node.set_property_value(binding, value)
