"""Z-Wave protocol numbers used by the classifier.

Command class and generic type numbers come from the Z-Wave specification.
Value indexes follow the OpenZWave value layout, which is what the driver
reports in its value notifications.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class CommandClass(IntEnum):
    BASIC = 0x20
    SWITCH_BINARY = 0x25
    SWITCH_MULTILEVEL = 0x26
    SWITCH_ALL = 0x27
    SENSOR_BINARY = 0x30
    SENSOR_MULTILEVEL = 0x31
    METER = 0x32
    SWITCH_COLOR = 0x33
    THERMOSTAT_MODE = 0x40
    THERMOSTAT_OPERATING_STATE = 0x42
    THERMOSTAT_SETPOINT = 0x43
    THERMOSTAT_FAN_MODE = 0x44
    THERMOSTAT_FAN_STATE = 0x45
    CENTRAL_SCENE = 0x5B
    ZWAVE_PLUS_INFO = 0x5E
    DOOR_LOCK = 0x62
    CONFIGURATION = 0x70
    ALARM = 0x71
    MANUFACTURER_SPECIFIC = 0x72
    POWER_LEVEL = 0x73
    BATTERY = 0x80
    CLOCK = 0x81
    WAKE_UP = 0x84
    VERSION = 0x86


class GenericType(IntEnum):
    GENERIC_CONTROLLER = 0x01
    STATIC_CONTROLLER = 0x02
    AV_CONTROLLER = 0x03
    SENSOR_NOTIFICATION = 0x07
    THERMOSTAT = 0x08
    REPEATER_SLAVE = 0x0F
    SWITCH_BINARY = 0x10
    SWITCH_MULTILEVEL = 0x11
    WALL_CONTROLLER = 0x18
    SENSOR_BINARY = 0x20
    SENSOR_MULTILEVEL = 0x21
    METER = 0x31
    ENTRY_CONTROL = 0x40
    SENSOR_ALARM = 0xA1


GENERIC_TYPE_STR: dict[int, str] = {
    GenericType.GENERIC_CONTROLLER: "Generic Controller",
    GenericType.STATIC_CONTROLLER: "Static Controller",
    GenericType.AV_CONTROLLER: "AV Controller",
    GenericType.SENSOR_NOTIFICATION: "Sensor Notification",
    GenericType.THERMOSTAT: "Thermostat",
    GenericType.REPEATER_SLAVE: "Repeater Slave",
    GenericType.SWITCH_BINARY: "Switch Binary",
    GenericType.SWITCH_MULTILEVEL: "Switch MultiLevel",
    GenericType.WALL_CONTROLLER: "Wall Controller",
    GenericType.SENSOR_BINARY: "Sensor Binary",
    GenericType.SENSOR_MULTILEVEL: "Sensor MultiLevel",
    GenericType.METER: "Meter",
    GenericType.ENTRY_CONTROL: "Entry Control",
    GenericType.SENSOR_ALARM: "Sensor Alarm",
}

BASIC_TYPE_STR = (
    "???",
    "Controller",
    "StaticController",
    "Slave",
    "RoutingSlave",
)

# Single-index command classes.
BATTERY_INDEX_LEVEL = 0
SENSOR_BINARY_INDEX_SENSOR = 0
SWITCH_BINARY_INDEX_SWITCH = 0
SWITCH_MULTILEVEL_INDEX_LEVEL = 0
DOOR_LOCK_INDEX_LOCKED = 0

# Meter Table Capability Report: bit number times 4.
METER_INDEX_ELECTRIC_INSTANT_POWER = 8
METER_INDEX_ELECTRIC_INSTANT_VOLTAGE = 16
METER_INDEX_ELECTRIC_INSTANT_CURRENT = 20

# OpenZWave SensorMultilevel SensorType.
SENSOR_MULTILEVEL_INDEX_TEMPERATURE = 1
SENSOR_MULTILEVEL_INDEX_LUMINANCE = 3
SENSOR_MULTILEVEL_INDEX_RELATIVE_HUMIDITY = 5
SENSOR_MULTILEVEL_INDEX_ULTRAVIOLET = 27
SENSOR_MULTILEVEL_INDEX_CARBON_MONOXIDE = 40

# CentralScene.cpp: version 1.4 reports the count at 0, 1.5 at 256.
CENTRAL_SCENE_INDEX_COUNT = 0
CENTRAL_SCENE_INDEX_COUNT_V15 = 256

# Alarm (Notification) command class. Notifications are reported at an
# index of "notification type + 3".
ALARM_INDEX_TYPE = 0
ALARM_INDEX_LEVEL = 1
ALARM_INDEX_SMOKE = 4
ALARM_INDEX_CARBON_MONOXIDE = 5
ALARM_INDEX_HEAT = 7
ALARM_INDEX_WATER = 8
ALARM_INDEX_ACCESS_CONTROL = 9
ALARM_INDEX_HOME_SECURITY = 10
ALARM_INDEX_GAS = 21

# Home Security (V2) notification events.
ALARM_EVENT_HOME_SECURITY_CLEAR = 0
ALARM_EVENT_HOME_SECURITY_TAMPER = 3
ALARM_EVENT_HOME_SECURITY_MOTION = 8

SWITCH_COLOR_INDEX_COLOR = 0
SWITCH_COLOR_INDEX_INDEX = 1
SWITCH_COLOR_INDEX_CHANNELS = 2

# Color Switch capability bits.
COLOR_CHANNEL_WARM_WHITE = 0
COLOR_CHANNEL_COLD_WHITE = 1
COLOR_CHANNEL_RED = 2
COLOR_CHANNEL_GREEN = 3
COLOR_CHANNEL_BLUE = 4

THERMOSTAT_INDEX_MODE = 0
THERMOSTAT_INDEX_OPERATING_STATE = 0
THERMOSTAT_SETPOINT_INDEX_HEATING = 1
THERMOSTAT_SETPOINT_INDEX_COOLING = 2
THERMOSTAT_INDEX_FAN_MODE = 0
THERMOSTAT_INDEX_FAN_STATE = 0

WAKE_UP_INDEX_INTERVAL = 0
WAKE_UP_INDEX_MIN_INTERVAL = 1
WAKE_UP_INDEX_MAX_INTERVAL = 2

# The multilevel switch range is 0-99, and 99 means "fully on".
LEVEL_MAX_RAW = 99

CONTROLLER_NODE_ID = 1


class ThingType(StrEnum):
    THING = "thing"
    ON_OFF_SWITCH = "onOffSwitch"
    MULTI_LEVEL_SWITCH = "multiLevelSwitch"
    SMART_PLUG = "smartPlug"
    BINARY_SENSOR = "binarySensor"
    MULTI_LEVEL_SENSOR = "multiLevelSensor"
    ON_OFF_COLOR_LIGHT = "onOffColorLight"
    DIMMABLE_COLOR_LIGHT = "dimmableColorLight"
    PUSH_BUTTON = "pushButton"
    LOCK = "lock"
    THERMOSTAT = "thermostat"
    ALARM = "alarm"
