"""Central-scene buttons: press, hold, release and slide gestures."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from zwthings.core.binding import PropertyBinding
from zwthings.core.codecs import Codec
from zwthings.core.constants import CommandClass, ThingType
from zwthings.core.model import PropertyDescr
from zwthings.core.node import Node

if TYPE_CHECKING:
    from zwthings.core.classifier import Classifier

LOGGER = logging.getLogger(__name__)

TICKS_PER_SECOND = 4
LEVEL_STEP = 10

# Central scene catalog positions.
SCENE_INACTIVE = 0
SCENE_PRESSED = 1
SCENE_RELEASED = 2
SCENE_HELD = 3

# WallMote Quad slide reports live in configuration parameters 9 and 10.
SLIDE_START_PARAM = 9
SLIDE_END_PARAM = 10
SLIDE_DOWN = 1
# Measured slide distance from one end of a button to the other.
DEFAULT_SLIDE_TRAVEL = 160

QUAD_LABELS = ("Top Left", "Top Right", "Bottom Left", "Bottom Right")


@dataclass
class SceneButton:
    number: int
    label: str
    press_action: str | None
    move_dir: int
    on_binding: PropertyBinding | None
    level_binding: PropertyBinding | None
    long_pressed: bool = False


@dataclass(frozen=True)
class Slide:
    button: int
    direction: int
    position: int

    @classmethod
    def unpack(cls, packed: int) -> Slide:
        return cls(
            button=(packed >> 24) & 0xFF,
            direction=(packed >> 16) & 0xFF,
            position=packed & 0xFFFF,
        )


def init_central_scene(classifier: Classifier, node: Node) -> None:
    node.thing_type = ThingType.PUSH_BUTTON
    node.capabilities[:] = ["OnOffSwitch", "MultiLevelSwitch", "PushButton"]
    if node.name in ("", node.id, node.default_name):
        node.name = f"{node.id}-button"

    scene_count = node.scene_count()
    LOGGER.debug("initCentralScene: %s sceneCount = %d", node.id, scene_count)

    if scene_count == 2:
        # One button is on/bright and the other off/dim.
        on_binding = _add_on_property(classifier, node, 0)
        level_binding = _add_level_property(classifier, node, 0)
        add_scene_button(
            classifier,
            node,
            SceneButton(1, "Top", "on", 1, on_binding, level_binding),
        )
        add_scene_button(
            classifier,
            node,
            SceneButton(2, "Bottom", "off", -1, on_binding, level_binding),
        )
    elif node.overrides.scene_layout == "quad":
        buttons: dict[int, SceneButton] = {}
        for number, label in enumerate(QUAD_LABELS, start=1):
            on_binding = _add_on_property(classifier, node, number)
            level_binding = _add_level_property(classifier, node, number)
            # Slides move the level, so holding a button doesn't.
            button = SceneButton(number, label, "toggle", 0, on_binding, level_binding)
            add_scene_button(classifier, node, button)
            buttons[number] = button
        _add_slide_properties(classifier, node, buttons)
        classifier.add_config_list(node, 1, "Touch Sounds")
        classifier.add_config_list(node, 2, "Touch Vibration")
        classifier.add_config_rgbx(node, 5, "Touch Color")
    else:
        for number in range(1, scene_count + 1):
            add_scene_button(
                classifier,
                node,
                SceneButton(number, f"Button {number}", None, 0, None, None),
            )


def _add_on_property(classifier: Classifier, node: Node, number: int) -> PropertyBinding | None:
    if number < 2:
        name, descr = "on", PropertyDescr(type="boolean", at_type="OnOffProperty", label="On/Off", read_only=True)
    else:
        name = f"on{number}"
        descr = PropertyDescr(type="boolean", at_type="BooleanProperty", label=f"On/Off {number}", read_only=True)
    return classifier.add_property(node, name, descr, default=False)


def _add_level_property(classifier: Classifier, node: Node, number: int) -> PropertyBinding | None:
    if number < 2:
        name, at_type, label = "level", "LevelProperty", "Level"
    else:
        name, at_type, label = f"level{number}", None, f"Level {number}"
    descr = PropertyDescr(
        type="number",
        at_type=at_type,
        label=label,
        unit="percent",
        minimum=0,
        maximum=100,
        read_only=True,
    )
    return classifier.add_property(node, name, descr, default=0)


def add_scene_button(classifier: Classifier, node: Node, button: SceneButton) -> PropertyBinding | None:
    key = node.find_value_key(CommandClass.CENTRAL_SCENE, 1, button.number)
    if key is None:
        LOGGER.error("addCentralSceneProperty: %s has no scene value for button %d", node.id, button.number)
        return None
    binding = classifier.add_property(
        node,
        f"_scene{button.number}",
        PropertyDescr(type="number", read_only=True),
        key,
        decoder=Codec.SCENE,
    )
    if binding is None:
        return None

    def _scene_updated(updated: PropertyBinding) -> None:
        handle_scene_value(node, button, updated.value)

    binding.updated = _scene_updated

    label = button.label
    node.add_event(
        f"{button.number}-pressed",
        {"@type": "PressedEvent", "description": f"{label} button pressed and released quickly"},
    )
    node.add_event(
        f"{button.number}-released",
        {"@type": "ReleasedEvent", "description": f"{label} button released after being held"},
    )
    node.add_event(
        f"{button.number}-longPressed",
        {"@type": "LongPressedEvent", "description": f"{label} button pressed and held"},
    )
    return binding


def handle_scene_value(node: Node, button: SceneButton, value: int | None) -> None:
    LOGGER.debug("handleCentralSceneButton: node%d button %d value: %s", node.node_id, button.number, value)
    if value == SCENE_PRESSED:
        on_binding = button.on_binding
        if on_binding is not None and button.press_action is not None:
            if button.press_action == "on":
                new_value = True
            elif button.press_action == "off":
                new_value = False
            else:
                new_value = not on_binding.value
            node.set_property_value(on_binding, new_value)
        node.notify_event(f"{button.number}-pressed")
    elif value == SCENE_RELEASED:
        if button.move_dir and button.level_binding is not None:
            stop_level_ramp(button.level_binding)
        button.long_pressed = False
        node.notify_event(f"{button.number}-released")
    elif value == SCENE_HELD:
        # Held buttons keep reporting; only the first report is an event.
        if button.move_dir and button.level_binding is not None:
            start_level_ramp(node, button.level_binding, button.move_dir)
        if not button.long_pressed:
            button.long_pressed = True
            node.notify_event(f"{button.number}-longPressed")


def start_level_ramp(node: Node, binding: PropertyBinding, move_dir: int) -> None:
    """Nudge ``binding`` towards 0 or 100 until it gets there or is stopped."""
    if binding.timer is not None:
        return
    delta = move_dir * LEVEL_STEP
    if _step_level(node, binding, delta):
        binding.start_timer(1 / TICKS_PER_SECOND, _ramp_tick, node, binding, delta)


def stop_level_ramp(binding: PropertyBinding) -> None:
    binding.cancel_timer()


def _ramp_tick(node: Node, binding: PropertyBinding, delta: int) -> None:
    if _step_level(node, binding, delta):
        binding.start_timer(1 / TICKS_PER_SECOND, _ramp_tick, node, binding, delta)


def _step_level(node: Node, binding: PropertyBinding, delta: float) -> bool:
    """Apply one step; return True while there is room to keep moving."""
    current = binding.value or 0
    new_value = min(max(round(current + delta), 0), 100)
    LOGGER.debug(
        "centralSceneLevelTimerCallback: node%d property: %s value: %s delta: %s newValue: %s",
        node.node_id,
        binding.name,
        current,
        delta,
        new_value,
    )
    if new_value != current:
        node.set_property_value(binding, new_value)
    if new_value == current or (new_value == 0 and delta < 0) or (new_value == 100 and delta > 0):
        return False
    return True


def _add_slide_properties(classifier: Classifier, node: Node, buttons: dict[int, SceneButton]) -> None:
    start_key = node.find_value_key(CommandClass.CONFIGURATION, 1, SLIDE_START_PARAM)
    end_key = node.find_value_key(CommandClass.CONFIGURATION, 1, SLIDE_END_PARAM)
    if start_key is None or end_key is None:
        return

    start = classifier.add_property(node, "_slideStart", PropertyDescr(type="number", read_only=True), start_key)
    end = classifier.add_property(node, "_slideEnd", PropertyDescr(type="number", read_only=True), end_key)
    if start is None or end is None:
        return
    travel = node.overrides.slide_travel or DEFAULT_SLIDE_TRAVEL

    def _slide_end_updated(_binding: PropertyBinding) -> None:
        handle_slide_end(node, buttons, start.value, end.value, travel)

    end.updated = _slide_end_updated


def slide_delta(start: Slide, end: Slide, travel: int) -> float:
    """Percentage change for a slide; negative when sliding down."""
    delta = abs(end.position - start.position) * 100 / travel
    return -delta if end.direction == SLIDE_DOWN else delta


def handle_slide_end(
    node: Node,
    buttons: dict[int, SceneButton],
    start_value: int | None,
    end_value: int | None,
    travel: int,
) -> None:
    if start_value is None or end_value is None:
        return
    try:
        start = Slide.unpack(int(start_value))
        end = Slide.unpack(int(end_value))
    except (OverflowError, TypeError, ValueError):
        LOGGER.warning("node%d: unexpected slide values %r/%r", node.node_id, start_value, end_value)
        return

    button = buttons.get(end.button)
    if button is None or button.level_binding is None:
        LOGGER.warning("node%d: slide on unknown button %d", node.node_id, end.button)
        return
    if start.button != end.button:
        LOGGER.debug("node%d: slide started on button %d ended on %d", node.node_id, start.button, end.button)

    delta = slide_delta(start, end, travel)
    level = button.level_binding
    new_value = min(max(round((level.value or 0) + delta), 0), 100)
    LOGGER.debug("handleSlideEnd: node%d button %d delta: %.1f level: %s", node.node_id, end.button, delta, new_value)
    if new_value != level.value:
        node.set_property_value(level, new_value)
