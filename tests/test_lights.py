import logging

import pytest

from robotica_remote.controllers import Action, CommonConfig, DisplayState, Icon
from robotica_remote.lights import LightConfig, LightController


def light(action=Action.TOGGLE, **values):
    common = CommonConfig(
        name="Brian Auto", topic_substr="Brian/Light", action=action, icon=Icon.LIGHT
    )
    controller = LightConfig(common=common, scene="auto", priority=100).create_controller()
    labels = {s.topic.rsplit("/", 1)[1]: s.label for s in controller.subscriptions()}
    for key in ("power", "scenes", "priorities"):
        if values.get(key) is not None:
            controller.process_message(labels[key], values[key])
    return controller


def test_subscriptions_icon_and_name():
    controller = light()
    assert isinstance(controller, LightController)
    assert [s.topic for s in controller.subscriptions()] == [
        "state/Brian/Light/power",
        "state/Brian/Light/scenes",
        "state/Brian/Light/priorities",
    ]
    assert len({s.label for s in controller.subscriptions()}) == 3
    assert controller.icon() is Icon.LIGHT
    assert controller.name() == "Brian Auto"


@pytest.mark.parametrize("action", [Action.TOGGLE, Action.TURN_ON])
@pytest.mark.parametrize(
    "power, scenes, expected",
    [
        (None, None, DisplayState.UNKNOWN),
        ("HARD_OFF", None, DisplayState.HARD_OFF),
        ("ON", None, DisplayState.ON_OTHER),
        ("OFF", None, DisplayState.OFF),
        ("ON", '["auto"]', DisplayState.ON),
        ("ON", '["other"]', DisplayState.ON_OTHER),
        ("ON", "[]", DisplayState.ON_OTHER),
        ("OFF", '["auto"]', DisplayState.ON),
        ("STRANGE", None, DisplayState.UNKNOWN),
        ("STRANGE", "[]", DisplayState.OFF),
    ],
)
def test_display_state_by_scene(action, power, scenes, expected):
    assert light(action, power=power, scenes=scenes).display_state() is expected


@pytest.mark.parametrize(
    "power, scenes, priorities, expected",
    [
        (None, None, None, DisplayState.UNKNOWN),
        ("HARD_OFF", None, None, DisplayState.HARD_OFF),
        ("ON", None, None, DisplayState.OFF),
        ("OFF", None, None, DisplayState.ON),
        ("ON", '["a"]', None, DisplayState.UNKNOWN),
        ("ON", '["a"]', "[100]", DisplayState.OFF),
        ("ON", '["a"]', "[50]", DisplayState.ON),
    ],
)
def test_display_state_turn_off(power, scenes, priorities, expected):
    controller = light(Action.TURN_OFF, power=power, scenes=scenes, priorities=priorities)
    assert controller.display_state() is expected


@pytest.mark.parametrize(
    "action, field, bad, expected",
    [
        (Action.TOGGLE, "scenes", "not json", DisplayState.ON),
        (Action.TOGGLE, "scenes", '["a", 1]', DisplayState.ON),
        (Action.TOGGLE, "scenes", '{"a": 1}', DisplayState.ON),
        (Action.TURN_OFF, "priorities", "[true]", DisplayState.OFF),
        (Action.TURN_OFF, "priorities", '["x"]', DisplayState.OFF),
        (Action.TURN_OFF, "priorities", "[1.5]", DisplayState.OFF),
        (Action.TURN_OFF, "priorities", "[99999999999]", DisplayState.OFF),
    ],
)
def test_invalid_values_are_logged_and_ignored(caplog, action, field, bad, expected):
    controller = light(action, power="ON", scenes='["auto"]', priorities="[100]")
    [sub] = [s for s in controller.subscriptions() if s.topic.endswith(field)]
    with caplog.at_level(logging.ERROR):
        controller.process_message(sub.label, bad)
    assert f"Invalid {field} value" in caplog.text
    assert controller.display_state() is expected


def test_invalid_label_is_logged(caplog):
    controller = light()
    with caplog.at_level(logging.ERROR):
        controller.process_message(42, "ON")
    assert "Invalid message label 42" in caplog.text
    assert controller.display_state() is DisplayState.UNKNOWN


def test_disconnect_forgets_state():
    controller = light(power="ON", scenes='["auto"]', priorities="[100]")
    assert controller.display_state() is DisplayState.ON
    controller.process_disconnected()
    assert controller.display_state() is DisplayState.UNKNOWN


@pytest.mark.parametrize(
    "action, power, scenes, expected",
    [
        (Action.TOGGLE, "ON", '["auto"]', {"scene": "auto", "priority": 100, "action": "turn_off"}),
        (Action.TOGGLE, "OFF", "[]", {"scene": "auto", "priority": 100}),
        (Action.TURN_OFF, None, None, {"scene": "auto", "priority": 100, "action": "turn_off"}),
        (Action.TURN_ON, "ON", '["auto"]', {"scene": "auto", "priority": 100}),
    ],
)
def test_press_commands(action, power, scenes, expected):
    [command] = light(action, power=power, scenes=scenes).press_commands()
    assert command.topic == "command/Brian/Light"
    assert command.message == expected