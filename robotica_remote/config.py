"""The buttons this remote offers."""

from __future__ import annotations

from typing import Union

from .controllers import Action, CommonConfig, Icon
from .lights import LightConfig
from .music import MusicConfig
from .switch import SwitchConfig

NUM_CONTROLLERS = 6
NIGHT_TOPIC = "state/Brian/Night/power"
NIGHT_CONTROLLER = 0

ControllerConfig = Union[LightConfig, MusicConfig, SwitchConfig]


def _common(name: str, topic_substr: str, icon: Icon) -> CommonConfig:
    return CommonConfig(name=name, topic_substr=topic_substr, action=Action.TOGGLE, icon=icon)


def controllers_config() -> list[ControllerConfig]:
    """Return the configuration of every button, in display order."""
    return [
        LightConfig(_common("Brian Auto", "Brian/Light", Icon.LIGHT), scene="auto", priority=100),
        LightConfig(_common("Brian On", "Brian/Light", Icon.LIGHT), scene="default", priority=100),
        SwitchConfig(_common("Brian Fan", "Brian/Fan", Icon.FAN)),
        LightConfig(_common("Passage", "Passage/Light", Icon.LIGHT), scene="default", priority=100),
        MusicConfig(_common("Brian Wake-Up", "Brian/Robotica", Icon.WAKE_UP), play_list="wake_up"),
        SwitchConfig(_common("TV", "Dining/TvSwitch", Icon.TV)),
    ]