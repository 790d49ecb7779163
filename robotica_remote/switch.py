"""Controller for a simple on/off switch."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .controllers import (
    Action,
    Command,
    CommonConfig,
    Controller,
    DisplayState,
    Icon,
    Subscription,
    display_state_for_action,
    make_topic,
)

logger = logging.getLogger(__name__)

_POWER_LABEL = 0

_POWER_STATES = {
    "HARD_OFF": DisplayState.HARD_OFF,
    "ON": DisplayState.ON,
    "OFF": DisplayState.OFF,
}


@dataclass(frozen=True)
class SwitchConfig:
    """Configuration of a switch button."""

    common: CommonConfig

    def create_controller(self) -> SwitchController:
        return SwitchController(self)


class SwitchController(Controller):
    """Follows the power state of a switch."""

    def __init__(self, config: SwitchConfig) -> None:
        self._config = config
        self._power: str | None = None

    @property
    def _common(self) -> CommonConfig:
        return self._config.common

    def subscriptions(self) -> list[Subscription]:
        topic = make_topic("state", self._common.topic_substr, "power")
        return [Subscription(topic, _POWER_LABEL)]

    def process_message(self, label: int, data: str) -> None:
        if label != _POWER_LABEL:
            logger.error("Invalid message label %s", label)
            return
        self._power = data

    def process_disconnected(self) -> None:
        self._power = None

    def display_state(self) -> DisplayState:
        if self._power is None:
            state = DisplayState.UNKNOWN
        else:
            state = _POWER_STATES.get(self._power, DisplayState.ERROR)
        return display_state_for_action(state, self._common.action)

    def press_commands(self) -> list[Command]:
        action = self._common.action
        if action is Action.TURN_ON:
            verb = "turn_on"
        elif action is Action.TURN_OFF:
            verb = "turn_off"
        elif self.display_state() is DisplayState.ON:
            verb = "turn_off"
        else:
            verb = "turn_on"
        return [Command(f"command/{self._common.topic_substr}", {"action": verb})]

    def icon(self) -> Icon:
        return self._common.icon

    def name(self) -> str:
        return self._common.name