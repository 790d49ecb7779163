"""Controller for a music play list."""

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

_PLAY_LIST_LABEL = 0


@dataclass(frozen=True)
class MusicConfig:
    """Configuration of a music button."""

    common: CommonConfig
    play_list: str

    def create_controller(self) -> MusicController:
        return MusicController(self)


class MusicController(Controller):
    """Follows which play list, if any, is playing."""

    def __init__(self, config: MusicConfig) -> None:
        self._config = config
        self._play_list: str | None = None

    @property
    def _common(self) -> CommonConfig:
        return self._config.common

    def subscriptions(self) -> list[Subscription]:
        topic = make_topic("state", self._common.topic_substr, "play_list")
        return [Subscription(topic, _PLAY_LIST_LABEL)]

    def process_message(self, label: int, data: str) -> None:
        if label != _PLAY_LIST_LABEL:
            logger.error("Invalid message label %s", label)
            return
        self._play_list = data

    def process_disconnected(self) -> None:
        self._play_list = None

    def display_state(self) -> DisplayState:
        play_list = self._play_list
        if play_list is None:
            state = DisplayState.UNKNOWN
        elif play_list == "ERROR":
            state = DisplayState.ERROR
        elif play_list == "STOP":
            state = DisplayState.OFF
        elif play_list == self._config.play_list:
            state = DisplayState.ON
        else:
            state = DisplayState.ON_OTHER
        return display_state_for_action(state, self._common.action)

    def press_commands(self) -> list[Command]:
        action = self._common.action
        if action is Action.TURN_ON:
            play = True
        elif action is Action.TURN_OFF:
            play = False
        else:
            play = self.display_state() is not DisplayState.ON

        music = {"play_list": self._config.play_list} if play else {"stop": True}
        return [Command(f"command/{self._common.topic_substr}", {"music": music})]

    def icon(self) -> Icon:
        return self._common.icon

    def name(self) -> str:
        return self._common.name