"""Controller for lights driven by scenes and priorities."""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Any

from .controllers import (
    Action,
    Command,
    CommonConfig,
    Controller,
    DisplayState,
    Icon,
    Subscription,
    make_topic,
)

logger = logging.getLogger(__name__)

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


class _MsgType(enum.IntEnum):
    POWER = 0
    SCENES = 1
    PRIORITIES = 2


@dataclass(frozen=True)
class LightConfig:
    """Configuration of a light button."""

    common: CommonConfig
    scene: str
    priority: int

    def create_controller(self) -> LightController:
        return LightController(self)


def _parse_strings(data: str) -> list[str]:
    value = json.loads(data)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError("expected a list of strings")
    return value


def _parse_priorities(data: str) -> list[int]:
    value: Any = json.loads(data)
    if not isinstance(value, list):
        raise ValueError("expected a list of integers")
    for item in value:
        if not isinstance(item, int) or isinstance(item, bool):
            raise ValueError("expected a list of integers")
        if not _I32_MIN <= item <= _I32_MAX:
            raise ValueError(f"priority {item} out of range")
    return value


class LightController(Controller):
    """Follows a light's power, active scenes and active priorities."""

    def __init__(self, config: LightConfig) -> None:
        self._config = config
        self._power: str | None = None
        self._scenes: list[str] | None = None
        self._priorities: list[int] | None = None

    @property
    def _common(self) -> CommonConfig:
        return self._config.common

    def subscriptions(self) -> list[Subscription]:
        return [
            Subscription(
                make_topic("state", self._common.topic_substr, kind.name.lower()), kind
            )
            for kind in _MsgType
        ]

    def process_message(self, label: int, data: str) -> None:
        try:
            kind = _MsgType(label)
        except ValueError:
            logger.error("Invalid message label %s", label)
            return

        if kind is _MsgType.POWER:
            self._power = data
            return
        try:
            if kind is _MsgType.SCENES:
                self._scenes = _parse_strings(data)
            else:
                self._priorities = _parse_priorities(data)
        except ValueError as err:
            logger.error("Invalid %s value %s: %s", kind.name.lower(), data, err)

    def process_disconnected(self) -> None:
        self._power = None
        self._scenes = None
        self._priorities = None

    def display_state(self) -> DisplayState:
        power = self._power
        if power is None:
            return DisplayState.UNKNOWN
        if power == "HARD_OFF":
            return DisplayState.HARD_OFF

        turn_off = self._common.action is Action.TURN_OFF
        if not self._scenes and power in ("ON", "OFF"):
            if turn_off:
                return DisplayState.OFF if power == "ON" else DisplayState.ON
            return DisplayState.ON_OTHER if power == "ON" else DisplayState.OFF
        return self._state_by_priority() if turn_off else self._state_by_scene()

    def _state_by_scene(self) -> DisplayState:
        scenes = self._scenes
        if scenes is None:
            return DisplayState.UNKNOWN
        if self._config.scene in scenes:
            return DisplayState.ON
        return DisplayState.ON_OTHER if scenes else DisplayState.OFF

    def _state_by_priority(self) -> DisplayState:
        if self._priorities is None:
            return DisplayState.UNKNOWN
        if self._config.priority in self._priorities:
            return DisplayState.OFF
        return DisplayState.ON

    def press_commands(self) -> list[Command]:
        message: dict[str, Any] = {
            "scene": self._config.scene,
            "priority": self._config.priority,
        }
        action = self._common.action
        if action is Action.TURN_OFF or (
            action is Action.TOGGLE and self.display_state() is DisplayState.ON
        ):
            message["action"] = "turn_off"
        return [Command(f"command/{self._common.topic_substr}", message)]

    def icon(self) -> Icon:
        return self._common.icon

    def name(self) -> str:
        return self._common.name