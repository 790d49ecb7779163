"""Core types shared by every button controller."""

from __future__ import annotations

import enum
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Command:
    """A message to publish on an MQTT topic when a button is pressed."""

    topic: str
    message: dict[str, Any]

    def payload(self) -> str:
        """Return the message as compact JSON with sorted keys."""
        return json.dumps(self.message, separators=(",", ":"), sort_keys=True)


class Action(enum.Enum):
    """What pressing a button should do."""

    TURN_ON = enum.auto()
    TURN_OFF = enum.auto()
    TOGGLE = enum.auto()


@dataclass(frozen=True)
class Subscription:
    """A topic a controller listens to, tagged with a controller-specific label."""

    topic: str
    label: int


class DisplayState(enum.Enum):
    """State of a button as shown to the user."""

    HARD_OFF = enum.auto()
    ERROR = enum.auto()
    UNKNOWN = enum.auto()
    ON = enum.auto()
    OFF = enum.auto()
    ON_OTHER = enum.auto()


class Icon(enum.Enum):
    """Picture drawn for a button."""

    LIGHT = enum.auto()
    FAN = enum.auto()
    WAKE_UP = enum.auto()
    TV = enum.auto()


@dataclass(frozen=True)
class CommonConfig:
    """Settings shared by every kind of controller."""

    name: str
    topic_substr: str
    action: Action
    icon: Icon


class Controller(ABC):
    """Tracks the state of one device and turns presses into commands."""

    @abstractmethod
    def subscriptions(self) -> list[Subscription]:
        """Topics this controller needs to follow."""

    @abstractmethod
    def process_disconnected(self) -> None:
        """Forget all known state after losing the broker connection."""

    @abstractmethod
    def process_message(self, label: int, data: str) -> None:
        """Update state from a message received for one of the subscriptions."""

    @abstractmethod
    def display_state(self) -> DisplayState:
        """Current state to show on the button."""

    @abstractmethod
    def press_commands(self) -> list[Command]:
        """Commands to publish when the button is pressed."""

    @abstractmethod
    def icon(self) -> Icon:
        """Icon of the button."""

    @abstractmethod
    def name(self) -> str:
        """Name of the button."""


_INVERTED = {
    DisplayState.ON: DisplayState.OFF,
    DisplayState.OFF: DisplayState.ON,
    DisplayState.ON_OTHER: DisplayState.OFF,
}


def display_state_for_action(state: DisplayState, action: Action) -> DisplayState:
    """Adjust a device state for a button whose action is to turn the device off."""
    if action is Action.TURN_OFF:
        return _INVERTED.get(state, state)
    return state


def make_topic(*args: str) -> str:
    """Join topic parts with slashes."""
    return "/".join(args)