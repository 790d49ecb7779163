"""Values passed between the input, network, display and main loop."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from .controllers import DisplayState, Icon


class Value(enum.Enum):
    """Level of a digital input."""

    LOW = "Low"
    HIGH = "High"

    def __str__(self) -> str:
        return self.value


class ButtonKind(enum.Enum):
    """Kinds of button the remote understands."""

    PHYSICAL = enum.auto()
    CONTROLLER = enum.auto()
    PAGE_UP = enum.auto()
    PAGE_DOWN = enum.auto()
    NOT_A_BUTTON = enum.auto()


_INDEXED_KINDS = (ButtonKind.PHYSICAL, ButtonKind.CONTROLLER)


@dataclass(frozen=True)
class ButtonId:
    """Identifies a button; physical and controller buttons carry an index."""

    kind: ButtonKind
    index: int | None = None

    def __post_init__(self) -> None:
        if self.kind in _INDEXED_KINDS:
            if (
                not isinstance(self.index, int)
                or isinstance(self.index, bool)
                or self.index < 0
            ):
                raise ValueError(f"{self.kind.name} button needs a non-negative index")
        elif self.index is not None:
            raise ValueError(f"{self.kind.name} button takes no index")

    @classmethod
    def physical(cls, index: int) -> ButtonId:
        return cls(ButtonKind.PHYSICAL, index)

    @classmethod
    def controller(cls, index: int) -> ButtonId:
        return cls(ButtonKind.CONTROLLER, index)

    @classmethod
    def page_up(cls) -> ButtonId:
        return cls(ButtonKind.PAGE_UP)

    @classmethod
    def page_down(cls) -> ButtonId:
        return cls(ButtonKind.PAGE_DOWN)

    @classmethod
    def not_a_button(cls) -> ButtonId:
        return cls(ButtonKind.NOT_A_BUTTON)


@dataclass(frozen=True)
class ButtonLabel:
    """Routes an MQTT message to a controller's subscription."""

    controller: int
    label: int


@dataclass(frozen=True)
class NightStatusLabel:
    """Routes an MQTT message to the night status handler."""


Label = Union[ButtonLabel, NightStatusLabel]


@dataclass(frozen=True)
class MqttConnect:
    """The broker connection came up."""


@dataclass(frozen=True)
class MqttDisconnect:
    """The broker connection went down."""


@dataclass(frozen=True)
class MqttReceived:
    """A message arrived on a subscribed topic."""

    topic: str
    data: str
    label: Label


@dataclass(frozen=True)
class ButtonPress:
    button: ButtonId


@dataclass(frozen=True)
class ButtonRelease:
    button: ButtonId


@dataclass(frozen=True)
class BlankDisplays:
    """The blanking timer expired."""


Message = Union[
    MqttConnect, MqttDisconnect, MqttReceived, ButtonPress, ButtonRelease, BlankDisplays
]


@dataclass(frozen=True)
class Started:
    """The remote has finished starting up."""


@dataclass(frozen=True)
class ShowState:
    state: DisplayState
    icon: Icon
    id_in_page: int
    name: str


@dataclass(frozen=True)
class ShowNone:
    id_in_page: int


@dataclass(frozen=True)
class BlankAll:
    """Turn every display off."""


@dataclass(frozen=True)
class UnBlankAll:
    """Turn every display on."""


@dataclass(frozen=True)
class ShowPage:
    page: int


@dataclass(frozen=True)
class ButtonPressed:
    id_in_page: int


@dataclass(frozen=True)
class ButtonReleased:
    id_in_page: int


DisplayCommand = Union[
    Started,
    ShowState,
    ShowNone,
    BlankAll,
    UnBlankAll,
    ShowPage,
    ButtonPressed,
    ButtonReleased,
]