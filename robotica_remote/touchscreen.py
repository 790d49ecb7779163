"""Maps touch screen contacts onto on-screen buttons."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from itertools import product
from typing import Any, Callable, Iterable, Sequence

from .events import ButtonId, ButtonPress, ButtonRelease, Message

_SCREEN_HEIGHT = 320
_BUTTON_WIDTH = 128
_BUTTON_HEIGHT = 64
_COLUMNS = (10, 128 + 20, 256 + 30)
_ROWS = (10, 64 + 20, 64 * 2 + 30, 64 * 3 + 40)


@dataclass(frozen=True)
class Rectangle:
    """An axis-aligned rectangle given by its top left corner and size."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("rectangle size cannot be negative")

    def bottom_right(self) -> tuple[int, int] | None:
        """The last pixel inside the rectangle, or None if it is empty."""
        if self.width == 0 or self.height == 0:
            return None
        return (self.x + self.width - 1, self.y + self.height - 1)


@dataclass(frozen=True)
class ButtonInfo:
    """Where an on-screen button is and which button it is."""

    position: Rectangle
    button_id: ButtonId


@dataclass(frozen=True)
class TouchPoint:
    """A contact reported by the touch controller."""

    x: int
    y: int
    touch_type: Any = None


def translate(point: TouchPoint) -> TouchPoint:
    """Rotate a touch controller point into display coordinates."""
    return TouchPoint(
        x=point.y,
        y=max(0, _SCREEN_HEIGHT - point.x),
        touch_type=point.touch_type,
    )


def button_for_point(buttons: Iterable[ButtonInfo], point: TouchPoint) -> ButtonInfo | None:
    """Return the first button containing ``point``, if any."""
    for button in buttons:
        corner = button.position.bottom_right()
        if corner is None:
            continue
        left, top = button.position.x, button.position.y
        if left <= point.x < corner[0] and top <= point.y < corner[1]:
            return button
    return None


def makerfab_buttons() -> list[ButtonInfo]:
    """The twelve buttons of the touch screen board, in a three-column grid."""
    return [
        ButtonInfo(
            Rectangle(x, y, _BUTTON_WIDTH, _BUTTON_HEIGHT),
            ButtonId.physical(index),
        )
        for index, (y, x) in enumerate(product(_ROWS, _COLUMNS))
    ]


class TouchTracker:
    """Turns successive touch readings into press and release messages."""

    def __init__(self, buttons: Sequence[ButtonInfo]) -> None:
        self._buttons = list(buttons)
        self.pressed: ButtonId | None = None

    def update(self, point: TouchPoint | None) -> list[Message]:
        """Feed the current raw contact (or None) and return messages to send."""
        if point is None:
            current = None
        else:
            hit = button_for_point(self._buttons, translate(point))
            current = hit.button_id if hit is not None else ButtonId.not_a_button()

        messages: list[Message] = []
        if current != self.pressed:
            if self.pressed is not None:
                messages.append(ButtonRelease(self.pressed))
            if current is not None:
                messages.append(ButtonPress(current))
        self.pressed = current
        return messages


def run_touchscreen(
    read_touch: Callable[[], TouchPoint | None],
    buttons: Sequence[ButtonInfo],
    send: Callable[[Message], Any],
    stop: threading.Event,
    interval: float = 0.1,
) -> None:
    """Poll the touch screen until ``stop`` is set, sending button messages."""
    tracker = TouchTracker(buttons)
    while not stop.is_set():
        for message in tracker.update(read_touch()):
            send(message)
        stop.wait(interval)