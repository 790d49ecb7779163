"""A ring of sixteen RGB LEDs that shows the state of four buttons."""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from .controllers import DisplayState
from .events import BlankAll, DisplayCommand, ShowState, UnBlankAll

RGB = tuple[int, int, int]
WritePixels = Callable[[Sequence[RGB]], object]

NUM_LEDS = 16

_INITIAL_COLOR: RGB = (1, 1, 1)
_BLANK_COLOR: RGB = (0, 0, 0)

_LEDS_FOR_BUTTON = {
    2: (14, 15, 0, 1),
    0: (2, 3, 4, 5),
    1: (6, 7, 8, 9),
    3: (10, 11, 12, 13),
}

_STATE_COLORS: dict[DisplayState, RGB] = {
    DisplayState.HARD_OFF: (0, 0, 0),
    DisplayState.ERROR: (1, 0, 0),
    DisplayState.UNKNOWN: (1, 0, 0),
    DisplayState.ON: (0, 1, 0),
    DisplayState.OFF: (0, 0, 1),
    DisplayState.ON_OTHER: (0, 1, 1),
}


def state_color(state: DisplayState) -> RGB:
    """Colour used to show ``state``."""
    return _STATE_COLORS[state]


class LedDisplay:
    """Keeps the LED colours and writes them out as display commands arrive."""

    def __init__(self, write: WritePixels) -> None:
        self._write = write
        self._pixels: list[RGB] = [_INITIAL_COLOR] * NUM_LEDS
        self.blank = False
        self._write(list(self._pixels))

    @property
    def pixels(self) -> tuple[RGB, ...]:
        """Colours currently held for each LED, whether or not blanked."""
        return tuple(self._pixels)

    def handle(self, command: DisplayCommand) -> None:
        """Apply one display command."""
        match command:
            case ShowState(state=state, id_in_page=id_in_page):
                leds = _LEDS_FOR_BUTTON.get(id_in_page)
                if leds is None:
                    return
                color = state_color(state)
                for led in leds:
                    self._pixels[led] = color
                if not self.blank:
                    self._write(list(self._pixels))
            case BlankAll():
                self.blank = True
                self._write([_BLANK_COLOR] * NUM_LEDS)
            case UnBlankAll():
                self.blank = False
                self._write(list(self._pixels))
            case _:
                pass

    def run(self, commands: Iterable[DisplayCommand]) -> None:
        """Apply commands until the iterable is exhausted."""
        for command in commands:
            self.handle(command)