"""Debouncing for capacitive touch pads, which only signal the start of a touch."""

from __future__ import annotations

import enum

from .buttons import Active, SendMessage, ValueCallback, _duration_ms, _Pin, _PinActor, watch_button
from .events import ButtonId, Value


class _State(enum.Enum):
    INACTIVE = enum.auto()
    DEBOUNCE = enum.auto()
    ACTIVE_POLL = enum.auto()


class TouchDebouncer:
    """Reports a touch at once, then polls the pad until it is released."""

    def __init__(self, pin: _Pin, debounce_time_ms: int, poll_time_ms: int) -> None:
        self._debounce_time = _duration_ms(debounce_time_ms)
        self._poll_time = _duration_ms(poll_time_ms)
        self._state = _State.INACTIVE
        self._raw_value: Value | None = None
        self._actor = _PinActor(pin, self._on_input, self._on_timer)

    def subscribe(self, callback: ValueCallback) -> None:
        """Call ``callback`` with each debounced level."""
        self._actor.subscribe(callback)

    def is_high(self) -> bool:
        return self._actor.current_value() is Value.HIGH

    def is_low(self) -> bool:
        return self._actor.current_value() is Value.LOW

    def close(self) -> None:
        """Stop the worker thread; later calls raise RuntimeError."""
        self._actor.close()

    def __enter__(self) -> TouchDebouncer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _on_input(self, actor: _PinActor, _value: Value) -> None:
        if not actor.pin_is_low():
            return
        if self._state is _State.INACTIVE:
            actor.value = Value.LOW
            actor.notify(Value.LOW)
            actor.start_timer(self._debounce_time)
            self._state = _State.DEBOUNCE
        self._raw_value = Value.LOW

    def _on_timer(self, actor: _PinActor) -> None:
        if self._state is _State.DEBOUNCE:
            if actor.value != self._raw_value:
                actor.value = self._raw_value
                actor.notify(actor.value)
            self._state = _State.ACTIVE_POLL

        if self._state is _State.ACTIVE_POLL:
            if actor.pin_is_high():
                self._state = _State.INACTIVE
                actor.value = Value.HIGH
                actor.notify(Value.HIGH)
            else:
                actor.start_timer(self._poll_time)


def configure_touch_button(pin: _Pin, send: SendMessage, button_id: ButtonId) -> TouchDebouncer:
    """Turn a touch pad into a button that reports presses through ``send``."""
    debounced = TouchDebouncer(pin, 30, 100)
    watch_button(debounced, Active.LOW, button_id, send)
    return debounced