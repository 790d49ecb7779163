"""Debounced push buttons that report presses and releases."""

from __future__ import annotations

import enum
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .events import ButtonId, ButtonPress, ButtonRelease, Message, Value

logger = logging.getLogger(__name__)

ValueCallback = Callable[[Value], None]
SendMessage = Callable[[Message], Any]

_MAX_MS = 0xFFFF


class _Pin(Protocol):
    def subscribe(self, callback: ValueCallback) -> None: ...

    def is_high(self) -> bool: ...

    def is_low(self) -> bool: ...


class Active(enum.Enum):
    """Input level at which a button counts as pressed."""

    LOW = Value.LOW
    HIGH = Value.HIGH


def watch_button(pin: _Pin, active: Active, button_id: ButtonId, send: SendMessage) -> None:
    """Send a press or release message whenever the level of ``pin`` changes."""
    last: Value | None = None

    def on_value(value: Value) -> None:
        nonlocal last
        if value is last:
            return
        if value is active.value:
            send(ButtonPress(button_id))
        else:
            send(ButtonRelease(button_id))
        last = value

    pin.subscribe(on_value)


def _duration_ms(milliseconds: int) -> float:
    if not 0 <= milliseconds <= _MAX_MS:
        raise ValueError(f"time {milliseconds} ms is outside 0..{_MAX_MS}")
    return milliseconds / 1000


@dataclass(frozen=True)
class _Input:
    value: Value


@dataclass(frozen=True)
class _Subscribe:
    callback: ValueCallback


@dataclass(frozen=True)
class _GetValue:
    reply: queue.Queue


@dataclass(frozen=True)
class _TimerFired:
    generation: int


@dataclass(frozen=True)
class _Stop:
    pass


def _level(check: Callable[[], bool]) -> bool:
    try:
        return bool(check())
    except Exception:
        return False


InputHandler = Callable[["_PinActor", Value], None]
TimerHandler = Callable[["_PinActor"], None]


class _PinActor:
    """Serialises pin events, timer expiries and queries on one worker thread."""

    def __init__(self, pin: _Pin, on_input: InputHandler, on_timer: TimerHandler) -> None:
        self.pin = pin
        self.value: Value | None = None
        self._on_input = on_input
        self._on_timer = on_timer
        self._subscriber: ValueCallback | None = None
        self._inbox: queue.Queue[object] = queue.Queue()
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._closed = False
        pin.subscribe(lambda value: self._inbox.put(_Input(value)))
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def subscribe(self, callback: ValueCallback) -> None:
        self._post(_Subscribe(callback))

    def current_value(self) -> Value | None:
        reply: queue.Queue[Value | None] = queue.Queue(maxsize=1)
        self._post(_GetValue(reply))
        return reply.get()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._inbox.put(_Stop())
        self._thread.join()
        self.cancel_timer()

    def pin_is_high(self) -> bool:
        return _level(self.pin.is_high)

    def pin_is_low(self) -> bool:
        return _level(self.pin.is_low)

    def read_pin(self) -> Value | None:
        if self.pin_is_high():
            return Value.HIGH
        if self.pin_is_low():
            return Value.LOW
        return None

    def notify(self, value: Value | None) -> None:
        if value is None or self._subscriber is None:
            return
        try:
            self._subscriber(value)
        except Exception:
            logger.exception("Button subscriber failed")

    def start_timer(self, seconds: float) -> None:
        self.cancel_timer()
        self._generation += 1
        timer = threading.Timer(seconds, self._inbox.put, args=(_TimerFired(self._generation),))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _post(self, message: object) -> None:
        if self._closed:
            raise RuntimeError("the debouncer is closed")
        self._inbox.put(message)

    def _run(self) -> None:
        while True:
            match self._inbox.get():
                case _Stop():
                    return
                case _Input(value):
                    self._on_input(self, value)
                case _Subscribe(callback):
                    self._subscriber = callback
                case _GetValue(reply):
                    reply.put(self.value if self.value is not None else self.read_pin())
                case _TimerFired(generation) if generation == self._generation:
                    self._timer = None
                    self._on_timer(self)


class Debouncer:
    """Reports the first edge at once, then ignores the pin until it has settled."""

    def __init__(self, pin: _Pin, debounce_time_ms: int) -> None:
        self._debounce_time = _duration_ms(debounce_time_ms)
        self._timer_set = False
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

    def __enter__(self) -> Debouncer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _on_input(self, actor: _PinActor, value: Value) -> None:
        if self._timer_set:
            return
        actor.value = value
        actor.notify(value)
        actor.start_timer(self._debounce_time)
        self._timer_set = True

    def _on_timer(self, actor: _PinActor) -> None:
        raw = actor.read_pin()
        if actor.value != raw:
            actor.value = raw
            actor.notify(raw)
        self._timer_set = False


def configure_button(pin: _Pin, send: SendMessage, button_id: ButtonId) -> Debouncer:
    """Debounce an active-low push button and report its presses through ``send``."""
    debounced = Debouncer(pin, 200)
    watch_button(debounced, Active.LOW, button_id, send)
    return debounced