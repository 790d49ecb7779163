import queue
import time

import pytest

from robotica_remote.buttons import Active, Debouncer, configure_button, watch_button
from robotica_remote.events import ButtonId, ButtonPress, ButtonRelease, Value


class FakePin:
    def __init__(self, level=None):
        self.level = level
        self.callbacks = []

    def subscribe(self, callback):
        self.callbacks.append(callback)

    def fire(self, value):
        for callback in self.callbacks:
            callback(value)

    def is_high(self):
        return self.level is Value.HIGH

    def is_low(self):
        return self.level is Value.LOW


class BrokenPin(FakePin):
    def is_high(self):
        raise OSError("bus error")

    def is_low(self):
        raise OSError("bus error")


@pytest.fixture
def debouncers():
    made = []
    yield made
    for item in made:
        item.close()


def make(debouncers, pin, ms):
    debouncer = Debouncer(pin, ms)
    debouncers.append(debouncer)
    return debouncer


def test_watch_button_active_low():
    pin = FakePin()
    sent = []
    button = ButtonId.physical(1)
    watch_button(pin, Active.LOW, button, sent.append)
    pin.fire(Value.LOW)
    pin.fire(Value.LOW)
    pin.fire(Value.HIGH)
    assert sent == [ButtonPress(button), ButtonRelease(button)]


def test_watch_button_active_high():
    pin = FakePin()
    sent = []
    button = ButtonId.page_up()
    watch_button(pin, Active.HIGH, button, sent.append)
    pin.fire(Value.HIGH)
    pin.fire(Value.LOW)
    pin.fire(Value.LOW)
    assert sent == [ButtonPress(button), ButtonRelease(button)]


def test_watch_button_first_value_always_reported():
    pin = FakePin()
    sent = []
    button = ButtonId.physical(0)
    watch_button(pin, Active.LOW, button, sent.append)
    pin.fire(Value.HIGH)
    assert sent == [ButtonRelease(button)]


def test_debouncer_reads_pin_before_any_input(debouncers):
    debouncer = make(debouncers, FakePin(Value.HIGH), 20)
    assert debouncer.is_high() is True
    assert debouncer.is_low() is False


def test_debouncer_unreadable_pin_is_neither(debouncers):
    debouncer = make(debouncers, BrokenPin(), 20)
    assert debouncer.is_high() is False
    assert debouncer.is_low() is False


def test_debouncer_reports_first_edge(debouncers):
    pin = FakePin(Value.LOW)
    debouncer = make(debouncers, pin, 20)
    events = queue.Queue()
    debouncer.subscribe(events.put)
    pin.fire(Value.LOW)
    assert events.get(timeout=2) is Value.LOW
    assert debouncer.is_low() is True


def test_debouncer_reports_settled_level_after_timer(debouncers):
    pin = FakePin(Value.HIGH)
    debouncer = make(debouncers, pin, 20)
    events = queue.Queue()
    debouncer.subscribe(events.put)
    pin.fire(Value.LOW)
    assert events.get(timeout=2) is Value.LOW
    assert events.get(timeout=2) is Value.HIGH
    assert debouncer.is_high() is True


def test_debouncer_ignores_bounces(debouncers):
    pin = FakePin(Value.LOW)
    debouncer = make(debouncers, pin, 300)
    events = queue.Queue()
    debouncer.subscribe(events.put)
    pin.fire(Value.LOW)
    pin.fire(Value.HIGH)
    pin.fire(Value.LOW)
    assert events.get(timeout=2) is Value.LOW
    with pytest.raises(queue.Empty):
        events.get(timeout=0.8)


def test_debouncer_accepts_input_after_settling(debouncers):
    pin = FakePin(Value.LOW)
    debouncer = make(debouncers, pin, 20)
    events = queue.Queue()
    debouncer.subscribe(events.put)
    pin.fire(Value.LOW)
    assert events.get(timeout=2) is Value.LOW
    time.sleep(0.2)
    pin.level = Value.HIGH
    pin.fire(Value.HIGH)
    assert events.get(timeout=2) is Value.HIGH


def test_debouncer_closed_raises():
    debouncer = Debouncer(FakePin(Value.LOW), 20)
    debouncer.close()
    with pytest.raises(RuntimeError):
        debouncer.is_high()


def test_debouncer_context_manager_closes():
    with Debouncer(FakePin(Value.LOW), 20) as debouncer:
        assert debouncer.is_low() is True
    with pytest.raises(RuntimeError):
        debouncer.subscribe(print)


@pytest.mark.parametrize("ms", [-1, 0x10000])
def test_debouncer_rejects_bad_time(ms):
    with pytest.raises(ValueError):
        Debouncer(FakePin(), ms)


def test_configure_button_press_and_release(debouncers):
    pin = FakePin(Value.LOW)
    messages = queue.Queue()
    button = ButtonId.physical(0)
    debouncers.append(configure_button(pin, messages.put, button))
    pin.fire(Value.LOW)
    assert messages.get(timeout=2) == ButtonPress(button)
    pin.level = Value.HIGH
    assert messages.get(timeout=2) == ButtonRelease(button)