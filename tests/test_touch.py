import queue

import pytest

from robotica_remote.events import ButtonId, ButtonPress, ButtonRelease, Value
from robotica_remote.touch import TouchDebouncer, configure_touch_button


class FakePad:
    def __init__(self, level=None):
        self.level = level
        self.callbacks = []

    def subscribe(self, callback):
        self.callbacks.append(callback)

    def fire(self, value=Value.HIGH):
        for callback in self.callbacks:
            callback(value)

    def is_high(self):
        return self.level is Value.HIGH

    def is_low(self):
        return self.level is Value.LOW


@pytest.fixture
def made():
    items = []
    yield items
    for item in items:
        item.close()


def make(made, pad):
    debouncer = TouchDebouncer(pad, 20, 20)
    made.append(debouncer)
    events = queue.Queue()
    debouncer.subscribe(events.put)
    return debouncer, events


def test_touch_then_release(made):
    pad = FakePad(Value.LOW)
    _, events = make(made, pad)
    pad.fire(Value.LOW)
    assert events.get(timeout=2) is Value.LOW
    pad.level = Value.HIGH
    assert events.get(timeout=2) is Value.HIGH


def test_event_value_is_ignored_pad_is_read(made):
    pad = FakePad(Value.LOW)
    _, events = make(made, pad)
    pad.fire(Value.HIGH)
    assert events.get(timeout=2) is Value.LOW


def test_event_while_pad_high_does_nothing(made):
    pad = FakePad(Value.HIGH)
    debouncer, events = make(made, pad)
    pad.fire()
    with pytest.raises(queue.Empty):
        events.get(timeout=0.3)
    assert debouncer.is_high() is True


def test_repeat_touches_ignored_while_held(made):
    pad = FakePad(Value.LOW)
    debouncer, events = make(made, pad)
    pad.fire()
    pad.fire()
    pad.fire()
    assert events.get(timeout=2) is Value.LOW
    with pytest.raises(queue.Empty):
        events.get(timeout=0.3)
    assert debouncer.is_low() is True
    pad.level = Value.HIGH
    assert events.get(timeout=2) is Value.HIGH
    with pytest.raises(queue.Empty):
        events.get(timeout=0.3)


def test_touch_after_release_reported_again(made):
    pad = FakePad(Value.LOW)
    _, events = make(made, pad)
    pad.fire()
    assert events.get(timeout=2) is Value.LOW
    pad.level = Value.HIGH
    assert events.get(timeout=2) is Value.HIGH
    pad.level = Value.LOW
    pad.fire()
    assert events.get(timeout=2) is Value.LOW


def test_closed_raises():
    debouncer = TouchDebouncer(FakePad(Value.LOW), 20, 20)
    debouncer.close()
    with pytest.raises(RuntimeError):
        debouncer.is_low()


@pytest.mark.parametrize("debounce, poll", [(-1, 10), (10, 0x10000)])
def test_rejects_bad_times(debounce, poll):
    with pytest.raises(ValueError):
        TouchDebouncer(FakePad(), debounce, poll)


def test_configure_touch_button(made):
    pad = FakePad(Value.LOW)
    messages = queue.Queue()
    button = ButtonId.page_up()
    made.append(configure_touch_button(pad, messages.put, button))
    pad.fire()
    assert messages.get(timeout=2) == ButtonPress(button)
    pad.level = Value.HIGH
    assert messages.get(timeout=2) == ButtonRelease(button)