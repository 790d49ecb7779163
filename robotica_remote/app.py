"""The remote's main loop: routes network, button and timer events."""

from __future__ import annotations

import argparse
import enum
import logging
import os
import queue
import sys
import threading
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence, TextIO

from . import config
from .controllers import Controller, DisplayState
from .events import (
    BlankAll,
    BlankDisplays,
    ButtonId,
    ButtonKind,
    ButtonLabel,
    ButtonPress,
    ButtonPressed,
    ButtonRelease,
    ButtonReleased,
    DisplayCommand,
    Message,
    MqttConnect,
    MqttDisconnect,
    MqttReceived,
    NightStatusLabel,
    ShowNone,
    ShowPage,
    ShowState,
    Started,
    UnBlankAll,
)

logger = logging.getLogger(__name__)

BLANK_SECONDS = 10

BOARD_CONTROLLERS_PER_PAGE = {
    "robotica": 4,
    "lca2021_badge": 2,
    "makerfab": 12,
}

SendDisplay = Callable[[DisplayCommand], Any]


class _Mqtt(Protocol):
    def subscribe(self, topic: str, label: Any) -> None: ...

    def publish(self, topic: str, retain: bool, data: str) -> None: ...


class _Timer(Protocol):
    def start(self, seconds: float) -> None: ...

    def cancel(self) -> None: ...


class TimeOfDay(enum.Enum):
    DAY = enum.auto()
    NIGHT = enum.auto()


@dataclass
class RequestedDisplayStatus:
    """What the displays should be doing, according to the inputs seen so far."""

    time_of_day: TimeOfDay = TimeOfDay.DAY
    forced_on: bool = False
    night_timer: bool = False

    def timer_required(self) -> bool:
        return self.night_timer

    def display_required(self) -> bool:
        return self.time_of_day is TimeOfDay.DAY or self.forced_on or self.night_timer


@dataclass
class ActualDisplayStatus:
    """What the displays and blanking timer are actually doing."""

    timer_on: bool = False
    display_on: bool = True


class BlankTimer:
    """A restartable one-shot timer that calls ``callback`` when it expires."""

    def __init__(self, callback: Callable[[], Any]) -> None:
        self._callback = callback
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def start(self, seconds: float) -> None:
        """Start the timer, replacing any pending one."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(seconds, self._callback)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        """Stop the pending timer, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


def controller_range_for_page(page: int, per_page: int) -> range:
    """Indexes of the controllers shown on ``page``."""
    start = page * per_page
    return range(start, start + per_page)


def controllers_for_page(
    controllers: Sequence[Controller], page: int, per_page: int
) -> list[Controller | None]:
    """The controllers on ``page``, padded with None to a full page."""
    span = controller_range_for_page(page, per_page)
    shown = list(controllers[span.start : min(span.stop, len(controllers))])
    return shown + [None] * (per_page - len(shown))


def controller_to_page_id(controller_id: int, per_page: int) -> tuple[int, int]:
    """Page number and position within the page of a controller."""
    return divmod(controller_id, per_page)


def page_to_controller_id(page_num: int, id_in_page: int, per_page: int) -> int:
    """Controller index for a position on a page."""
    return page_num * per_page + id_in_page


def num_pages(controllers: Sequence[Controller], per_page: int) -> int:
    """Number of pages needed to show every controller."""
    return -(-len(controllers) // per_page)


_FORCED_ON = {
    DisplayState.OFF: False,
    DisplayState.HARD_OFF: False,
    DisplayState.ON: True,
    DisplayState.ON_OTHER: True,
}


class Remote:
    """Keeps page, blanking and controller state and reacts to messages."""

    def __init__(
        self,
        controllers: Sequence[Controller],
        mqtt: _Mqtt,
        display: SendDisplay,
        timer: _Timer,
        per_page: int,
    ) -> None:
        if per_page <= 0:
            raise ValueError("per_page must be positive")
        if not controllers:
            raise ValueError("at least one controller is required")
        self.controllers = list(controllers)
        self._mqtt = mqtt
        self._display = display
        self._timer = timer
        self.per_page = per_page
        self.requested = RequestedDisplayStatus()
        self.status = ActualDisplayStatus()
        self.page_num = 0
        self.last_page = num_pages(self.controllers, per_page) - 1

    def start(self) -> None:
        """Subscribe to every topic and draw the first page."""
        for index, controller in enumerate(self.controllers):
            for subscription in controller.subscriptions():
                logger.info("Subscribing to %s.", subscription.topic)
                self._mqtt.subscribe(subscription.topic, ButtonLabel(index, subscription.label))
        self._mqtt.subscribe(config.NIGHT_TOPIC, NightStatusLabel())

        self._do_blank(False)
        self._display(Started())
        self._display(ShowPage(self.page_num))
        self._update_displays()

    def handle(self, message: Message) -> None:
        """React to one message."""
        match message:
            case MqttReceived(data=power, label=NightStatusLabel()):
                logger.info("Got night: %s", power)
                if power == "ON":
                    self.requested.time_of_day = TimeOfDay.NIGHT
                elif power == "OFF":
                    self.requested.time_of_day = TimeOfDay.DAY
                self._do_blank(False)
            case MqttReceived(topic=topic, data=data, label=ButtonLabel(controller=cid, label=sid)):
                logger.info("Got message: %s - %s", topic, data)
                self._controller_message(cid, sid, data)
            case MqttConnect():
                logger.info("Got connected")
            case MqttDisconnect():
                logger.info("Got disconnected")
                for controller in self.controllers:
                    controller.process_disconnected()
                self._update_displays()
            case ButtonPress(button=button):
                self._button_press(button)
                self._touch_activity()
            case ButtonRelease(button=button):
                logger.info("Got button release")
                self._button_release(button)
                self._touch_activity()
            case BlankDisplays():
                logger.info("Got blank display timer")
                self.requested.night_timer = False
                self._do_blank(True)
            case _:
                raise TypeError(f"unexpected message {message!r}")

    def _controller_message(self, cid: int, sid: int, data: str) -> None:
        if not 0 <= cid < len(self.controllers):
            raise IndexError(f"controller {cid} does not exist")
        controller = self.controllers[cid]
        old_state = controller.display_state()
        controller.process_message(sid, data)
        state = controller.display_state()

        if cid == config.NIGHT_CONTROLLER:
            forced = _FORCED_ON.get(state)
            if forced is not None:
                self.requested.forced_on = forced
            self._do_blank(False)

        msg_page, id_in_page = controller_to_page_id(cid, self.per_page)
        if msg_page == self.page_num and old_state != state:
            self._update_display(id_in_page, controller, state)

    def _button_press(self, button: ButtonId) -> None:
        kind = button.kind
        if kind is ButtonKind.PHYSICAL:
            if self.status.display_on:
                cid = page_to_controller_id(self.page_num, button.index, self.per_page)
                self._press_controller(cid)
                self._display(ButtonPressed(button.index))
        elif kind is ButtonKind.CONTROLLER:
            self._press_controller(button.index)
            msg_page, id_in_page = controller_to_page_id(button.index, self.per_page)
            if msg_page == self.page_num:
                self._display(ButtonPressed(id_in_page))
        elif kind is ButtonKind.PAGE_UP:
            logger.info("got page up")
            self.page_num = min(self.page_num + 1, self.last_page)
            self._show_page()
        elif kind is ButtonKind.PAGE_DOWN:
            logger.info("got page down")
            self.page_num = max(self.page_num - 1, 0)
            self._show_page()
        else:
            logger.info("Got not a button press")

    def _button_release(self, button: ButtonId) -> None:
        if button.kind is ButtonKind.PHYSICAL:
            self._display(ButtonReleased(button.index))
        elif button.kind is ButtonKind.CONTROLLER:
            msg_page, id_in_page = controller_to_page_id(button.index, self.per_page)
            if msg_page == self.page_num:
                self._display(ButtonReleased(id_in_page))

    def _touch_activity(self) -> None:
        self.requested.night_timer = True
        self._do_blank(True)

    def _show_page(self) -> None:
        self._display(ShowPage(self.page_num))
        self._update_displays()

    def _press_controller(self, cid: int) -> None:
        logger.info("Got button %s press", cid)
        if not 0 <= cid < len(self.controllers):
            logger.error("Controller for button %s does not exist", cid)
            return
        for command in self.controllers[cid].press_commands():
            data = command.payload()
            logger.info("Send %s: %s", command.topic, data)
            self._mqtt.publish(command.topic, False, data)

    def _update_display(self, id_in_page: int, controller: Controller, state: DisplayState) -> None:
        self._display(ShowState(state, controller.icon(), id_in_page, controller.name()))

    def _update_displays(self) -> None:
        page = controllers_for_page(self.controllers, self.page_num, self.per_page)
        for id_in_page, controller in enumerate(page):
            if controller is None:
                self._display(ShowNone(id_in_page))
            else:
                self._update_display(id_in_page, controller, controller.display_state())

    def _do_blank(self, force_timer_reset: bool) -> None:
        timer_required = self.requested.timer_required()
        display_required = self.requested.display_required()
        status = self.status

        if timer_required and (not status.timer_on or force_timer_reset):
            logger.info("resetting blank timer" if status.timer_on else "starting blank timer")
            self._timer.cancel()
            self._timer.start(BLANK_SECONDS)
            status.timer_on = True
        elif not timer_required and status.timer_on:
            logger.info("stopping blank timer")
            self._timer.cancel()
            status.timer_on = False

        if display_required and not status.display_on:
            logger.info("turning display on")
            status.display_on = True
            self._display(UnBlankAll())
        elif not display_required and status.display_on:
            logger.info("turning display off")
            status.display_on = False
            self._display(BlankAll())


def _read_buttons(stream: TextIO, inbox: queue.Queue) -> None:
    """Turn lines of input into button events: a number, 'up' or 'down'."""
    for line in stream:
        word = line.strip().lower()
        if word == "up":
            button = ButtonId.page_up()
        elif word == "down":
            button = ButtonId.page_down()
        elif word.isdigit():
            button = ButtonId.controller(int(word))
        else:
            if word:
                logger.warning("Ignoring input %r", word)
            continue
        inbox.put(ButtonPress(button))
        inbox.put(ButtonRelease(button))
    inbox.put(None)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the remote, reading button presses from standard input."""
    parser = argparse.ArgumentParser(prog="robotica-remote", description=main.__doc__)
    parser.add_argument("--mqtt-url", default=os.environ.get("MQTT_URL"))
    parser.add_argument("--board", choices=sorted(BOARD_CONTROLLERS_PER_PAGE), default="robotica")
    args = parser.parse_args(argv)
    if not args.mqtt_url:
        parser.error("an MQTT URL is required (--mqtt-url or MQTT_URL)")

    logging.basicConfig(level=logging.DEBUG)

    from .mqtt import Mqtt

    inbox: queue.Queue[Message | None] = queue.Queue()
    controllers = [c.create_controller() for c in config.controllers_config()]
    timer = BlankTimer(lambda: inbox.put(BlankDisplays()))
    mqtt = Mqtt.connect(args.mqtt_url, inbox.put)

    def show(command: DisplayCommand) -> None:
        logger.info("Display: %s", command)

    remote = Remote(controllers, mqtt, show, timer, BOARD_CONTROLLERS_PER_PAGE[args.board])
    remote.start()
    threading.Thread(target=_read_buttons, args=(sys.stdin, inbox), daemon=True).start()

    try:
        while (message := inbox.get()) is not None:
            remote.handle(message)
    finally:
        timer.cancel()
        mqtt.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())