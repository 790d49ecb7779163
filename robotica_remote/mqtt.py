"""MQTT connection that routes received messages to labelled subscribers."""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import unquote, urlsplit

import paho.mqtt.client as mqtt_client

from .events import Label, Message, MqttConnect, MqttDisconnect, MqttReceived

logger = logging.getLogger(__name__)

SendMessage = Callable[[Message], Any]

_KEEP_ALIVE = 60
_QOS_AT_MOST_ONCE = 0
_DEFAULT_PORTS = {"mqtt": 1883, "tcp": 1883, "mqtts": 8883, "ssl": 8883}
_TLS_SCHEMES = {"mqtts", "ssl"}


def unique_id() -> str:
    """Return this machine's hardware address as twelve lower-case hex digits."""
    return format(uuid.getnode(), "012x")


class SubscriptionTable:
    """Maps topics to the labels of everything subscribed to them."""

    def __init__(self) -> None:
        self._table: dict[str, list[Label]] = {}

    def add(self, topic: str, label: Label) -> bool:
        """Record a subscription; return True if the topic was not known before."""
        labels = self._table.get(topic)
        if labels is None:
            self._table[topic] = [label]
            return True
        labels.append(label)
        return False

    def labels(self, topic: str) -> list[Label]:
        """Labels subscribed to ``topic``, in subscription order."""
        return list(self._table.get(topic, ()))

    def topics(self) -> list[str]:
        """Every subscribed topic."""
        return list(self._table)

    def route(self, topic: str, data: str) -> list[MqttReceived]:
        """One received message for each subscription to ``topic``."""
        return [MqttReceived(topic, data, label) for label in self._table.get(topic, ())]


@dataclass(frozen=True)
class _Connected:
    pass


@dataclass(frozen=True)
class _Disconnected:
    pass


@dataclass(frozen=True)
class _Received:
    topic: str
    data: str


@dataclass(frozen=True)
class _Subscribe:
    topic: str
    label: Label


@dataclass(frozen=True)
class _Publish:
    topic: str
    retain: bool
    data: str


@dataclass(frozen=True)
class _Stop:
    pass


def _result_code(result: object) -> int:
    if isinstance(result, tuple) and result:
        return int(result[0])
    return int(getattr(result, "rc", 0) or 0)


def _parse_url(url: str) -> tuple[str, int, bool, str | None, str | None]:
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise ValueError(f"unsupported MQTT URL scheme in {url!r}")
    if not parts.hostname:
        raise ValueError(f"MQTT URL {url!r} has no host")
    port = parts.port if parts.port is not None else _DEFAULT_PORTS[scheme]
    username = unquote(parts.username) if parts.username is not None else None
    password = unquote(parts.password) if parts.password is not None else None
    return parts.hostname, port, scheme in _TLS_SCHEMES, username, password


def _new_client(client_id: str) -> mqtt_client.Client:
    api_version = getattr(mqtt_client, "CallbackAPIVersion", None)
    if api_version is not None:
        return mqtt_client.Client(api_version.VERSION2, client_id=client_id)
    return mqtt_client.Client(client_id=client_id)


class Mqtt:
    """Owns an MQTT client and serialises all work on one worker thread."""

    def __init__(self, client: Any, send: SendMessage) -> None:
        self._client = client
        self._send = send
        self._subscriptions = SubscriptionTable()
        self._inbox: queue.Queue[object] = queue.Queue()
        self._closed = False
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    @classmethod
    def connect(cls, url: str, send: SendMessage) -> Mqtt:
        """Start connecting to the broker at ``url``; events are passed to ``send``."""
        host, port, tls, username, password = _parse_url(url)
        client = _new_client(f"robotica-remote_{unique_id()}")
        if username is not None:
            client.username_pw_set(username, password)
        if tls:
            client.tls_set()
        mqtt = cls(client, send)
        client.connect_async(host, port, keepalive=_KEEP_ALIVE)
        client.loop_start()
        return mqtt

    def subscribe(self, topic: str, label: Label) -> None:
        """Deliver messages on ``topic`` tagged with ``label``."""
        self._post(_Subscribe(topic, label))

    def publish(self, topic: str, retain: bool, data: str) -> None:
        """Publish ``data`` on ``topic``."""
        self._post(_Publish(topic, retain, data))

    def close(self) -> None:
        """Finish queued work, stop the worker and disconnect."""
        if self._closed:
            return
        self._closed = True
        self._inbox.put(_Stop())
        self._thread.join()
        self._client.loop_stop()
        self._client.disconnect()

    def __enter__(self) -> Mqtt:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _post(self, command: object) -> None:
        if self._closed:
            raise RuntimeError("the MQTT connection is closed")
        self._inbox.put(command)

    def _on_connect(self, *_args: object) -> None:
        self._inbox.put(_Connected())

    def _on_disconnect(self, *_args: object) -> None:
        self._inbox.put(_Disconnected())

    def _on_message(self, _client: object, _userdata: object, message: Any) -> None:
        try:
            data = bytes(message.payload).decode("utf-8")
        except UnicodeDecodeError:
            logger.error("Dropping message on %s: payload is not UTF-8", message.topic)
            return
        self._inbox.put(_Received(message.topic, data))

    def _subscribe_client(self, topic: str) -> None:
        rc = _result_code(self._client.subscribe(topic, _QOS_AT_MOST_ONCE))
        if rc != 0:
            logger.error("Cannot subscribe to %s: error %s", topic, rc)

    def _run(self) -> None:
        while True:
            match self._inbox.get():
                case _Stop():
                    return
                case _Connected():
                    for topic in self._subscriptions.topics():
                        self._subscribe_client(topic)
                    self._send(MqttConnect())
                case _Disconnected():
                    self._send(MqttDisconnect())
                case _Received(topic, data):
                    for message in self._subscriptions.route(topic, data):
                        self._send(message)
                case _Subscribe(topic, label):
                    if self._subscriptions.add(topic, label):
                        self._subscribe_client(topic)
                case _Publish(topic, retain, data):
                    logger.debug("Publishing %s %s", topic, data)
                    info = self._client.publish(
                        topic, data.encode("utf-8"), qos=_QOS_AT_MOST_ONCE, retain=retain
                    )
                    rc = _result_code(info)
                    if rc != 0:
                        logger.error("Cannot publish to %s: error %s", topic, rc)