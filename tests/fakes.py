"""Test doubles for hardware, the MQTT client and the HTTP session."""

from __future__ import annotations

from types import SimpleNamespace
from typing import List, Optional, Tuple

import paho.mqtt.client as mqtt
import requests
from paho.mqtt.packettypes import PacketTypes
from paho.mqtt.reasoncodes import ReasonCode


class RecordingOutput:
    def __init__(self) -> None:
        self.calls: List[bool] = []

    def set(self, on: bool) -> None:
        self.calls.append(bool(on))


class RecordingServo:
    def __init__(self) -> None:
        self.calls: List[int] = []

    def set_angle(self, angle: int) -> None:
        self.calls.append(int(angle))


class FakeMqttClient:
    """Synchronous stand-in for paho's Client: callbacks fire inline."""

    def __init__(
        self,
        *,
        fail_connect: bool = False,
        refuse: bool = False,
        no_connack: bool = False,
        no_suback: bool = False,
        reject_topic: Optional[str] = None,
    ) -> None:
        self.fail_connect = fail_connect
        self.refuse = refuse
        self.no_connack = no_connack
        self.no_suback = no_suback
        self.reject_topic = reject_topic
        self.publish_rc = mqtt.MQTT_ERR_SUCCESS

        self.on_connect = None
        self.on_disconnect = None
        self.on_subscribe = None
        self.on_message = None

        self.will = None
        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.subscribed: List[List[Tuple[str, int]]] = []
        self.published: List[Tuple[str, str, bool]] = []
        self._mid = 0

    def will_set(self, topic, payload=None, qos=0, retain=False):
        self.will = (topic, payload, retain)

    def connect(self, host, port, keepalive):
        self.connect_calls += 1
        if self.fail_connect:
            raise ConnectionRefusedError(f"cannot reach {host}:{port}")
        return mqtt.MQTT_ERR_SUCCESS

    def loop_start(self):
        if self.no_connack:
            return mqtt.MQTT_ERR_SUCCESS
        if self.refuse:
            rc = ReasonCode(PacketTypes.CONNACK, "Not authorized")
        else:
            rc = ReasonCode(PacketTypes.CONNACK, "Success")
            self.connected = True
        self.on_connect(self, None, {}, rc, None)
        return mqtt.MQTT_ERR_SUCCESS

    def loop_stop(self):
        return mqtt.MQTT_ERR_SUCCESS

    def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False
        return mqtt.MQTT_ERR_SUCCESS

    def is_connected(self):
        return self.connected

    def subscribe(self, topics):
        self._mid += 1
        self.subscribed.append(list(topics))
        if self.no_suback:
            return mqtt.MQTT_ERR_SUCCESS, self._mid
        codes = [
            ReasonCode(PacketTypes.SUBACK, "Unspecified error" if t == self.reject_topic else "Granted QoS 0")
            for t, _qos in topics
        ]
        self.on_subscribe(self, None, self._mid, codes, None)
        return mqtt.MQTT_ERR_SUCCESS, self._mid

    def publish(self, topic, payload=None, qos=0, retain=False):
        self.published.append((topic, payload, retain))
        return SimpleNamespace(rc=self.publish_rc)

    # helpers for tests

    def deliver(self, topic: str, payload: str) -> None:
        self.on_message(self, None, SimpleNamespace(topic=topic, payload=payload.encode("utf-8")))

    def drop(self) -> None:
        self.connected = False
        self.on_disconnect(self, None, {}, ReasonCode(PacketTypes.DISCONNECT, "Unspecified error"), None)

    def published_to(self, topic: str) -> List[str]:
        return [p for t, p, _ in self.published if t == topic]


class FakeSupervisor:
    def __init__(self, connected: bool = True, raise_on_publish: bool = False) -> None:
        self.connected = connected
        self.raise_on_publish = raise_on_publish
        self.published: List[Tuple[str, str]] = []
        self.ensure_calls = 0

    def ensure_connected(self) -> bool:
        self.ensure_calls += 1
        return self.connected

    def is_connected(self) -> bool:
        return self.connected

    def publish(self, topic: str, payload: str, retain: bool = False) -> bool:
        if self.raise_on_publish:
            raise RuntimeError("socket gone")
        if not self.connected:
            return False
        self.published.append((topic, payload))
        return True


class FakeResponse:
    def __init__(self, status_code: int = 201, text: str = "") -> None:
        self.status_code = status_code
        self.text = text


class FakeSession:
    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse()
        self.error = error
        self.posts: List[dict] = []

    def post(self, url, data=None, headers=None, timeout=None):
        self.posts.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def connection_error() -> Exception:
    return requests.ConnectionError("network unreachable")


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def quiet(_msg: str) -> None:
    pass
