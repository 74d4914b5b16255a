# kitchen_pi/mqtt_gateway.py

import threading
import time
from typing import Callable, Dict, List, Optional, Sequence

import paho.mqtt.client as mqtt

from kitchen_pi.system_state import ConnectionState


def _topic(base: str, suffix: str) -> str:
    base = base.rstrip("/")
    suffix = suffix.lstrip("/")
    if not base:
        return suffix
    return f"{base}/{suffix}" if suffix else base


class ConnectError(Exception):
    pass


class ConnectionSupervisor:
    """Owns the MQTT session and its ConnectionState.

    ensure_connected() is called once per control cycle. Connecting and
    subscribing to every control topic is one unit: either all of it succeeds
    or the session is torn down and the state stays DISCONNECTED. Failed
    attempts back off exponentially; while a delay is pending the call returns
    immediately so the control loop keeps running offline.
    """

    def __init__(
        self,
        host: str,
        port: int,
        keepalive_sec: int,
        control_topics: Sequence[str],
        *,
        base_topic: str = "",
        client_id: str = "kitchen-pi",
        username: str = "",
        password: str = "",
        tls: bool = False,
        availability_topic: str = "kitchen/status",
        connect_timeout_sec: float = 3.0,
        retry_min_sec: float = 1.0,
        retry_max_sec: float = 30.0,
        client_factory: Optional[Callable[[], object]] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: Callable[[str], None] = print,
    ):
        self._host = host
        self._port = port
        self._keepalive = keepalive_sec
        self._base = base_topic.rstrip("/")
        self._control_topics = list(control_topics)
        self._availability = availability_topic
        self._timeout = connect_timeout_sec
        self._retry_min = retry_min_sec
        self._retry_max = retry_max_sec
        self._clock = clock
        self._log = logger

        self._state = ConnectionState.DISCONNECTED
        self._lock = threading.Lock()
        self._retry_delay = retry_min_sec
        self._next_attempt_at = 0.0
        self._attempts = 0

        self._connack = threading.Event()
        self._connack_rc = None
        self._subacks: Dict[int, List] = {}
        self._suback_cond = threading.Condition()

        self._on_command: Optional[Callable[[str, str], None]] = None

        if client_factory is None:
            self._client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
            self._client.enable_logger()
            if username:
                self._client.username_pw_set(username, password or None)
            if tls:
                self._client.tls_set()
            self._client.connect_timeout = connect_timeout_sec
        else:
            self._client = client_factory()

        self._client.will_set(self.topic(self._availability), payload="offline", retain=True)
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._client.on_subscribe = self._on_subscribe
        self._client.on_message = self._on_message

    # --- public -----------------------------------------------------------

    def topic(self, suffix: str) -> str:
        return _topic(self._base, suffix)

    def set_command_handler(
        self, handler: Callable[[str, str], None], topics: Optional[Sequence[str]] = None
    ) -> None:
        """Route control messages to handler. ``topics`` replaces the subscription set from the next connect."""
        self._on_command = handler
        if topics is not None:
            with self._lock:
                self._control_topics = list(topics)

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def ensure_connected(self) -> bool:
        with self._lock:
            state = self._state
        if state is ConnectionState.CONNECTED:
            if self._client.is_connected():
                return True
            self._mark_disconnected("liveness check failed")

        if self._clock() < self._next_attempt_at:
            return False
        return self._attempt()

    def publish(self, suffix: str, payload: str, retain: bool = False) -> bool:
        if not self.is_connected():
            return False
        try:
            info = self._client.publish(self.topic(suffix), payload, qos=0, retain=retain)
        except Exception as e:
            self._mark_disconnected(f"publish to {suffix} raised: {e}")
            return False
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._mark_disconnected(f"publish to {suffix} failed rc={info.rc}")
            return False
        return True

    def stop(self) -> None:
        if self.is_connected():
            self.publish(self._availability, "offline", retain=True)
        self._teardown()
        with self._lock:
            self._state = ConnectionState.DISCONNECTED
        self._log("[MQTT] Stopped")

    # --- connect / subscribe unit ------------------------------------------

    def _attempt(self) -> bool:
        with self._lock:
            self._state = ConnectionState.CONNECTING
            self._attempts += 1
            attempt = self._attempts
        self._log(f"[MQTT] Attempting connection to {self._host}:{self._port} (attempt {attempt})")

        self._teardown()
        self._connack.clear()
        self._connack_rc = None
        try:
            self._client.connect(self._host, self._port, self._keepalive)
            self._client.loop_start()
            if not self._connack.wait(self._timeout):
                raise ConnectError(f"no CONNACK within {self._timeout:.1f}s")
            if self._connack_rc.is_failure:
                raise ConnectError(f"broker refused connection rc={self._connack_rc}")
            self._subscribe_all()
        except Exception as e:
            self._teardown()
            with self._lock:
                self._state = ConnectionState.DISCONNECTED
                delay = self._retry_delay
                self._next_attempt_at = self._clock() + delay
                self._retry_delay = min(self._retry_max, delay * 2)
            self._log(f"[MQTT] Connect failed: {e}. Retrying in {delay:.0f}s")
            return False

        with self._lock:
            self._state = ConnectionState.CONNECTED
            self._retry_delay = self._retry_min
            self._next_attempt_at = 0.0
        self._log("[MQTT] Connected")
        self.publish(self._availability, "online", retain=True)
        return True

    def _subscribe_all(self) -> None:
        with self._lock:
            control = list(self._control_topics)
        if not control:
            return
        topics = [(self.topic(t), 0) for t in control]
        result, mid = self._client.subscribe(topics)
        if result != mqtt.MQTT_ERR_SUCCESS:
            raise ConnectError(f"subscribe failed rc={result}")

        deadline = time.monotonic() + self._timeout
        with self._suback_cond:
            while mid not in self._subacks:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ConnectError(f"no SUBACK within {self._timeout:.1f}s")
                self._suback_cond.wait(remaining)
            codes = self._subacks.pop(mid)

        if len(codes) != len(topics) or any(rc.is_failure for rc in codes):
            raise ConnectError(f"broker rejected subscriptions: {[str(rc) for rc in codes]}")

    def _teardown(self) -> None:
        try:
            self._client.disconnect()
            self._client.loop_stop()
        except Exception as e:
            self._log(f"[MQTT] Teardown error: {e}")
        with self._suback_cond:
            self._subacks.clear()

    def _mark_disconnected(self, reason: str) -> None:
        with self._lock:
            if self._state is ConnectionState.DISCONNECTED:
                return
            self._state = ConnectionState.DISCONNECTED
        self._log(f"[MQTT] Disconnected: {reason}")

    # --- paho callbacks (network thread) -----------------------------------

    def _on_connect(self, _client, _userdata, _flags, reason_code, _properties=None):
        self._connack_rc = reason_code
        self._connack.set()

    def _on_disconnect(self, _client, _userdata, _flags, reason_code, _properties=None):
        if self.state is ConnectionState.CONNECTED:
            self._mark_disconnected(f"rc={reason_code} (will retry)")

    def _on_subscribe(self, _client, _userdata, mid, reason_code_list, _properties=None):
        with self._suback_cond:
            self._subacks[mid] = list(reason_code_list)
            self._suback_cond.notify_all()

    def _on_message(self, _client, _userdata, msg):
        payload = msg.payload.decode("utf-8", errors="ignore")
        topic = msg.topic
        prefix = self.topic("")
        if prefix:
            if not topic.startswith(prefix + "/"):
                return
            topic = topic[len(prefix) + 1 :]

        if self._on_command is None:
            return
        try:
            self._on_command(topic, payload)
        except Exception as e:
            # Never let a handler crash the network thread.
            self._log(f"[MQTT] Command handler error: {e}")
