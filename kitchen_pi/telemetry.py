# kitchen_pi/telemetry.py

import json
import math
import threading
from dataclasses import asdict, dataclass
from typing import Callable, Optional, Union

import requests

from kitchen_pi.danger import alert_text, status_text
from kitchen_pi.system_state import ActuatorState, DangerVerdict, SensorSnapshot


@dataclass(frozen=True)
class TelemetryRecord:
    temp: Optional[float]
    hum: Optional[float]
    gas: int
    flame: Union[int, bool]
    led: int
    buzzer: int
    servo: int
    status: str

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        # allow_nan=False: an unavailable reading must go out as null, never NaN.
        return json.dumps(self.to_dict(), separators=(",", ":"), allow_nan=False)


def _round(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return round(value, 1)


def build_record(snapshot: SensorSnapshot, verdict: DangerVerdict, actuators: ActuatorState) -> TelemetryRecord:
    return TelemetryRecord(
        temp=_round(snapshot.temperature_c),
        hum=_round(snapshot.humidity_pct),
        gas=snapshot.gas_level,
        flame=snapshot.flame_reading,
        led=int(actuators.alarm_on),
        buzzer=int(actuators.buzzer_on),
        servo=actuators.door_angle,
        status=status_text(verdict),
    )


class TelemetryPublisher:
    """Pushes one record per cycle over MQTT and HTTP; each channel fails on its own."""

    def __init__(
        self,
        supervisor,
        *,
        sensors_topic: str = "sensors/data",
        alert_topic: str = "kitchen/alert",
        http_url: str = "",
        http_api_key: str = "",
        http_timeout_sec: float = 4.0,
        session: Optional[requests.Session] = None,
        logger: Callable[[str], None] = print,
    ):
        self._supervisor = supervisor
        self._sensors_topic = sensors_topic
        self._alert_topic = alert_topic
        self._url = http_url
        self._api_key = http_api_key
        self._timeout = http_timeout_sec
        self._session = session if session is not None else requests.Session()
        self._log = logger

        self._last: Optional[TelemetryRecord] = None
        self._lock = threading.Lock()

    @property
    def last_record(self) -> Optional[TelemetryRecord]:
        with self._lock:
            return self._last

    def publish(self, snapshot: SensorSnapshot, verdict: DangerVerdict, actuators: ActuatorState) -> TelemetryRecord:
        record = build_record(snapshot, verdict, actuators)
        with self._lock:
            self._last = record

        body = record.to_json()
        self.publish_mqtt(body, verdict)
        self.post_http(body)
        return record

    def publish_mqtt(self, body: str, verdict: DangerVerdict) -> bool:
        if not self._supervisor.is_connected():
            self._log("[MQTT] Offline, telemetry not published this cycle")
            return False
        try:
            ok = self._supervisor.publish(self._sensors_topic, body)
            if ok:
                ok = self._supervisor.publish(self._alert_topic, alert_text(verdict))
        except Exception as e:
            self._log(f"[MQTT] Telemetry publish error: {e}")
            return False
        if not ok:
            self._log("[MQTT] Telemetry publish failed")
        return ok

    def post_http(self, body: str) -> bool:
        if not self._url:
            return False
        headers = {
            "Content-Type": "application/json",
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }
        try:
            r = self._session.post(self._url, data=body, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            self._log(f"[HTTP] Error sending telemetry: {e}")
            return False

        self._log(f"[HTTP] Response code: {r.status_code}")
        if not 200 <= r.status_code < 300:
            self._log(f"[HTTP] Response: {r.text[:200]}")
            return False
        return True
