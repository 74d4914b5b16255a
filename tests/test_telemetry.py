"""Tests for telemetry record building and dual-channel delivery."""

from __future__ import annotations

import json

from fakes import FakeResponse, FakeSession, FakeSupervisor, connection_error, quiet
from kitchen_pi.danger import evaluate
from kitchen_pi.system_state import ActuatorState, SensorSnapshot
from kitchen_pi.telemetry import TelemetryPublisher, build_record

URL = "https://example.supabase.co/rest/v1/sensors"


def _snap(gas: int = 100, temp=25.04, hum=40.0) -> SensorSnapshot:
    return SensorSnapshot(gas_level=gas, flame_reading=4000, temperature_c=temp, humidity_pct=hum, timestamp=0.0)


def _publisher(supervisor: FakeSupervisor, session: FakeSession, url: str = URL) -> TelemetryPublisher:
    return TelemetryPublisher(
        supervisor,
        http_url=url,
        http_api_key="anon-key",
        http_timeout_sec=2.5,
        session=session,
        logger=quiet,
    )


def test_record_fields() -> None:
    snap = _snap(gas=2500)
    record = build_record(snap, evaluate(snap), ActuatorState(True, True, 180))
    assert record.to_dict() == {
        "temp": 25.0,
        "hum": 40.0,
        "gas": 2500,
        "flame": 4000,
        "led": 1,
        "buzzer": 1,
        "servo": 180,
        "status": "DANGER - Gas - Door Open",
    }


def test_unavailable_reading_is_null_not_zero() -> None:
    snap = _snap(temp=None, hum=None)
    record = build_record(snap, evaluate(snap), ActuatorState())
    body = json.loads(record.to_json())
    assert body["temp"] is None
    assert body["hum"] is None
    assert '"temp":null' in record.to_json()
    assert record.status == "All Safe"


def test_nan_never_reaches_the_wire() -> None:
    snap = _snap(temp=float("nan"))
    record = build_record(snap, evaluate(snap), ActuatorState())
    assert json.loads(record.to_json())["temp"] is None


def test_publish_uses_both_channels() -> None:
    sup, session = FakeSupervisor(), FakeSession()
    pub = _publisher(sup, session)
    snap = _snap(gas=2500)
    record = pub.publish(snap, evaluate(snap), ActuatorState(True, True, 180))

    assert [t for t, _ in sup.published] == ["sensors/data", "kitchen/alert"]
    assert json.loads(sup.published[0][1]) == record.to_dict()
    assert sup.published[1][1] == "Danger Detected!"

    assert len(session.posts) == 1
    post = session.posts[0]
    assert post["url"] == URL
    assert json.loads(post["data"]) == record.to_dict()
    assert post["headers"] == {
        "Content-Type": "application/json",
        "apikey": "anon-key",
        "Authorization": "Bearer anon-key",
    }
    assert post["timeout"] == 2.5
    assert pub.last_record == record


def test_http_still_attempted_when_mqtt_disconnected() -> None:
    sup, session = FakeSupervisor(connected=False), FakeSession()
    pub = _publisher(sup, session)
    snap = _snap()
    pub.publish(snap, evaluate(snap), ActuatorState())
    assert sup.published == []
    assert len(session.posts) == 1


def test_mqtt_error_does_not_block_http() -> None:
    sup, session = FakeSupervisor(raise_on_publish=True), FakeSession()
    pub = _publisher(sup, session)
    snap = _snap()
    pub.publish(snap, evaluate(snap), ActuatorState())
    assert len(session.posts) == 1


def test_http_failure_does_not_block_mqtt_or_raise() -> None:
    sup, session = FakeSupervisor(), FakeSession(error=connection_error())
    pub = _publisher(sup, session)
    snap = _snap()
    record = pub.publish(snap, evaluate(snap), ActuatorState())
    assert record.status == "All Safe"
    assert len(sup.published) == 2


def test_non_2xx_is_soft_failure() -> None:
    session = FakeSession(FakeResponse(401, '{"message":"Invalid API key"}'))
    pub = _publisher(FakeSupervisor(), session)
    assert pub.post_http("{}") is False
    session.response = FakeResponse(201)
    assert pub.post_http("{}") is True


def test_http_disabled_without_url() -> None:
    session = FakeSession()
    pub = _publisher(FakeSupervisor(), session, url="")
    snap = _snap()
    pub.publish(snap, evaluate(snap), ActuatorState())
    assert session.posts == []
