"""Tests for danger evaluation and status text."""

from __future__ import annotations

from kitchen_pi.danger import ALL_SAFE, alert_text, evaluate, status_text
from kitchen_pi.system_state import DangerCause, FlameMode, SensorSnapshot, Thresholds

NO_FLAME = 4000  # analog: high reading means no flame


def _snap(gas: int = 100, flame: int = NO_FLAME, temp=25.0, hum=40.0) -> SensorSnapshot:
    return SensorSnapshot(gas_level=gas, flame_reading=flame, temperature_c=temp, humidity_pct=hum, timestamp=0.0)


def test_gas_threshold_is_strict() -> None:
    t = Thresholds(gas=2000)
    assert evaluate(_snap(gas=2000), t).is_danger is False
    verdict = evaluate(_snap(gas=2001), t)
    assert verdict.is_danger is True
    assert verdict.causes == frozenset({DangerCause.GAS})


def test_heat_threshold_is_strict() -> None:
    t = Thresholds(temperature_c=40.0)
    assert evaluate(_snap(temp=40.0), t).is_danger is False
    assert evaluate(_snap(temp=40.1), t).causes == frozenset({DangerCause.HEAT})


def test_analog_flame_uses_inverted_logic() -> None:
    t = Thresholds(flame_mode=FlameMode.ANALOG, flame_low=1000)
    assert evaluate(_snap(flame=999), t).causes == frozenset({DangerCause.FLAME})
    assert evaluate(_snap(flame=1000), t).is_danger is False


def test_digital_flame_is_high_active() -> None:
    t = Thresholds(flame_mode=FlameMode.DIGITAL)
    assert evaluate(_snap(flame=1), t).causes == frozenset({DangerCause.FLAME})
    assert evaluate(_snap(flame=0), t).is_danger is False


def test_unavailable_temperature_is_excluded_not_danger() -> None:
    verdict = evaluate(_snap(temp=None, hum=None))
    assert verdict.is_danger is False
    assert verdict.causes == frozenset()


def test_evaluate_is_pure() -> None:
    danger = _snap(gas=3000, flame=10, temp=55.0)
    safe = _snap()
    first = evaluate(danger)
    evaluate(safe)
    evaluate(safe)
    assert evaluate(danger) == first
    assert first.causes == frozenset({DangerCause.GAS, DangerCause.FLAME, DangerCause.HEAT})


def test_status_text() -> None:
    assert status_text(evaluate(_snap())) == ALL_SAFE
    text = status_text(evaluate(_snap(gas=2500, temp=45.0)))
    assert text == "DANGER - Gas Heat - Door Open"
    assert ALL_SAFE not in text


def test_alert_text() -> None:
    assert alert_text(evaluate(_snap(gas=2500))) == "Danger Detected!"
    assert alert_text(evaluate(_snap())) == "All Safe"


def test_flame_mode_parse() -> None:
    assert FlameMode.parse(" Digital ") is FlameMode.DIGITAL
    try:
        FlameMode.parse("ir")
    except ValueError as e:
        assert "ir" in str(e)
    else:
        raise AssertionError("expected ValueError")
