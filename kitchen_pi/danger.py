# kitchen_pi/danger.py

from kitchen_pi.system_state import DangerCause, DangerVerdict, FlameMode, SensorSnapshot, Thresholds

ALL_SAFE = "All Safe"


def flame_danger(reading: int, thresholds: Thresholds) -> bool:
    if thresholds.flame_mode is FlameMode.ANALOG:
        return reading < thresholds.flame_low
    return reading == 1


def evaluate(snapshot: SensorSnapshot, thresholds: Thresholds = Thresholds()) -> DangerVerdict:
    """Map one snapshot to a verdict. Unavailable readings never count as danger."""
    causes = set()
    if snapshot.gas_level > thresholds.gas:
        causes.add(DangerCause.GAS)
    if flame_danger(snapshot.flame_reading, thresholds):
        causes.add(DangerCause.FLAME)
    if snapshot.temperature_c is not None and snapshot.temperature_c > thresholds.temperature_c:
        causes.add(DangerCause.HEAT)
    return DangerVerdict(bool(causes), frozenset(causes))


def status_text(verdict: DangerVerdict) -> str:
    if not verdict.is_danger:
        return ALL_SAFE
    names = " ".join(c.value for c in verdict.ordered_causes())
    return f"DANGER - {names} - Door Open"


def alert_text(verdict: DangerVerdict) -> str:
    return "Danger Detected!" if verdict.is_danger else ALL_SAFE
