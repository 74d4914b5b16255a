# kitchen_pi/actuators.py

import threading
from dataclasses import replace
from typing import Callable

from kitchen_pi.system_state import (
    DOOR_CLOSED,
    DOOR_OPEN,
    ActuatorState,
    DangerVerdict,
    RemoteCommand,
    SetAlarm,
    SetBuzzer,
    SetDoorAngle,
)


def clamp_angle(angle: int) -> int:
    return max(DOOR_CLOSED, min(DOOR_OPEN, int(angle)))


class ActuatorController:
    """Single mutation point for the alarm LED, buzzer and door servo.

    Devices only need ``set(on)`` (LED, buzzer) and ``set_angle(deg)`` (servo).
    A device is driven only when its field actually changes.
    """

    def __init__(self, led, buzzer, servo, logger: Callable[[str], None] = print):
        self._led = led
        self._buzzer = buzzer
        self._servo = servo
        self._log = logger
        self._state = ActuatorState()
        self._lock = threading.Lock()

    def setup(self) -> None:
        with self._lock:
            self._state = ActuatorState()
            self._led.set(False)
            self._buzzer.set(False)
            self._servo.set_angle(DOOR_CLOSED)

    def state(self) -> ActuatorState:
        with self._lock:
            return self._state

    def apply_verdict(self, verdict: DangerVerdict) -> ActuatorState:
        target = ActuatorState(
            alarm_on=verdict.is_danger,
            buzzer_on=verdict.is_danger,
            door_angle=DOOR_OPEN if verdict.is_danger else DOOR_CLOSED,
        )
        with self._lock:
            changed = self._drive(target)
        if changed and verdict.is_danger:
            self._log(f"[ACT] DANGER detected! Door opened to {DOOR_OPEN} deg")
        elif changed:
            self._log("[ACT] Safe - door closed")
        return target

    def apply_command(self, cmd: RemoteCommand) -> ActuatorState:
        with self._lock:
            current = self._state
            if isinstance(cmd, SetAlarm):
                target = replace(current, alarm_on=bool(cmd.on))
            elif isinstance(cmd, SetBuzzer):
                target = replace(current, buzzer_on=bool(cmd.on))
            elif isinstance(cmd, SetDoorAngle):
                target = replace(current, door_angle=clamp_angle(cmd.angle))
            else:
                raise TypeError(f"unsupported command {cmd!r}")
            self._drive(target)
            return target

    def _drive(self, target: ActuatorState) -> bool:
        # Caller holds the lock.
        current = self._state
        if target == current:
            return False
        if target.alarm_on != current.alarm_on:
            self._led.set(target.alarm_on)
        if target.buzzer_on != current.buzzer_on:
            self._buzzer.set(target.buzzer_on)
        if target.door_angle != current.door_angle:
            self._servo.set_angle(target.door_angle)
        self._state = target
        return True
