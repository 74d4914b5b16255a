# kitchen_pi/sim_devices.py

from typing import Callable


class LoggingOutput:
    """Stands in for an LED or buzzer pin when running without hardware."""

    def __init__(self, name: str, logger: Callable[[str], None] = print):
        self._name = name
        self._log = logger
        self.on = False

    def set(self, on: bool) -> None:
        self.on = bool(on)
        self._log(f"[SIM] {self._name} {'ON' if self.on else 'OFF'}")


class LoggingServo:
    def __init__(self, logger: Callable[[str], None] = print):
        self._log = logger
        self.angle = 0

    def set_angle(self, angle: int) -> None:
        self.angle = int(angle)
        self._log(f"[SIM] Servo -> {self.angle} deg")
