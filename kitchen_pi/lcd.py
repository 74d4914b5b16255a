# kitchen_pi/lcd.py

import time
from typing import Callable, Tuple

from kitchen_pi.system_state import DangerCause, DangerVerdict, SensorSnapshot, Thresholds
from kitchen_pi.danger import flame_danger

_LCD_LABELS = {DangerCause.GAS: "Gas", DangerCause.FLAME: "Fire", DangerCause.HEAT: "Heat"}


def status_lines(snapshot: SensorSnapshot, verdict: DangerVerdict, thresholds: Thresholds = Thresholds()) -> Tuple[str, str]:
    if verdict.is_danger:
        return "DANGER! EVACUATE", " ".join(_LCD_LABELS[c] for c in verdict.ordered_causes())

    t, h = snapshot.temperature_c, snapshot.humidity_pct
    t_str = f"T:{t:.1f}C" if t is not None else "T:--.-C"
    h_str = f"H:{h:.0f}%" if h is not None else "H:--%"
    flame = "FIRE!" if flame_danger(snapshot.flame_reading, thresholds) else "Safe"
    return f"{t_str} {h_str}", f"G:{snapshot.gas_level} F:{flame}"


class I2cLcd:
    LCD_CHR = 1
    LCD_CMD = 0
    LCD_LINE_1 = 0x80
    LCD_LINE_2 = 0xC0
    LCD_BACKLIGHT = 0x08
    ENABLE = 0b00000100

    def __init__(self, i2c_addr: int, width: int = 16, bus_id: int = 1):
        from smbus2 import SMBus

        self._addr = i2c_addr
        self._width = width
        self._bus = SMBus(bus_id)

    def _toggle_enable(self, bits: int) -> None:
        time.sleep(0.0005)
        self._bus.write_byte(self._addr, bits | self.ENABLE)
        time.sleep(0.0005)
        self._bus.write_byte(self._addr, bits & ~self.ENABLE)
        time.sleep(0.0005)

    def _byte(self, bits: int, mode: int) -> None:
        bits_high = mode | (bits & 0xF0) | self.LCD_BACKLIGHT
        bits_low = mode | ((bits << 4) & 0xF0) | self.LCD_BACKLIGHT
        self._bus.write_byte(self._addr, bits_high)
        self._toggle_enable(bits_high)
        self._bus.write_byte(self._addr, bits_low)
        self._toggle_enable(bits_low)

    def init(self) -> None:
        self._byte(0x33, self.LCD_CMD)
        self._byte(0x32, self.LCD_CMD)
        self._byte(0x06, self.LCD_CMD)
        self._byte(0x0C, self.LCD_CMD)
        self._byte(0x28, self.LCD_CMD)
        self._byte(0x01, self.LCD_CMD)
        time.sleep(0.005)

    def write_line(self, message: str, line: int) -> None:
        # HD44780 ROM has no degree sign or accents; keep it ASCII.
        msg = message.encode("ascii", "replace").decode("ascii")
        msg = msg.ljust(self._width, " ")[: self._width]
        self._byte(line, self.LCD_CMD)
        for i in range(self._width):
            self._byte(ord(msg[i]), self.LCD_CHR)

    def render(self, line1: str, line2: str) -> None:
        self.write_line(line1, self.LCD_LINE_1)
        self.write_line(line2, self.LCD_LINE_2)

    def close(self) -> None:
        self._byte(0x01, self.LCD_CMD)
        self._bus.close()


class ConsoleStatusSink:
    def __init__(self, width: int = 16, logger: Callable[[str], None] = print):
        self._width = width
        self._log = logger

    def render(self, line1: str, line2: str) -> None:
        w = self._width
        self._log(f"[LCD] |{line1.ljust(w)[:w]}|{line2.ljust(w)[:w]}|")
