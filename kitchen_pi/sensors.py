# kitchen_pi/sensors.py

import math
import random
import time
from typing import Callable, Optional, Tuple

from kitchen_pi.system_state import FlameMode, SensorSnapshot

DhtRead = Callable[[], Tuple[Optional[float], Optional[float]]]


def scale_counts(raw: int, from_bits: int, to_bits: int) -> int:
    if to_bits >= from_bits:
        return raw << (to_bits - from_bits)
    return raw >> (from_bits - to_bits)


def _valid(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(value) or math.isinf(value) else value


class SensorReader:
    """Takes one snapshot of every kitchen sensor per call to read()."""

    def __init__(
        self,
        read_gas: Callable[[], int],
        read_flame: Callable[[], int],
        read_dht: DhtRead,
        logger: Callable[[str], None] = print,
    ):
        self._read_gas = read_gas
        self._read_flame = read_flame
        self._read_dht = read_dht
        self._log = logger

    def read(self) -> SensorSnapshot:
        gas = int(self._read_gas())
        flame = int(self._read_flame())
        try:
            t, h = self._read_dht()
        except Exception as e:
            self._log(f"[SENSOR] DHT read error: {e}")
            t, h = None, None
        t, h = _valid(t), _valid(h)
        if t is None or h is None:
            self._log("[SENSOR] DHT reading unavailable")

        t_str = f"{t:.1f}C" if t is not None else "--"
        h_str = f"{h:.0f}%" if h is not None else "--"
        self._log(f"[SENSOR] Temp: {t_str} | Hum: {h_str} | Gas: {gas} | Flame: {flame}")
        return SensorSnapshot(
            gas_level=gas,
            flame_reading=flame,
            temperature_c=t,
            humidity_pct=h,
            timestamp=time.time(),
        )


def make_hardware_reader(cfg, flame_mode: FlameMode, logger: Callable[[str], None] = print) -> SensorReader:
    from kitchen_pi.gpio_devices import DigitalInput, Mcp3008, make_dht_reader

    adc = Mcp3008(cfg.SPI_BUS, cfg.SPI_DEVICE)

    def read_gas() -> int:
        return scale_counts(adc.read_channel(cfg.GAS_CHANNEL), cfg.ADC_BITS, cfg.ADC_SCALE_BITS)

    if flame_mode is FlameMode.ANALOG:
        def read_flame() -> int:
            return scale_counts(adc.read_channel(cfg.FLAME_CHANNEL), cfg.ADC_BITS, cfg.ADC_SCALE_BITS)
    else:
        flame_in = DigitalInput(cfg.FLAME_PIN, active_low=cfg.FLAME_ACTIVE_LOW)
        flame_in.setup()
        read_flame = flame_in.read

    return SensorReader(read_gas, read_flame, make_dht_reader(cfg.DHT_MODEL, cfg.DHT_BOARD_PIN), logger=logger)


class SimulatedSensorReader(SensorReader):
    """Random-walk kitchen readings with the occasional gas leak or flame."""

    def __init__(self, flame_mode: FlameMode = FlameMode.ANALOG, *, seed: Optional[int] = None, logger: Callable[[str], None] = print):
        self._rng = random.Random(seed)
        self._flame_mode = flame_mode
        self._temp = 24.0
        self._hum = 45.0
        self._gas = 400
        self._flame = False
        super().__init__(self._next_gas, self._next_flame, self._next_dht, logger=logger)

    def _next_gas(self) -> int:
        if self._rng.random() < 0.03:
            self._gas = self._rng.randint(2100, 3500)
        else:
            self._gas = max(100, min(4095, int(self._gas * 0.7 + 400 * 0.3 + self._rng.randint(-40, 40))))
        return self._gas

    def _next_flame(self) -> int:
        if self._rng.random() < 0.02:
            self._flame = True
        elif self._flame and self._rng.random() < 0.3:
            self._flame = False
        if self._flame_mode is FlameMode.DIGITAL:
            return 1 if self._flame else 0
        return self._rng.randint(200, 600) if self._flame else self._rng.randint(3500, 4095)

    def _next_dht(self) -> Tuple[Optional[float], Optional[float]]:
        # DHT11s drop a reading now and then.
        if self._rng.random() < 0.05:
            return None, None
        self._temp = max(15.0, min(45.0, self._temp + self._rng.uniform(-0.5, 0.5)))
        self._hum = max(20.0, min(90.0, self._hum + self._rng.uniform(-2, 2)))
        return round(self._temp, 1), round(self._hum, 1)
