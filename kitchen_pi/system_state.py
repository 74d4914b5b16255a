# kitchen_pi/system_state.py

import enum
import time
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Union


class DangerCause(enum.Enum):
    GAS = "Gas"
    FLAME = "Flame"
    HEAT = "Heat"


# Fixed order for display and status text.
CAUSE_ORDER = (DangerCause.GAS, DangerCause.FLAME, DangerCause.HEAT)


class FlameMode(enum.Enum):
    ANALOG = "analog"  # lower reading = more flame
    DIGITAL = "digital"  # 1 = flame

    @classmethod
    def parse(cls, value: str) -> "FlameMode":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"unknown flame mode {value!r} (expected 'analog' or 'digital')") from None


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class SensorSnapshot:
    gas_level: int
    flame_reading: int
    # None means the reading is unavailable for this cycle.
    temperature_c: Optional[float]
    humidity_pct: Optional[float]
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class DangerVerdict:
    is_danger: bool
    causes: FrozenSet[DangerCause] = frozenset()

    def ordered_causes(self):
        return [c for c in CAUSE_ORDER if c in self.causes]


SAFE = DangerVerdict(False)

DOOR_CLOSED = 0
DOOR_OPEN = 180


@dataclass(frozen=True)
class ActuatorState:
    alarm_on: bool = False
    buzzer_on: bool = False
    door_angle: int = DOOR_CLOSED


@dataclass(frozen=True)
class SetAlarm:
    on: bool
    topic: str = ""


@dataclass(frozen=True)
class SetBuzzer:
    on: bool
    topic: str = ""


@dataclass(frozen=True)
class SetDoorAngle:
    angle: int
    topic: str = ""


RemoteCommand = Union[SetAlarm, SetBuzzer, SetDoorAngle]


@dataclass(frozen=True)
class Thresholds:
    gas: int = 2000
    temperature_c: float = 40.0
    flame_mode: FlameMode = FlameMode.ANALOG
    flame_low: int = 1000
