# kitchen_pi/control_loop.py

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from kitchen_pi.actuators import ActuatorController
from kitchen_pi.danger import evaluate
from kitchen_pi.lcd import status_lines
from kitchen_pi.system_state import ActuatorState, DangerVerdict, SensorSnapshot, Thresholds
from kitchen_pi.telemetry import TelemetryPublisher, TelemetryRecord


@dataclass(frozen=True)
class CycleResult:
    snapshot: SensorSnapshot
    verdict: DangerVerdict
    actuators: ActuatorState
    record: TelemetryRecord


class ControlLoop:
    def __init__(
        self,
        supervisor,
        reader,
        controller: ActuatorController,
        status_sink,
        publisher: TelemetryPublisher,
        *,
        thresholds: Thresholds = Thresholds(),
        period_sec: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
        logger: Callable[[str], None] = print,
    ):
        self._supervisor = supervisor
        self._reader = reader
        self._controller = controller
        self._sink = status_sink
        self._publisher = publisher
        self._thresholds = thresholds
        self._period = period_sec
        self._clock = clock
        self._log = logger
        self.cycles = 0

    def splash(self, seconds: float = 1.5) -> None:
        self._sink.render("Smart Kitchen", "")
        time.sleep(seconds)

    def run_cycle(self) -> CycleResult:
        # Order matters: telemetry must see the actuator state from this cycle's verdict.
        self._supervisor.ensure_connected()
        snapshot = self._reader.read()
        verdict = evaluate(snapshot, self._thresholds)
        actuators = self._controller.apply_verdict(verdict)
        try:
            self._sink.render(*status_lines(snapshot, verdict, self._thresholds))
        except Exception as e:
            self._log(f"[LOOP] Status display error: {e}")
        record = self._publisher.publish(snapshot, verdict, actuators)
        self.cycles += 1
        return CycleResult(snapshot, verdict, actuators, record)

    def run(self, stop: threading.Event, max_cycles: Optional[int] = None) -> None:
        self._log(f"[LOOP] Running every {self._period:.1f}s")
        ran = 0
        while not stop.is_set():
            started = self._clock()
            ran += 1
            try:
                self.run_cycle()
            except Exception as e:
                self._log(f"[LOOP] Cycle error: {e}")

            if max_cycles is not None and ran >= max_cycles:
                break
            elapsed = self._clock() - started
            stop.wait(max(0.0, self._period - elapsed))
        self._log("[LOOP] Stopped")
