# kitchen_pi/commands.py

import re
from typing import Callable, Optional, Tuple

from kitchen_pi.actuators import ActuatorController
from kitchen_pi.system_state import ActuatorState, RemoteCommand, SetAlarm, SetBuzzer, SetDoorAngle

POLICY_OFF = "off"
POLICY_IGNORE = "ignore"

_ON = {"1", "true", "on", "yes"}
_OFF = {"0", "false", "off", "no"}
_LEADING_INT = re.compile(r"\s*([-+]?\d+)")


class MalformedCommand(ValueError):
    pass


def parse_bool(payload: str) -> bool:
    p = payload.strip().lower()
    if p in _ON:
        return True
    if p in _OFF:
        return False
    raise MalformedCommand(f"unrecognized boolean token {payload!r}")


def parse_angle(payload: str) -> int:
    """Leading signed integer of the payload; "90.0" and "45deg" give 90 and 45."""
    m = _LEADING_INT.match(payload)
    if m is None:
        raise MalformedCommand(f"non-numeric angle {payload!r}")
    return int(m.group(1))


def _confirm_led(state: ActuatorState) -> str:
    return f"LED {'ON' if state.alarm_on else 'OFF'}"


def _confirm_buzzer(state: ActuatorState) -> str:
    return f"Buzzer {'ON' if state.buzzer_on else 'OFF'}"


def _confirm_servo(state: ActuatorState) -> str:
    return f"Servo moved to {state.door_angle}"


class CommandChannel:
    """Turns control-topic messages into RemoteCommands and confirms each one applied.

    Malformed payloads follow ``policy``: ``"off"`` applies the off/0 branch
    (and still confirms), ``"ignore"`` drops the message without a confirmation.
    """

    def __init__(
        self,
        controller: ActuatorController,
        publish: Callable[[str, str], bool],
        *,
        led_topic: str = "led",
        servo_topic: str = "servo",
        buzzer_topic: str = "buzzer",
        policy: str = POLICY_OFF,
        logger: Callable[[str], None] = print,
    ):
        if policy not in (POLICY_OFF, POLICY_IGNORE):
            raise ValueError(f"unknown malformed-command policy {policy!r}")
        self._controller = controller
        self._publish = publish
        self._policy = policy
        self._log = logger

        # topic -> (decoder, confirmation topic, confirmation text)
        self._routes = {
            led_topic: (self._decode_alarm, f"{led_topic}/confirm", _confirm_led),
            servo_topic: (self._decode_door, f"{servo_topic}/confirm", _confirm_servo),
            buzzer_topic: (self._decode_buzzer, f"{buzzer_topic}/confirm", _confirm_buzzer),
        }

    @property
    def topics(self) -> Tuple[str, ...]:
        return tuple(self._routes)

    def decode(self, topic: str, payload: str) -> Optional[RemoteCommand]:
        route = self._routes.get(topic)
        if route is None:
            return None
        decoder = route[0]
        try:
            return decoder(topic, payload, strict=True)
        except MalformedCommand as e:
            if self._policy == POLICY_IGNORE:
                self._log(f"[CMD] Ignoring malformed command on {topic}: {e}")
                return None
            self._log(f"[CMD] Malformed command on {topic}: {e}; applying off/0")
            return decoder(topic, payload, strict=False)

    def on_message(self, topic: str, payload: str) -> None:
        self._log(f"[CMD] Received [{topic}]: {payload.strip()}")
        cmd = self.decode(topic, payload)
        if cmd is None:
            return

        state = self._controller.apply_command(cmd)
        _, confirm_topic, confirm = self._routes[topic]
        if not self._publish(confirm_topic, confirm(state)):
            self._log(f"[CMD] Confirmation on {confirm_topic} not delivered")

    # strict=False is the safe fallback for malformed payloads.

    @staticmethod
    def _decode_alarm(topic: str, payload: str, strict: bool) -> RemoteCommand:
        return SetAlarm(parse_bool(payload) if strict else False, topic=topic)

    @staticmethod
    def _decode_buzzer(topic: str, payload: str, strict: bool) -> RemoteCommand:
        return SetBuzzer(parse_bool(payload) if strict else False, topic=topic)

    @staticmethod
    def _decode_door(topic: str, payload: str, strict: bool) -> RemoteCommand:
        return SetDoorAngle(parse_angle(payload) if strict else 0, topic=topic)
