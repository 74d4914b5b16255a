# kitchen_pi/gpio_devices.py

from typing import Optional, Tuple

import RPi.GPIO as GPIO


class Led:
    def __init__(self, pin: int):
        self._pin = pin

    def setup(self) -> None:
        GPIO.setup(self._pin, GPIO.OUT, initial=GPIO.LOW)

    def set(self, on: bool) -> None:
        GPIO.output(self._pin, GPIO.HIGH if on else GPIO.LOW)


class Buzzer(Led):
    pass


class Servo:
    """Hobby servo on a software PWM pin: 50 Hz, 0.5-2.5 ms pulse for 0-180 degrees."""

    FREQ_HZ = 50
    MIN_DUTY = 2.5
    MAX_DUTY = 12.5

    def __init__(self, pin: int):
        self._pin = pin
        self._pwm = None

    def setup(self) -> None:
        GPIO.setup(self._pin, GPIO.OUT, initial=GPIO.LOW)
        self._pwm = GPIO.PWM(self._pin, self.FREQ_HZ)
        self._pwm.start(0)

    def set_angle(self, angle: int) -> None:
        angle = max(0, min(180, int(angle)))
        duty = self.MIN_DUTY + (self.MAX_DUTY - self.MIN_DUTY) * angle / 180.0
        self._pwm.ChangeDutyCycle(duty)

    def close(self) -> None:
        if self._pwm is not None:
            self._pwm.stop()
            self._pwm = None


class DigitalInput:
    def __init__(self, pin: int, *, active_low: bool = True):
        self._pin = pin
        self._active_low = active_low

    def setup(self) -> None:
        pud = GPIO.PUD_UP if self._active_low else GPIO.PUD_DOWN
        GPIO.setup(self._pin, GPIO.IN, pull_up_down=pud)

    def read(self) -> int:
        val = GPIO.input(self._pin)
        active = (val == 0) if self._active_low else (val == 1)
        return 1 if active else 0


class Mcp3008:
    def __init__(self, bus: int = 0, device: int = 0, *, max_speed_hz: int = 1350000):
        import spidev

        self._spi = spidev.SpiDev()
        self._spi.open(bus, device)
        self._spi.max_speed_hz = max_speed_hz

    def read_channel(self, channel: int) -> int:
        if channel < 0 or channel > 7:
            raise ValueError("MCP3008 channel must be 0..7")
        adc = self._spi.xfer2([1, (8 + channel) << 4, 0])
        return ((adc[1] & 3) << 8) + adc[2]

    def close(self) -> None:
        self._spi.close()


def make_dht_reader(model: str, board_pin: str):
    import board
    import adafruit_dht

    pin = getattr(board, board_pin)
    dht = adafruit_dht.DHT11(pin) if model.upper() == "DHT11" else adafruit_dht.DHT22(pin)

    def read_once() -> Tuple[Optional[float], Optional[float]]:
        # Checksum and timing misses are routine on DHT sensors.
        try:
            return dht.temperature, dht.humidity
        except Exception:
            return None, None

    return read_once


def setup_gpio() -> None:
    GPIO.setwarnings(False)
    GPIO.setmode(GPIO.BCM)


def cleanup_gpio() -> None:
    GPIO.cleanup()
