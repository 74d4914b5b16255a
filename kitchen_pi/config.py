# kitchen_pi/config.py

import os


def _env(name: str, default: str) -> str:
    return os.getenv(f"KITCHEN_{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    return _env(name, "1" if default else "0").strip().lower() in {"1", "true", "on", "yes"}


# GPIO (BCM numbering)
LED_PIN = int(_env("LED_PIN", "25"))
BUZZER_PIN = int(_env("BUZZER_PIN", "26"))
SERVO_PIN = int(_env("SERVO_PIN", "18"))
FLAME_PIN = int(_env("FLAME_PIN", "24"))  # digital flame mode only
FLAME_ACTIVE_LOW = _env_bool("FLAME_ACTIVE_LOW", True)

# MCP3008 ADC (gas + analog flame)
SPI_BUS = 0
SPI_DEVICE = 0
GAS_CHANNEL = int(_env("GAS_CHANNEL", "0"))
FLAME_CHANNEL = int(_env("FLAME_CHANNEL", "1"))
ADC_BITS = 10
# Readings are scaled to 12-bit counts so thresholds match the ESP32 calibration.
ADC_SCALE_BITS = 12

# DHT
DHT_MODEL = _env("DHT_MODEL", "DHT11")
DHT_BOARD_PIN = _env("DHT_BOARD_PIN", "D4")

# LCD
I2C_ADDR = int(_env("I2C_ADDR", "0x27"), 0)
LCD_WIDTH = 16

# Thresholds
GAS_THRESHOLD = int(_env("GAS_THRESHOLD", "2000"))
TEMP_THRESHOLD_C = float(_env("TEMP_THRESHOLD_C", "40.0"))
FLAME_MODE = _env("FLAME_MODE", "analog")  # "analog" or "digital"
FLAME_LOW_THRESHOLD = int(_env("FLAME_LOW_THRESHOLD", "1000"))

# Control loop
LOOP_PERIOD_SEC = float(_env("LOOP_PERIOD_SEC", "5.0"))
SPLASH_SEC = 1.5

# Remote commands: "off" applies the off/0 branch, "ignore" drops the message.
MALFORMED_COMMAND_POLICY = _env("MALFORMED_COMMAND_POLICY", "off")

# MQTT
MQTT_HOST = _env("MQTT_HOST", "localhost")
MQTT_PORT = int(_env("MQTT_PORT", "1883"))
MQTT_KEEPALIVE_SEC = int(_env("MQTT_KEEPALIVE_SEC", "30"))
MQTT_USERNAME = _env("MQTT_USERNAME", "")
MQTT_PASSWORD = _env("MQTT_PASSWORD", "")
MQTT_TLS = _env_bool("MQTT_TLS", False)
MQTT_CLIENT_ID = _env("MQTT_CLIENT_ID", "kitchen-pi")
MQTT_BASE_TOPIC = _env("MQTT_BASE_TOPIC", "")
MQTT_CONNECT_TIMEOUT_SEC = float(_env("MQTT_CONNECT_TIMEOUT_SEC", "3.0"))
MQTT_RETRY_MIN_SEC = float(_env("MQTT_RETRY_MIN_SEC", "1.0"))
MQTT_RETRY_MAX_SEC = float(_env("MQTT_RETRY_MAX_SEC", "30.0"))

# Topics (relative to MQTT_BASE_TOPIC)
# Each control topic confirms on "<topic>/confirm".
TOPIC_LED = "led"
TOPIC_SERVO = "servo"
TOPIC_BUZZER = "buzzer"
TOPIC_SENSORS = "sensors/data"
TOPIC_ALERT = "kitchen/alert"
TOPIC_AVAILABILITY = "kitchen/status"

# HTTP (Supabase REST table endpoint)
HTTP_URL = _env("HTTP_URL", "")
HTTP_API_KEY = _env("HTTP_API_KEY", "")
HTTP_TIMEOUT_SEC = float(_env("HTTP_TIMEOUT_SEC", "4.0"))

# Local status API
WEB_HOST = _env("WEB_HOST", "0.0.0.0")
WEB_PORT = int(_env("WEB_PORT", "5000"))
