# kitchen_pi/main.py

import argparse
import signal
import threading
from typing import Optional

from kitchen_pi import config
from kitchen_pi.actuators import ActuatorController
from kitchen_pi.commands import CommandChannel
from kitchen_pi.control_loop import ControlLoop
from kitchen_pi.mqtt_gateway import ConnectionSupervisor
from kitchen_pi.sensors import SimulatedSensorReader, make_hardware_reader
from kitchen_pi.system_state import FlameMode, Thresholds
from kitchen_pi.telemetry import TelemetryPublisher


def build_thresholds() -> Thresholds:
    return Thresholds(
        gas=config.GAS_THRESHOLD,
        temperature_c=config.TEMP_THRESHOLD_C,
        flame_mode=FlameMode.parse(config.FLAME_MODE),
        flame_low=config.FLAME_LOW_THRESHOLD,
    )


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Smart kitchen safety controller")
    parser.add_argument("--mode", choices=["normal", "sim"], default="normal")
    parser.add_argument("--web", action="store_true", help="serve the local status API")
    parser.add_argument("--cycles", type=int, default=None, help="stop after N control cycles")
    args = parser.parse_args(argv)

    thresholds = build_thresholds()
    hardware = args.mode == "normal"

    if hardware:
        from kitchen_pi import gpio_devices
        from kitchen_pi.lcd import I2cLcd

        gpio_devices.setup_gpio()
        led = gpio_devices.Led(config.LED_PIN)
        buzzer = gpio_devices.Buzzer(config.BUZZER_PIN)
        servo = gpio_devices.Servo(config.SERVO_PIN)
        for dev in (led, buzzer, servo):
            dev.setup()
        lcd = I2cLcd(config.I2C_ADDR, width=config.LCD_WIDTH)
        lcd.init()
        sink = lcd
        reader = make_hardware_reader(config, thresholds.flame_mode)
    else:
        from kitchen_pi.lcd import ConsoleStatusSink
        from kitchen_pi.sim_devices import LoggingOutput, LoggingServo

        led, buzzer, servo = LoggingOutput("LED"), LoggingOutput("Buzzer"), LoggingServo()
        sink = ConsoleStatusSink(config.LCD_WIDTH)
        reader = SimulatedSensorReader(thresholds.flame_mode)

    controller = ActuatorController(led, buzzer, servo)
    controller.setup()

    supervisor = ConnectionSupervisor(
        host=config.MQTT_HOST,
        port=config.MQTT_PORT,
        keepalive_sec=config.MQTT_KEEPALIVE_SEC,
        control_topics=(),
        base_topic=config.MQTT_BASE_TOPIC,
        client_id=config.MQTT_CLIENT_ID,
        username=config.MQTT_USERNAME,
        password=config.MQTT_PASSWORD,
        tls=config.MQTT_TLS,
        availability_topic=config.TOPIC_AVAILABILITY,
        connect_timeout_sec=config.MQTT_CONNECT_TIMEOUT_SEC,
        retry_min_sec=config.MQTT_RETRY_MIN_SEC,
        retry_max_sec=config.MQTT_RETRY_MAX_SEC,
    )

    commands = CommandChannel(
        controller,
        supervisor.publish,
        led_topic=config.TOPIC_LED,
        servo_topic=config.TOPIC_SERVO,
        buzzer_topic=config.TOPIC_BUZZER,
        policy=config.MALFORMED_COMMAND_POLICY,
    )
    supervisor.set_command_handler(commands.on_message, commands.topics)

    publisher = TelemetryPublisher(
        supervisor,
        sensors_topic=config.TOPIC_SENSORS,
        alert_topic=config.TOPIC_ALERT,
        http_url=config.HTTP_URL,
        http_api_key=config.HTTP_API_KEY,
        http_timeout_sec=config.HTTP_TIMEOUT_SEC,
    )

    loop = ControlLoop(
        supervisor,
        reader,
        controller,
        sink,
        publisher,
        thresholds=thresholds,
        period_sec=config.LOOP_PERIOD_SEC,
    )

    if args.web:
        from kitchen_pi.web import create_app, run_web_server

        app = create_app(publisher, supervisor, controller)
        threading.Thread(
            target=run_web_server,
            args=(app, config.WEB_HOST, config.WEB_PORT),
            name="WEB",
            daemon=True,
        ).start()
        print(f"[KITCHEN] Status API on http://{config.WEB_HOST}:{config.WEB_PORT}/api/state")

    print(f"[KITCHEN] Running ({args.mode}, flame sensor {thresholds.flame_mode.value}).")
    stop = threading.Event()

    def request_stop(_signum, _frame) -> None:
        # Finish the current cycle, then leave.
        stop.set()

    signal.signal(signal.SIGINT, request_stop)
    signal.signal(signal.SIGTERM, request_stop)

    try:
        loop.splash(config.SPLASH_SEC)
        loop.run(stop, max_cycles=args.cycles)
    finally:
        supervisor.stop()
        if hardware:
            servo.close()
            sink.close()
            gpio_devices.cleanup_gpio()
        print("[KITCHEN] Stopped.")


if __name__ == "__main__":
    main()
