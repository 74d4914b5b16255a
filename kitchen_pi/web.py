# kitchen_pi/web.py

from flask import Flask, jsonify


def create_app(publisher, supervisor, controller) -> Flask:
    app = Flask(__name__)

    @app.route("/api/state")
    def api_state():
        record = publisher.last_record
        act = controller.state()
        return jsonify(
            record=record.to_dict() if record is not None else None,
            actuators={"led": int(act.alarm_on), "buzzer": int(act.buzzer_on), "servo": act.door_angle},
            mqtt=supervisor.state.value,
        )

    @app.route("/api/health")
    def api_health():
        return jsonify(ok=True, mqtt=supervisor.state.value)

    return app


def run_web_server(app: Flask, host: str, port: int) -> None:
    app.run(host=host, port=port, debug=False, use_reloader=False)
