from __future__ import annotations

from dataclasses import asdict, fields

from flask import Flask, jsonify, request

from .config import configure_logging
from .core.samples import SAMPLES
from .infrastructure.desktop import parse_palette_spec
from .infrastructure.network import DecodeFailure
from .runner import BotRunner, create_runner

APP_VERSION = "1.0.0"


def _int_arg(payload: dict, name: str) -> int:
    value = payload.get(name)
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer") from None


_NON_NEGATIVE = ("inter_pixel_delay_ms", "settle_delay_ms", "retries", "timeout")
_POSITIVE = ("max_width", "max_height")


def _check_setting(name: str, value: object) -> None:
    if name in _NON_NEGATIVE and value < 0:
        raise ValueError(f"{name} must be >= 0")
    if name in _POSITIVE and value <= 0:
        raise ValueError(f"{name} must be > 0")
    if name == "palette":
        parse_palette_spec(value)


def create_app(runner: BotRunner | None = None) -> Flask:
    logger = configure_logging()
    runner = runner or create_runner()
    settings = runner.settings
    app = Flask(__name__)
    app.config["RUNNER"] = runner

    @app.route("/health")
    def health():
        return jsonify(ok=True, version=APP_VERSION, running=runner.busy)

    @app.route("/status")
    def status():
        return jsonify(runner.status())

    @app.route("/load/pixels", methods=["POST"])
    def load_pixels():
        payload = request.get_json(silent=True)
        if isinstance(payload, dict):
            name = str(payload.get("name") or "Custom image")
            pixels = payload.get("pixels")
        else:
            name, pixels = "Custom image", payload
        if not runner.load_pixels(pixels, name=name):
            return jsonify(loaded=False, error=runner.last_error), 400
        return jsonify(loaded=True, **runner.last_batch.summary())

    @app.route("/load/image", methods=["POST"])
    def load_image():
        payload = request.get_json(silent=True) or {}
        url = payload.get("url")
        if not isinstance(url, str) or not url:
            return jsonify(loaded=False, error="url is required"), 400
        try:
            max_width = _int_arg(payload, "max_width") if "max_width" in payload else None
            max_height = _int_arg(payload, "max_height") if "max_height" in payload else None
            count = runner.load_image(url, max_width, max_height)
        except ValueError as exc:
            return jsonify(loaded=False, error=str(exc)), 400
        except DecodeFailure as exc:
            logger.error("Image load failed: %s", exc)
            return jsonify(loaded=False, error=str(exc)), 502
        if runner.last_error:
            return jsonify(loaded=False, error=runner.last_error), 409
        return jsonify(loaded=True, pixels=count)

    @app.route("/load/sample/<name>", methods=["POST"])
    def load_sample(name: str):
        if name.lower() not in SAMPLES:
            return jsonify(loaded=False, error=f"Unknown sample {name!r}", samples=sorted(SAMPLES)), 404
        count = runner.load_sample(name)
        if runner.last_error:
            return jsonify(loaded=False, error=runner.last_error), 409
        return jsonify(loaded=True, pixels=count)

    @app.route("/start", methods=["POST"])
    def start():
        started = runner.start_background()
        return jsonify(started=started, status=runner.status()), (200 if started else 409)

    @app.route("/stop", methods=["POST"])
    def stop():
        runner.stop()
        return jsonify(stopped=True, status=runner.status())

    @app.route("/origin", methods=["POST"])
    def origin():
        payload = request.get_json(silent=True) or {}
        try:
            x, y = _int_arg(payload, "x"), _int_arg(payload, "y")
        except ValueError as exc:
            return jsonify(error=str(exc)), 400
        runner.scheduler.set_origin(x, y)
        return jsonify(origin=[x, y])

    @app.route("/delay", methods=["POST"])
    def delay():
        payload = request.get_json(silent=True) or {}
        try:
            runner.scheduler.set_inter_pixel_delay(_int_arg(payload, "ms"))
        except ValueError as exc:
            return jsonify(error=str(exc)), 400
        return jsonify(delay_ms=runner.scheduler.state.inter_pixel_delay_ms)

    @app.route("/palette", methods=["GET", "POST"])
    def palette():
        if request.method == "POST":
            try:
                runner.refresh_palette()
            except ValueError as exc:
                return jsonify(error=str(exc)), 400
        return jsonify(colors=[entry.color for entry in runner.matcher])

    @app.route("/settings", methods=["GET", "PATCH"])
    def settings_view():
        if request.method == "GET":
            return jsonify(asdict(settings))

        payload = request.get_json(silent=True) or {}
        errors: dict[str, str] = {}
        applied: dict[str, object] = {}

        for field in fields(settings):
            if field.name not in payload:
                continue

            raw_value = payload[field.name]
            try:
                if field.type is int:
                    coerced = int(raw_value)
                elif field.type is float:
                    coerced = float(raw_value)
                else:
                    coerced = str(raw_value)
            except (TypeError, ValueError):
                errors[field.name] = f"Expected {field.type.__name__}"
                continue

            try:
                _check_setting(field.name, coerced)
            except ValueError as exc:
                errors[field.name] = str(exc)
                continue

            setattr(settings, field.name, coerced)
            applied[field.name] = coerced

        scheduler = runner.scheduler
        if "origin_x" in applied or "origin_y" in applied:
            scheduler.set_origin(settings.origin_x, settings.origin_y)
        if "inter_pixel_delay_ms" in applied:
            scheduler.set_inter_pixel_delay(settings.inter_pixel_delay_ms)
        if "settle_delay_ms" in applied:
            scheduler.settle_delay_ms = settings.settle_delay_ms
        if "palette" in applied:
            runner.refresh_palette()

        status_code = 400 if errors else 200
        return (
            jsonify(updated=applied, errors=errors, settings=asdict(settings)),
            status_code,
        )

    return app


# Module-level application for WSGI servers (``pixel_placer.app:app``).
app = create_app()
application = app
