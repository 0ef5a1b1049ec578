"""HTTP API: one POST route per probe, plus the batch run."""

import os

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from apichecker.core.engine import Engine
from apichecker.core.errors import UnknownProbeError
from apichecker.core.models import ProbeConfig

bp = Blueprint("security", __name__)


def _engine() -> Engine:
    return current_app.config["ENGINE"]


def _body():
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else None


@bp.post("/test/all")
def run_all():
    body = _body()
    if body is None or not body.get("targetUrl"):
        return jsonify(error="JSON body with targetUrl is required"), 400
    engine = _engine()
    overrides = body.get("overrides") or {}
    if not isinstance(overrides, dict) or not all(isinstance(v, dict) for v in overrides.values()):
        return jsonify(error="overrides must map probe keys to objects"), 400
    unknown = sorted(set(overrides) - set(engine.keys()))
    if unknown:
        return jsonify(error=f"Unknown probe in overrides: {', '.join(unknown)}"), 400
    try:
        fields = {key: ProbeConfig.fields_from_dict(value) for key, value in overrides.items()}
    except (TypeError, ValueError) as exc:
        return jsonify(error=f"Invalid overrides: {exc}"), 400
    for extra in fields.values():
        extra.pop("target_url", None)
    reports = engine.run_all(str(body["targetUrl"]), fields)
    return jsonify([r.to_dict() for r in reports])


@bp.post("/test/<key>")
def run_probe(key: str):
    body = _body()
    if body is None:
        return jsonify(error="Request body must be a JSON object"), 400
    try:
        config = ProbeConfig.from_dict(body)
    except (TypeError, ValueError) as exc:
        return jsonify(error=f"Invalid request body: {exc}"), 400
    try:
        report = _engine().run(key, config)
    except UnknownProbeError as exc:
        return jsonify(error=str(exc)), 404
    return jsonify(report.to_dict())


@bp.get("/probes")
def list_probes():
    return jsonify(_engine().keys())


def _internal_error(exc: Exception):
    if isinstance(exc, HTTPException):
        return exc
    # full trace goes to the server log, never to the client
    current_app.logger.exception("Unhandled error on %s", request.path)
    return jsonify(error="Internal error"), 500


def create_app(engine: Engine = None) -> Flask:
    app = Flask(__name__)
    app.config["ENGINE"] = engine or Engine()
    app.register_blueprint(bp, url_prefix="/api/security")
    app.register_error_handler(Exception, _internal_error)
    return app


def serve(host: str = None, port: int = None, engine: Engine = None) -> None:
    host = host or os.environ.get("APICHECKER_HOST", "127.0.0.1")
    port = port or int(os.environ.get("APICHECKER_PORT", "3000"))
    print(f"\n  🔒 APIChecker API on http://{host}:{port}/api/security\n")
    create_app(engine).run(host=host, port=port)
