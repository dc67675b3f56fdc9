# sweeper/__init__.py
"""
App factory for the abuse sweep service.

    - Config from SWEEP_CONFIG_FILE or environment (see sweeper/config.py)
    - CORS origins read from CORS_ORIGINS env var
    - Production-appropriate logging levels (SWEEP_ENV=production)
    - Gunicorn-safe scheduler guard (SCHEDULER_ENABLED)
"""

from __future__ import annotations
from flask_cors import CORS
import os
import logging
import traceback
from flask import Flask, jsonify
from .config import SweepConfig
from .extensions import init_extensions
from .scans import scans_bp
from .scheduler import init_scheduler
from .sweep import ScanOrchestrator

error_logger = logging.getLogger("sweeper.errors")


def _is_production() -> bool:
    return os.getenv("SWEEP_ENV", "").lower() == "production"


def _scheduler_enabled() -> bool:
    """
    Guard for the background scheduler under Gunicorn.
    With multiple workers the sweep must only be scheduled once, so set
    SCHEDULER_ENABLED=false on all but one worker (or use --preload).
    """
    return os.environ.get("SCHEDULER_ENABLED", "true").lower() == "true"


def create_app(config: SweepConfig | None = None,
               orchestrator: ScanOrchestrator | None = None) -> Flask:
    app = Flask(__name__)

    is_prod = _is_production()

    # ── Logging ──────────────────────────────────────────────────────
    if is_prod:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        app.logger.setLevel(logging.INFO)
    else:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )
        app.logger.setLevel(logging.DEBUG)

    logging.getLogger("werkzeug").setLevel(logging.INFO)
    # Quieten noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    # ─────────────────────────────────────────────────────────────────

    # ── CORS ────────────────────────────────────────────────────────
    # Lets a dashboard on another origin poll /logs or open /logs/stream.
    cors_env = os.getenv("CORS_ORIGINS")
    if cors_env:
        cors_origins = [o.strip() for o in cors_env.split(",") if o.strip()]
    else:
        cors_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

    CORS(app, resources={
        r"/*": {
            "origins": cors_origins,
            "allow_headers": ["Content-Type"],
            "methods": ["GET", "POST", "OPTIONS"],
        }
    })

    # ── Sweep config + orchestrator ──────────────────────────────────
    config = config or SweepConfig.load()
    if not config.control_plane_url or not config.node_agent_url:
        app.logger.warning(
            "Control plane or node agent URL not configured; sweeps will log "
            "'Base URL is missing in the config' until it is set"
        )
    init_extensions(app, config, orchestrator=orchestrator)

    # ── Blueprints ───────────────────────────────────────────────────
    app.register_blueprint(scans_bp)

    # ── Global Error Handlers ────────────────────────────────────────
    # Clean JSON for every error; tracebacks stay in the server log.

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({
            "error": "Not found",
            "message": "The requested resource was not found.",
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({
            "error": "Method not allowed",
            "message": "This HTTP method is not allowed for this endpoint.",
        }), 405

    @app.errorhandler(409)
    def conflict(e):
        return jsonify({
            "error": "Conflict",
            "message": str(e.description) if hasattr(e, "description") else "A scan is already in progress.",
        }), 409

    @app.errorhandler(500)
    def internal_error(e):
        error_logger.error(
            "500 Internal Server Error:\n%s", traceback.format_exc()
        )
        return jsonify({
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later.",
        }), 500

    @app.errorhandler(Exception)
    def catch_all(e):
        """Catch-all for any unhandled exception."""
        error_logger.error(
            "Unhandled exception: %s\n%s", str(e), traceback.format_exc()
        )
        return jsonify({
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later.",
        }), 500

    # ─────────────────────────────────────────────────────────────────

    # Health check
    @app.get("/health")
    def health():
        return jsonify(status="up and running"), 200

    # ── Background Scheduler ─────────────────────────────────────────
    if _scheduler_enabled():
        try:
            init_scheduler(app)
        except Exception as e:
            logging.getLogger(__name__).warning(
                "Failed to start sweep scheduler: %s", e
            )
    else:
        logging.getLogger(__name__).info(
            "Scheduler disabled for this worker (SCHEDULER_ENABLED != true)"
        )
    # ─────────────────────────────────────────────────────────────────

    return app
