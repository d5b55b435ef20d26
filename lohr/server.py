"""
Server — Flask application serving the webhook endpoint.

The app only authenticates deliveries and queues jobs; all git work
happens on the worker thread started by run_server().
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from flask import Flask, Response, g, jsonify, request

from .config.settings import DaemonConfig
from .errors import AuthError, PayloadTooLarge
from .mirror.worker import JobQueue, Worker
from .observability.metrics import metrics
from .webhook import webhook_bp
from .webhook.signature import MAX_BODY_BYTES

logger = logging.getLogger(__name__)


def create_app(config: DaemonConfig, job_queue: Optional[JobQueue] = None) -> Flask:
    """Create the Flask application around an already-loaded configuration."""
    app = Flask(__name__)

    app.config["LOHR_CONFIG"] = config
    app.config["JOB_QUEUE"] = job_queue if job_queue is not None else JobQueue()

    # Enforced by werkzeug while the body is read
    app.config["MAX_CONTENT_LENGTH"] = MAX_BODY_BYTES

    app.register_blueprint(webhook_bp)

    @app.route("/metrics", methods=["GET"])
    def metrics_export():
        return Response(metrics.export_prometheus(), mimetype="text/plain; version=0.0.4")

    # ── Error Handlers ────────────────────────────────────────────

    @app.errorhandler(AuthError)
    def rejected_webhook(e: AuthError):
        logger.warning(f"[webhook] Rejected delivery: {e.code}: {e.message}")
        metrics.increment("webhooks_total", labels={"outcome": e.code})
        return jsonify(e.to_dict()), e.status

    @app.errorhandler(413)
    def request_entity_too_large(e):
        return rejected_webhook(PayloadTooLarge("data limit exceeded"))

    # ── Request Logging ───────────────────────────────────────────

    @app.before_request
    def log_request_start():
        g.start_time = time.time()

    @app.after_request
    def log_request_end(response):
        duration_ms = int((time.time() - g.get("start_time", time.time())) * 1000)
        log_fn = logger.debug if request.path == "/metrics" else logger.info
        log_fn(f"{request.method} {request.path} → {response.status_code} ({duration_ms}ms)")
        return response

    logger.info(f"Webhook server initialized (homedir={config.homedir})")

    return app


def run_server(config: DaemonConfig, host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the worker thread, then serve webhooks until interrupted."""
    job_queue = JobQueue()
    worker = Worker(job_queue, config)
    worker.start()

    # Our after_request hook already logs every request with its duration
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    app = create_app(config, job_queue)
    logger.info(f"Listening on http://{host}:{port}")
    try:
        app.run(host=host, port=port, threaded=True, use_reloader=False)
    finally:
        queued = len(job_queue)
        if queued:
            logger.warning(f"Shutting down with {queued} queued job(s) discarded")
