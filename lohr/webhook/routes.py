"""
Webhook API — Receive push notifications and queue mirror jobs.

Blueprint: webhook_bp
Prefix: /
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from ..mirror.job import MirrorJob
from ..observability.metrics import metrics
from .blacklist import matching_pattern
from .payload import parse_payload
from .signature import read_signed_body

logger = logging.getLogger(__name__)

webhook_bp = Blueprint("webhook", __name__)


def _config():
    return current_app.config["LOHR_CONFIG"]


def _queue():
    return current_app.config["JOB_QUEUE"]


@webhook_bp.route("/", methods=["POST"])
def gitea_webhook():
    """Authenticate the delivery, then queue a mirror job unless blacklisted."""
    config = _config()
    body = read_signed_body(request, config.secret)
    repo = parse_payload(body)

    pattern = matching_pattern(repo.full_name, config.settings.blacklist)
    if pattern is not None:
        logger.info(f"[webhook] {repo.full_name} is blacklisted ({pattern}), ignoring")
        metrics.increment("webhooks_total", labels={"outcome": "blacklisted"})
        return "", 200

    job = MirrorJob(repo)
    _queue().put(job)
    logger.info(
        f"[webhook] Queued job {job.id} for {repo.full_name}",
        extra={"repo": repo.full_name, "job_id": job.id},
    )
    metrics.increment("webhooks_total", labels={"outcome": "queued"})
    return "", 200
