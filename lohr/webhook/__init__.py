"""
Webhook — Authenticated ingestion of repository push notifications.
"""

from .routes import webhook_bp

__all__ = ["webhook_bp"]
