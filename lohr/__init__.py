"""
lohr — Mirror git repositories on receipt of a webhook.

A signed webhook queues a mirror job; a single worker clones or updates
the local bare mirror and pushes it to every configured remote.
"""

__version__ = "0.3.0"
