"""
Mirror — Clone, update and push repository mirrors.

Jobs are queued by the webhook layer and executed one at a time by the
worker thread.
"""
