"""
Payload — Normalize webhook bodies into a Repository.

Webhook sources have used different field names for the clone URL over
time. Each known shape is listed in PAYLOAD_SHAPES, most recent first;
the first shape whose URL field is present wins. Supporting a new shape
means adding an entry here and nothing downstream.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from ..errors import MalformedPayload
from ..models import Repository

logger = logging.getLogger(__name__)

# (shape version, repository field holding the source URL)
PAYLOAD_SHAPES: Tuple[Tuple[str, str], ...] = (
    ("gitea-v2", "ssh_url"),
    ("gitea-v1", "clone_url"),
)


class RepositoryPayload(BaseModel):
    """The `repository` object of a push webhook; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    full_name: str
    name: Optional[str] = None
    ssh_url: Optional[str] = None
    clone_url: Optional[str] = None


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    repository: RepositoryPayload


def select_source_url(repo: RepositoryPayload) -> Tuple[str, str]:
    """Return (shape version, source URL) for the first matching shape."""
    for version, field in PAYLOAD_SHAPES:
        url = getattr(repo, field, None)
        if url:
            return version, url
    fields = ", ".join(field for _, field in PAYLOAD_SHAPES)
    raise MalformedPayload(f"repository has none of the URL fields: {fields}")


def parse_payload(body: bytes) -> Repository:
    """Parse an authenticated webhook body into a Repository."""
    try:
        data: Dict[str, Any] = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedPayload(f"could not parse json: {e}")

    if not isinstance(data, dict):
        raise MalformedPayload("could not parse json: expected an object")

    try:
        payload = WebhookPayload(**data)
    except ValidationError as e:
        raise MalformedPayload(f"unexpected payload shape: {e.error_count()} error(s)")

    repo = payload.repository
    # full_name is joined onto the mirror home directory
    segments = repo.full_name.split("/")
    if any(segment in ("", ".", "..") for segment in segments):
        raise MalformedPayload(f"invalid repository full_name: {repo.full_name!r}")

    version, url = select_source_url(repo)
    logger.debug(f"[webhook] {repo.full_name}: payload shape {version}")
    return Repository(full_name=repo.full_name, source_url=url, name=repo.name or "")
