"""
Test helpers — signed deliveries and fake git results.
"""

from __future__ import annotations

import json
import subprocess

from lohr.webhook.signature import sign

SECRET = b"s3cr3t"


def make_payload(full_name: str = "owner/proj", **repo_fields) -> dict:
    """Minimal Gitea push payload."""
    repository = {
        "full_name": full_name,
        "ssh_url": f"git@gitea.example.com:{full_name}.git",
    }
    repository.update(repo_fields)
    return {"ref": "refs/heads/main", "repository": repository}


def post_signed(client, payload, secret: bytes = SECRET, **kwargs):
    """POST a delivery signed the way Gitea signs it."""
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    headers = kwargs.pop("headers", {"X-Gitea-Signature": sign(secret, body)})
    content_type = kwargs.pop("content_type", "application/json")
    return client.post("/", data=body, headers=headers, content_type=content_type, **kwargs)


def completed(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> subprocess.CompletedProcess:
    """Fake result of subprocess.run (bytes, as git output is captured raw)."""
    return subprocess.CompletedProcess(
        args=["git"], returncode=returncode, stdout=stdout, stderr=stderr,
    )
