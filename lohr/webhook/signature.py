"""
Signature — Authenticate webhook requests.

The sender signs the raw request body with HMAC-SHA256 keyed by the shared
secret and puts the hex digest in the X-Gitea-Signature header.

Checks, in order (each failure is a distinct AuthError):

1. Content-Type is application/json
2. exactly one signature header
3. body within MAX_BODY_BYTES (enforced by Flask while reading)
4. HMAC matches
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
from typing import List, Optional

from flask import Request
from werkzeug.exceptions import RequestEntityTooLarge

from ..errors import (
    PayloadTooLarge,
    SignatureHeaderCount,
    SignatureMismatch,
    WrongContentType,
)

SIGNATURE_HEADER = "X-Gitea-Signature"
MAX_BODY_BYTES = 1024 * 1024  # 1 MiB


def validate_signature(secret: bytes, signature: str, body: bytes) -> bool:
    """True when signature is the hex HMAC-SHA256 of body under secret."""
    try:
        claimed = binascii.unhexlify(signature.strip())
    except (binascii.Error, ValueError):
        return False

    expected = hmac.new(secret, body, hashlib.sha256).digest()
    return hmac.compare_digest(expected, claimed)


def sign(secret: bytes, body: bytes) -> str:
    """Hex signature for body, as a webhook sender would compute it."""
    return hmac.new(secret, body, hashlib.sha256).hexdigest()


def signature_values(header: Optional[str]) -> List[str]:
    """
    Split the signature header into individual values.

    Repeated headers reach WSGI joined with commas, and a hex digest never
    contains one, so each comma-separated part is one header occurrence.
    """
    if header is None:
        return []
    return [part.strip() for part in header.split(",")]


def read_signed_body(request: Request, secret: bytes) -> bytes:
    """Run every precondition on request and return its authenticated body."""
    if request.mimetype != "application/json":
        raise WrongContentType("wrong content type")

    signatures = signature_values(request.headers.get(SIGNATURE_HEADER))
    if len(signatures) != 1:
        raise SignatureHeaderCount("request header needs exactly one signature")

    try:
        body = request.get_data(cache=True)
    except RequestEntityTooLarge:
        raise PayloadTooLarge("data limit exceeded")

    if not validate_signature(secret, signatures[0], body):
        raise SignatureMismatch("couldn't verify signature")

    return body
