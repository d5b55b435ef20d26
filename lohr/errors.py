"""
Errors — Exception hierarchy for the daemon.

Request-scoped failures (AuthError and subclasses) are turned into HTTP
responses by the server. Job-scoped failures (ProcessError,
RemoteResolutionError) abort a single mirror job and are logged by the
worker. ConfigError is fatal at startup.
"""

from __future__ import annotations

from typing import Optional, Sequence


class LohrError(Exception):
    """Base class for all lohr errors."""


# ─── Request errors ─────────────────────────────────────────────


class AuthError(LohrError):
    """A webhook request was rejected before a job could be created."""

    status: int = 400
    code: str = "bad_request"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class WrongContentType(AuthError):
    code = "wrong_content_type"


class SignatureHeaderCount(AuthError):
    code = "signature_header_count"


class PayloadTooLarge(AuthError):
    status = 413
    code = "payload_too_large"


class SignatureMismatch(AuthError):
    code = "signature_mismatch"


class MalformedPayload(AuthError):
    code = "malformed_payload"


# ─── Startup errors ─────────────────────────────────────────────


class ConfigError(LohrError):
    """Raised when the configuration document is missing or invalid."""


# ─── Job errors ─────────────────────────────────────────────────


class ProcessError(LohrError):
    """
    An external git command exited unsuccessfully.

    A negative returncode means the process was killed by that signal
    (subprocess convention). ``target`` names the remote for push failures.
    """

    def __init__(
        self,
        operation: str,
        args: Sequence[str],
        returncode: int,
        stderr: str = "",
        target: Optional[str] = None,
    ):
        self.operation = operation
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
        self.target = target
        super().__init__(self._format_message())

    @property
    def status_description(self) -> str:
        if self.returncode < 0:
            return f"signal {-self.returncode}"
        return f"exit code {self.returncode}"

    def _format_message(self) -> str:
        where = f" ({self.target})" if self.target else ""
        message = f"couldn't {self.operation}{where}: {self.status_description}"
        if self.stderr:
            message += f", stderr:\n{self.stderr}"
        return message


class RemoteResolutionError(LohrError):
    """The `.lohr` control file could not be read for a reason other than absence."""
