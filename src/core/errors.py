"""Error types raised around a scheduling pass.

The engine itself never raises; these come from the collaborators that run
before it (fetch, decode, permission) or after it (sink submission).
"""

from __future__ import annotations

from typing import Optional


class NotigateError(Exception):
    """Base class for all notigate errors."""


class ConfigFetchError(NotigateError):
    """The configuration document could not be obtained."""


class ConfigUnreachable(ConfigFetchError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Config unreachable at {url}: {reason}")
        self.url = url
        self.reason = reason


class ConfigHttpError(ConfigFetchError):
    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"Config request to {url} failed with status {status}")
        self.url = url
        self.status = status


class ConfigDecodeError(ConfigFetchError):
    """The document was received but does not match the expected shape."""

    MISSING_FIELD = "missing_field"
    TYPE_MISMATCH = "type_mismatch"
    MISSING_VALUE = "missing_value"
    DATA_CORRUPTED = "data_corrupted"

    def __init__(self, kind: str, path: str, detail: Optional[str] = None) -> None:
        message = f"{kind} at '{path or '<root>'}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.kind = kind
        self.path = path
        self.detail = detail


class PermissionDenied(NotigateError):
    """Notification delivery has not been granted."""


class SinkSubmissionFailed(NotigateError):
    """A single resolved notification could not be handed to the sink."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Failed to schedule {identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason
