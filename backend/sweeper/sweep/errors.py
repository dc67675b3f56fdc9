# sweeper/sweep/errors.py
"""
Exception taxonomy for the sweep pipeline.

Upstream clients raise these. The enumerator, actuator and walker catch
them and turn them into log lines; only ScanLevelFailure and
ScanInProgress ever reach a caller of the orchestrator.
"""

from __future__ import annotations

from typing import Optional


class SweepError(Exception):
    """Base class for all sweep errors."""


class ConfigurationMissing(SweepError):
    """A base URL (or other required setting) is not configured."""

    def __init__(self, message: str = "Base URL is missing in the config"):
        super().__init__(message)


class TransportError(SweepError):
    """
    Network failure or non-success HTTP status from an upstream API.

    status_code is set when the server answered with a non-200 status,
    and None when no response was received at all.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnexpectedResponseShape(SweepError):
    """Upstream answered 200 but the payload is not what we expect."""


class InvalidResponseBody(UnexpectedResponseShape):
    """Upstream answered 200 with a body that is not JSON at all."""


class UnknownSizeFormat(SweepError):
    """A FileRecord size string has a unit we cannot convert to bytes."""

    def __init__(self, size: str):
        super().__init__(f"Unknown size format: {size}")
        self.size = size


class ScanLevelFailure(SweepError):
    """An error escaped the orchestrator loop itself."""


class ScanInProgress(SweepError):
    """A scan was requested while another one is still running."""

    def __init__(self, message: str = "A scan is already in progress"):
        super().__init__(message)
