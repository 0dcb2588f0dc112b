"""Domain-specific exceptions for the extraction pipeline and its collaborators.

The webhook router catches these and translates them into a user-facing reply.
"""
from __future__ import annotations


class PipelineError(Exception):
    """Base class for failures that abort one manifest extraction."""


class AcquisitionError(PipelineError):
    """Media cannot be requested (credentials missing, empty payload, etc.)."""


class TransportError(PipelineError):
    """Media fetch failed at the HTTP level (non-2xx or connection error)."""

    def __init__(self, message: str, *, status: int | None = None, url: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class EnhancementError(PipelineError):
    """Image is corrupt or in a format Pillow cannot decode."""


class ModelError(PipelineError):
    """Non-retryable failure calling the extraction model."""

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ModelRateLimitedError(ModelError):
    """Transient model failures persisted after every retry attempt."""


class DecodeError(PipelineError):
    """Model output does not contain a parseable JSON object."""


class ExternalServiceError(Exception):
    """Sheet sink or other upstream storage error."""
