"""
Core Custom Exceptions

Domain errors raised by the conversion pipeline. Each carries the HTTP status
it maps to so the API layer (see :pymod:`pdf2word.api.errors`) can turn it
into a JSON body without knowing about individual pipeline stages.

Defined Exceptions:
- `ConversionError`: base class, HTTP 500 unless overridden.
- `ValidationError`: the upload was missing, of the wrong type or too large.
- `DocumentWriteError`: the Word document could not be generated or written.
- `NotFoundError`: a download was requested for a missing or expired file.
- `ServiceUnavailableError`: the process is shutting down.
- `ConversionTimeoutError`: the conversion exceeded the request ceiling.
- `InternalError`: any unexpected failure inside the pipeline.
- `ExtractionFailure`: PDF text extraction failed. Never leaves the
  extraction adapter; it is turned into placeholder text there.
"""

from __future__ import annotations

from typing import Any, Optional

__all__: list[str] = [
    "ConversionError",
    "ValidationError",
    "DocumentWriteError",
    "NotFoundError",
    "ServiceUnavailableError",
    "ConversionTimeoutError",
    "InternalError",
    "ExtractionFailure",
]


class ConversionError(Exception):
    """Base class for errors surfaced to HTTP clients."""

    status_code: int = 500

    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ConversionError):
    """Raised by the upload gatekeeper when a submission is not admitted."""

    status_code = 400


class DocumentWriteError(ConversionError):
    """Raised when the output document cannot be serialised to disk."""

    status_code = 500


class NotFoundError(ConversionError):
    status_code = 404


class ServiceUnavailableError(ConversionError):
    status_code = 503


class ConversionTimeoutError(ConversionError):
    status_code = 504


class ExtractionFailure(Exception):
    """Raised inside the PDF adapter when the parser cannot read the file."""

    pass


class InternalError(ConversionError):
    status_code = 500
