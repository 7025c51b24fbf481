# perevod/services/exceptions.py
"""
Exception types shared by the translation pipeline and the relay client.

Messages are user-facing (Russian, as shown in the status line); the `stage`
attribute names the pipeline step that failed.
"""

from typing import Optional


class PerevodError(Exception):
    """Base class for all pipeline errors."""

    stage = "pipeline"


class InputError(PerevodError):
    """Missing or unsupported input (file, request)."""

    stage = "input"


class ApiKeyError(PerevodError):
    """API key missing, too short, or rejected by the check translation."""

    stage = "credential"


class WorkbookReadError(PerevodError):
    """Input document cannot be parsed as a workbook."""

    stage = "parsing"


class TranslationAPIError(PerevodError):
    """A single relay/provider request failed (transport or non-2xx)."""

    stage = "provider"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class TooManyApiErrorsError(PerevodError):
    """Batch failures exceeded the per-run error budget."""

    stage = "provider"

    def __init__(self, message: str, api_errors: int = 0):
        super().__init__(message)
        self.api_errors = api_errors
