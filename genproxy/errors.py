"""Error taxonomy shared by the proxy routes and the job machinery.

Every error carries a machine-readable ``kind`` and the HTTP status the
route boundary should answer with. ``main.py`` turns them into
``{"error": message, "kind": kind}`` bodies.
"""

from typing import Optional


class ProxyError(Exception):
    """Base class for every error the service reports to callers."""

    kind = "internal-error"
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class InputValidationError(ProxyError):
    """Missing or malformed caller input. Raised before any outbound call."""

    kind = "validation-error"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.field = field

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class UnknownModel(ProxyError):
    kind = "unknown-model"
    status_code = 400


class ConfigError(ProxyError):
    """A required credential or setting is absent."""

    kind = "config-error"


class SubmissionError(ProxyError):
    """Transport failure or non-2xx answer on the initial submission."""

    kind = "submission-error"

    def __init__(self, message: str, provider_status: Optional[int] = None):
        super().__init__(message)
        self.provider_status = provider_status


class UnexpectedResponse(ProxyError):
    """Submission body holds neither a result nor a job identifier."""

    kind = "unexpected-response"


class PollError(ProxyError):
    """Transport failure or non-2xx answer while checking job status."""

    kind = "poll-error"

    def __init__(self, message: str, provider_status: Optional[int] = None):
        status = provider_status if provider_status and provider_status >= 400 else None
        super().__init__(message, status)
        self.provider_status = provider_status


class ProviderFailure(ProxyError):
    """The provider answered 2xx but declared the job failed."""

    kind = "provider-failure"


class JobTimedOut(ProxyError):
    kind = "timed-out"


class PollCancelled(ProxyError):
    kind = "cancelled"
    status_code = 499


class UnrecognizedResponse(ProxyError):
    kind = "unrecognized-response"


class NoTranscriptionFound(ProxyError):
    kind = "no-transcription-found"
