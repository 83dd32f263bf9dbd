# =============================================================================
# core/errors.py  -  Error Taxonomy
# =============================================================================
#
# Every way a tool call can fail maps onto exactly one of these:
#
#   ValidationError         input out of bounds / unknown endpoint.
#                           Raised before any network call.
#   TransportError          DNS, connection refused, timeout.
#   UpstreamHttpError       openFDA answered with a non-2xx status.
#   MalformedResponseError  openFDA answered 2xx with a body that isn't JSON.
#
# None of them are retried.  The tool layer turns any FdaError into a single
# failed tool invocation.
# =============================================================================

from typing import Optional


class FdaError(Exception):
    """Base class for all openFDA tool failures."""


class ValidationError(FdaError):
    """Tool input rejected before dispatch."""


class TransportError(FdaError):
    """The request never got an HTTP response."""

    def __init__(self, url: str, cause: BaseException):
        self.url = url
        self.cause = cause
        super().__init__(f"openFDA request failed: {cause}")


class UpstreamHttpError(FdaError):
    """openFDA returned a non-success HTTP status."""

    def __init__(self, status: int, status_text: str, body: str = ""):
        self.status = status
        self.status_text = status_text
        self.body = body
        super().__init__(f"openFDA API error: {status} {status_text} - {body}")


class MalformedResponseError(FdaError):
    """A success response whose body could not be parsed as JSON."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"openFDA returned a non-JSON response{detail}")
