"""
Error taxonomy for the snapshot pipeline.

Every per-source error derives from FeedError so the orchestrator can isolate
it at the source boundary. ConfigurationError is the only error that is fatal
to a whole run, and it is raised before any fetch begins.
"""


class FeedError(Exception):
    """Base exception for errors scoped to a single source."""

    pass


class NetworkError(FeedError):
    """Transport-level failure: connection error or non-2xx HTTP status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class FetchTimeoutError(NetworkError):
    """Raised when a request or the whole run exceeds its timeout."""

    pass


class UpstreamError(FeedError):
    """The remote API reported an explicit failure status in its envelope."""

    def __init__(self, code: int | str | None, message: str | None = None):
        self.code = code
        self.message = message or ""
        super().__init__(f"Upstream returned code {code}: {self.message}")


class ParseError(FeedError):
    """Malformed payload: unparseable JSON or an unrecognized envelope shape."""

    pass


class ConfigurationError(Exception):
    """The source list or settings are malformed. Fatal to the run."""

    pass
