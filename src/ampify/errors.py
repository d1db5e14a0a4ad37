"""Exceptions raised by ampify.

Most per-node problems (missing src, unknown size, unknown tag family,
unrecognised embed URL) are resolved locally and never raise. The classes
here cover what does reach the caller.
"""


class AmpifyError(Exception):
    """Base class for ampify errors."""


class RemoteRequestError(AmpifyError):
    """Base class for failures of the remote GET collaborator."""


class FailedToGetFromRemoteUrl(RemoteRequestError):
    """Fetching a single URL failed (network error or bad HTTP status)."""

    def __init__(self, url: str, status: int | None = None, reason: str | None = None):
        self.url = url
        self.status = status
        self.reason = reason
        detail = f"status {status}" if status is not None else (reason or "unknown error")
        super().__init__(f"Failed to fetch {url}: {detail}")


class StubConfigurationError(RemoteRequestError):
    """A stubbed remote request was asked for a URL it has no response for."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Trying to stub a remote request for an unknown URL: {url}."
        )


class InternalInvariantViolation(AmpifyError):
    """Layout synthesis reached a state the fallback stage should prevent."""


class SanitizationCancelled(AmpifyError):
    """The host cancelled a sanitize pass before all nodes were finalized.

    ``partial_html`` holds the document as it stood when the pass stopped:
    finalized nodes are converted, the rest are untouched.
    """

    partial_html: str | None = None
