from typing import Optional


class GiteaPagesError(Exception):
    """Base class for every failure the content resolver lets escape.

    ``status_code`` is the HTTP status the serving layer answers with.
    """

    status_code = 500


class NotFound(GiteaPagesError):
    """Repository, branch or file is absent, or serving it is not allowed.

    Both cases share one type so a response never reveals whether a
    private repository exists.
    """

    status_code = 404


class ContentNotFound(NotFound):
    """The remote API answered 404 for a raw file."""


class RemoteError(GiteaPagesError):
    """Non-success answer, network failure or timeout from the Gitea API."""

    status_code = 502

    def __init__(self, message: str, remote_status: Optional[int] = None):
        super().__init__(message)
        self.remote_status = remote_status


class ParseError(GiteaPagesError):
    """Malformed repository config or Markdown front matter."""

    status_code = 500
