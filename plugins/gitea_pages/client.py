import http.client
import json
import logging
from typing import Any, Set
from urllib import error as urllib_error
from urllib import parse as urllib_parse
from urllib import request as urllib_request

from plugins.gitea_pages.errors import ContentNotFound, RemoteError

log = logging.getLogger(f"mkdocs.plugins.{__name__}")

DEFAULT_TIMEOUT = 10


class GiteaClient:
    """
    Minimal client for the three Gitea API calls the resolver needs.

    Every request carries ``Authorization: token <token>`` and uses the
    configured timeout; the HTTP client never retries.
    """

    def __init__(self, server_url: str, token: str = "", timeout: float = DEFAULT_TIMEOUT):
        self.api_url = server_url.rstrip("/") + "/api/v1"
        self.token = token
        self.timeout = timeout

    def repo_url(self, owner: str, repo: str, *parts: str) -> str:
        segments = [owner, repo, *parts]
        return "/".join(
            [self.api_url, "repos"] + [urllib_parse.quote(s, safe="") for s in segments]
        )

    def _get(self, url: str, accept: str = "application/json") -> bytes:
        headers = {"Accept": accept}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        req = urllib_request.Request(url, headers=headers, method="GET")

        try:
            with urllib_request.urlopen(req, timeout=self.timeout) as response:
                return response.read()
        except urllib_error.HTTPError as exc:
            if exc.code == 404:
                raise ContentNotFound(f"{url} not found") from exc
            raise RemoteError(
                f"unexpected status code '{exc.code}' from {url}", remote_status=exc.code
            ) from exc
        except (urllib_error.URLError, http.client.HTTPException, OSError) as exc:
            # URLError wraps refused connections; timeouts and broken or truncated
            # responses arrive bare
            raise RemoteError(f"request to {url} failed: {exc}") from exc

    def _get_json(self, url: str) -> Any:
        body = self._get(url)
        try:
            return json.loads(body)
        except ValueError as exc:
            raise RemoteError(f"invalid JSON from {url}: {exc}") from exc

    def list_topics(self, owner: str, repo: str) -> Set[str]:
        data = self._get_json(self.repo_url(owner, repo, "topics"))
        topics = data.get("topics") if isinstance(data, dict) else None
        return set(topics or [])

    def has_branch(self, owner: str, repo: str, branch: str) -> bool:
        """Return True only when the API confirms ``branch`` exists.

        Any failure, including a network error, reads as "no branch".
        """
        try:
            data = self._get_json(self.repo_url(owner, repo, "branches", branch))
        except (ContentNotFound, RemoteError) as exc:
            log.debug(f"[gitea_pages] branch lookup {owner}/{repo}@{branch} failed: {exc}")
            return False
        return isinstance(data, dict) and data.get("name") == branch

    def fetch_raw(self, owner: str, repo: str, file_path: str, ref: str = "") -> bytes:
        """
        Fetch a file through the ``media`` endpoint, which answers with the
        LFS object for pointer files and the blob itself otherwise.
        """
        url = self.repo_url(owner, repo, "media") + "/" + urllib_parse.quote(
            file_path.lstrip("/"), safe="/"
        )
        if ref:
            url += "?" + urllib_parse.urlencode({"ref": ref})
        log.debug(f"[gitea_pages] fetching {url}")
        return self._get(url, accept="*/*")
