import io
import logging
import mimetypes
from dataclasses import dataclass
from typing import Optional

from plugins.gitea_pages.errors import GiteaPagesError, NotFound
from plugins.gitea_pages.policy import Allowance, allowance, is_ref_allowed
from plugins.gitea_pages.render import render_markdown
from plugins.gitea_pages.repo_config import RepoConfig, load_repo_config
from plugins.gitea_pages.target import RequestTarget

log = logging.getLogger(f"mkdocs.plugins.{__name__}")

DEFAULT_PAGES = "gitea-pages"
DEFAULT_PAGES_ALLOWALL = "gitea-pages-allowall"
INDEX_FILE = "index.html"
MARKDOWN_SUFFIX = ".md"


@dataclass(frozen=True)
class ServedFile:
    name: str
    content: bytes

    def open(self) -> io.BytesIO:
        return io.BytesIO(self.content)

    @property
    def media_type(self) -> str:
        if self.name.endswith(MARKDOWN_SUFFIX):
            return "text/html"
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed or "application/octet-stream"


@dataclass(frozen=True)
class _Attempt:
    """Repository, path and ref the request settled on, with its allowance."""

    repo: str
    file_path: str
    ref: str
    level: Allowance


def normalize_file_path(file_path: str) -> str:
    if file_path in ("", "/"):
        return INDEX_FILE
    return file_path


class ContentResolver:
    """
    Decide whether a request may be served and produce its content.

    One call to ``open`` performs, in order: the topic check on the inferred
    repository, the compatibility fallback onto the pages repository, the
    repository config lookup, ref validation, the raw fetch and Markdown
    rendering.
    """

    def __init__(self, client, pages: str = DEFAULT_PAGES, pages_allowall: str = DEFAULT_PAGES_ALLOWALL):
        self.client = client
        self.pages = pages or DEFAULT_PAGES
        self.pages_allowall = pages_allowall or DEFAULT_PAGES_ALLOWALL

    def allowance(self, owner: str, repo: str) -> Allowance:
        return allowance(self.client, owner, repo, self.pages, self.pages_allowall)

    def open(self, target: RequestTarget, compatibility_mode: bool = False) -> ServedFile:
        owner = target.owner
        attempt = self._primary_attempt(target)

        if attempt.level is Allowance.NONE:
            if attempt.repo == self.pages and not self.client.has_branch(owner, self.pages, self.pages):
                raise NotFound(f"{owner}/{attempt.repo} has no {self.pages} branch")
            if not compatibility_mode:
                raise NotFound(f"{owner}/{attempt.repo} does not allow pages")
            attempt = self._fallback_attempt(target, attempt)

        repo, file_path, ref, level = attempt.repo, attempt.file_path, attempt.ref, attempt.level

        config = self._repo_config(owner, repo, level)
        if config is None and (repo == self.pages or ref == self.pages):
            # a pages repository without config only ever serves its pages branch
            ref = self.pages
        elif not is_ref_allowed(ref, level, config):
            raise NotFound(f"ref '{ref}' of {owner}/{repo} is not allowed")

        log.debug(f"[gitea_pages] serving {owner}/{repo}/{file_path}@{ref or '<default>'}")
        content = self.client.fetch_raw(owner, repo, file_path, ref)

        if file_path.endswith(MARKDOWN_SUFFIX):
            content = render_markdown(content)

        return ServedFile(name=file_path, content=content)

    def _primary_attempt(self, target: RequestTarget) -> _Attempt:
        repo = target.repository or self.pages
        return _Attempt(
            repo=repo,
            file_path=normalize_file_path(target.file_path),
            ref=target.ref,
            level=self.allowance(target.owner, repo),
        )

    def _fallback_attempt(self, target: RequestTarget, primary: _Attempt) -> _Attempt:
        """
        Retry against the pages repository, reading the first path segment
        as a directory instead of a repository name.
        """
        owner = target.owner
        file_path = primary.file_path
        if target.repository and target.repository != self.pages:
            file_path = f"{target.repository}/{file_path}"

        level = self.allowance(owner, self.pages)
        if level is Allowance.NONE or not self.client.has_branch(owner, self.pages, self.pages):
            raise NotFound(f"{owner}/{self.pages} does not allow pages")

        log.debug(f"[gitea_pages] {owner}/{primary.repo} is not a pages repository, using {self.pages}")
        return _Attempt(
            repo=self.pages,
            file_path=file_path,
            ref=primary.ref or self.pages,
            level=level,
        )

    def _repo_config(self, owner: str, repo: str, level: Allowance) -> Optional[RepoConfig]:
        """
        Load the repository config. Only the pages repository and repositories
        allowing every ref may go without one.
        """
        try:
            config = load_repo_config(self.client, owner, repo, self.pages)
        except GiteaPagesError as exc:
            if repo != self.pages and level < Allowance.ALL:
                raise
            log.warning(f"[gitea_pages] ignoring unusable config of {owner}/{repo}: {exc}")
            return None

        if config is None and repo != self.pages and level < Allowance.ALL:
            raise NotFound(f"{owner}/{repo} has no {self.pages} config")
        return config
