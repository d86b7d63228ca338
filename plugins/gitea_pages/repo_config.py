import logging
import tomllib
from dataclasses import dataclass
from typing import Optional, Tuple

from plugins.gitea_pages.errors import ContentNotFound, ParseError

log = logging.getLogger(f"mkdocs.plugins.{__name__}")

WILDCARD_REF = "*"


@dataclass(frozen=True)
class RepoConfig:
    """Per-repository settings read from ``<pages>.toml`` on the pages branch."""

    allowed_refs: Tuple[str, ...] = ()


def config_filename(pages_name: str) -> str:
    return f"{pages_name}.toml"


def parse_repo_config(raw: bytes) -> RepoConfig:
    """
    Parse a repository config document.

    ``allowedrefs`` may be a list of strings or a single string; a missing
    key means no ref is allowed.
    """
    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ParseError(f"invalid repository config: {exc}") from exc

    refs = data.get("allowedrefs", [])
    if isinstance(refs, str):
        refs = [refs]
    if not isinstance(refs, list) or not all(isinstance(r, str) for r in refs):
        raise ParseError("allowedrefs must be a list of strings")
    return RepoConfig(allowed_refs=tuple(refs))


def load_repo_config(client, owner: str, repo: str, pages_name: str) -> Optional[RepoConfig]:
    """Load the config from the pages ref; ``None`` when the file does not exist."""
    try:
        raw = client.fetch_raw(owner, repo, config_filename(pages_name), pages_name)
    except ContentNotFound:
        log.debug(f"[gitea_pages] no {config_filename(pages_name)} in {owner}/{repo}")
        return None
    config = parse_repo_config(raw)
    log.debug(f"[gitea_pages] {owner}/{repo} allowed refs: {list(config.allowed_refs)}")
    return config
