import enum
import logging
from typing import Optional

from plugins.gitea_pages.errors import GiteaPagesError
from plugins.gitea_pages.repo_config import WILDCARD_REF, RepoConfig

log = logging.getLogger(f"mkdocs.plugins.{__name__}")


class Allowance(enum.IntEnum):
    """Which refs a repository's topics allow us to serve."""

    NONE = 0
    LIMITED = 1  # only what the repo config lists, or the pages branch
    ALL = 2


def allowance(client, owner: str, repo: str, pages_topic: str, allowall_topic: str) -> Allowance:
    """Read the repository topics on every call; failures fail closed."""
    try:
        topics = client.list_topics(owner, repo)
    except GiteaPagesError as exc:
        log.debug(f"[gitea_pages] topics of {owner}/{repo} unavailable: {exc}")
        return Allowance.NONE

    if allowall_topic in topics:
        return Allowance.ALL
    if pages_topic in topics:
        return Allowance.LIMITED
    return Allowance.NONE


def is_ref_allowed(ref: str, level: Allowance, config: Optional[RepoConfig]) -> bool:
    if level is Allowance.ALL:
        return True
    if config is None:
        return False
    return ref in config.allowed_refs or WILDCARD_REF in config.allowed_refs
