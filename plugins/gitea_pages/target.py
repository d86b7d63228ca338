from dataclasses import dataclass

from plugins.gitea_pages.errors import NotFound


@dataclass(frozen=True)
class RequestTarget:
    """Where a request points: empty ``repository``/``ref`` mean "use the default"."""

    owner: str
    repository: str
    file_path: str
    ref: str = ""


def strip_port(host: str) -> str:
    """Drop a ``:port`` suffix from a Host header value."""
    if host.startswith("["):
        # IPv6 literal, keep the brackets together
        return host.split("]", 1)[0] + "]"
    return host.split(":", 1)[0]


def infer_target(host: str, path: str, domain: str = "", ref: str = "") -> RequestTarget:
    """
    Map a request onto (owner, repository, file path, ref).

    Without a configured ``domain`` the owner is the first host label and
    the first path segment names the repository:

        owner.anything/<repo>/<file>    repo=<repo>, file=<file>
        owner.anything/<file>           repo=<default>, file=<file>

    With a ``domain`` the host carries everything and the path is the file:

        <owner>.domain                  repo=<default>, ref=<query>
        <repo>.<owner>.domain           ref=<query>
        <ref>.<repo>.<owner>.domain

    Labels in front of the third one are part of the ref, so a tag such as
    ``v1.2`` is reachable as ``v1.2.repo.owner.domain``. Host names compare
    case-insensitively; a host that is not a subdomain of ``domain`` raises
    NotFound.
    """
    host = strip_port(host).rstrip(".").lower()
    if domain:
        domain = domain.strip(".").lower()
        if not host.endswith("." + domain):
            raise NotFound(f"host '{host}' is not under {domain}")
        host = host[: -len(domain) - 1]
    labels = host.split(".")

    if not domain:
        segments = path.lstrip("/").split("/")
        if len(segments) == 1:
            return RequestTarget(labels[0], "", segments[0], ref)
        return RequestTarget(labels[0], segments[0], "/".join(segments[1:]), ref)

    if len(labels) == 1:
        return RequestTarget(labels[0], "", path, ref)
    if len(labels) == 2:
        return RequestTarget(labels[1], labels[0], path, ref)
    return RequestTarget(labels[-1], labels[-2], path, ".".join(labels[:-2]))
