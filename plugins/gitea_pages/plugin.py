"""
Serve static sites straight out of Gitea repositories.

The plugin owns the configuration and the long-lived objects (API client and
content resolver); the HTTP layer calls ``serve`` once per request.
"""

import logging

from mkdocs.config import config_options as c
from mkdocs.exceptions import ConfigurationError
from mkdocs.plugins import BasePlugin

from plugins.gitea_pages.client import DEFAULT_TIMEOUT, GiteaClient
from plugins.gitea_pages.content import (
    DEFAULT_PAGES,
    DEFAULT_PAGES_ALLOWALL,
    ContentResolver,
    ServedFile,
)
from plugins.gitea_pages.target import infer_target

log = logging.getLogger(f"mkdocs.plugins.{__name__}")


class GiteaPagesPlugin(BasePlugin):
    """Gitea pages server.

    Configuration options:
    - server (url): Base URL of the Gitea instance.
    - token (str): Access token sent with every API call.
    - gitea_pages (str): Name of the default repository, of its branch and
      of the topic that opts a repository in.
    - gitea_pages_allowall (str): Topic allowing every ref of a repository.
    - domain (str): Wildcard domain; when empty the repository is taken from
      the first path segment.
    - timeout (int|float): Seconds before a Gitea API call is abandoned.
    """

    config_scheme = (
        ("server", c.URL(required=True)),
        ("token", c.Type(str, default="")),
        ("gitea_pages", c.Type(str, default=DEFAULT_PAGES)),
        ("gitea_pages_allowall", c.Type(str, default=DEFAULT_PAGES_ALLOWALL)),
        ("domain", c.Type(str, default="")),
        ("timeout", c.Type((int, float), default=DEFAULT_TIMEOUT)),
    )

    def __init__(self):
        super().__init__()
        self.client = None
        self.resolver = None

    @property
    def domain(self) -> str:
        return (self.config.get("domain") or "").strip(".")

    @property
    def compatibility_mode(self) -> bool:
        return not self.domain

    def provision(self, options: dict) -> "GiteaPagesPlugin":
        errors, warnings = self.load_config(options)
        for key, warning in warnings:
            log.warning(f"[gitea_pages] option '{key}': {warning}")
        if errors:
            details = "; ".join(f"'{key}': {error}" for key, error in errors)
            raise ConfigurationError(f"invalid gitea_pages options: {details}")

        self.client = GiteaClient(
            self.config["server"],
            token=self.config["token"],
            timeout=self.config["timeout"],
        )
        self.resolver = ContentResolver(
            self.client,
            pages=self.config["gitea_pages"],
            pages_allowall=self.config["gitea_pages_allowall"],
        )
        mode = "path" if self.compatibility_mode else f"subdomain ({self.domain})"
        log.info(f"[gitea_pages] serving from {self.config['server']} in {mode} mode")
        return self

    def serve(self, host: str, path: str, ref: str = "") -> ServedFile:
        if self.resolver is None:
            raise RuntimeError("GiteaPagesPlugin.serve() called before provision()")
        target = infer_target(host, path, self.domain, ref)
        log.debug(f"[gitea_pages] {host}{path} -> {target}")
        return self.resolver.open(target, compatibility_mode=self.compatibility_mode)
