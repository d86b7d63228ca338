"""
HTTP front end for the gitea_pages plugin.

Run it with the Flask CLI, which calls the ``create_app`` factory:

    GITEA_PAGES_CONFIG=gitea-pages.yml flask --app plugins.gitea_pages.server:create_app run

The YAML file holds the plugin options (``server``, ``token``, ``domain``, ...).
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from flask import Flask, Response, request

from plugins.gitea_pages.errors import GiteaPagesError, NotFound
from plugins.gitea_pages.plugin import GiteaPagesPlugin

log = logging.getLogger(f"mkdocs.plugins.{__name__}")

CONFIG_ENV = "GITEA_PAGES_CONFIG"


def load_options(config_file: Optional[str]) -> dict:
    """Load plugin options from a YAML file; return {} if no file is given."""
    if not config_file:
        return {}
    path = Path(config_file)
    if not path.exists():
        raise FileNotFoundError(f"gitea_pages config not found at {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data or {}


def create_app(config_file: Optional[str] = None, **overrides) -> Flask:
    """Build the Flask app serving every GET path through the plugin."""
    options = load_options(config_file or os.environ.get(CONFIG_ENV))
    options.update(overrides)
    plugin = GiteaPagesPlugin().provision(options)

    app = Flask(__name__)
    app.extensions["gitea_pages"] = plugin

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def serve(path):
        served = plugin.serve(request.host, request.path, request.args.get("ref", ""))
        return Response(served.content, mimetype=served.media_type)

    @app.errorhandler(GiteaPagesError)
    def handle_pages_error(exc):
        if isinstance(exc, NotFound):
            log.debug(f"[gitea_pages] {request.host}{request.path}: {exc}")
            body = "Not Found"
        else:
            log.error(f"[gitea_pages] {request.host}{request.path}: {exc}")
            body = "Bad Gateway" if exc.status_code == 502 else "Internal Server Error"
        return Response(body, status=exc.status_code, mimetype="text/plain")

    return app
