import html
import re

import markdown
import yaml

from plugins.gitea_pages.errors import ParseError

FM_PATTERN = re.compile(r"^---\s*\n(?:(.*?)\n)??---\s*\n?", re.DOTALL)
MD_EXTENSIONS = ["fenced_code", "tables"]


def split_front_matter(source_text: str):
    """
    Return (front_matter_dict, body_text). If no FM, dict={} and body=source_text.
    """
    m = FM_PATTERN.match(source_text)
    if not m:
        return {}, source_text
    try:
        fm = yaml.safe_load(m.group(1) or "")
    except yaml.YAMLError as exc:
        raise ParseError(f"invalid front matter: {exc}") from exc
    if fm is None:
        fm = {}
    if not isinstance(fm, dict):
        raise ParseError("front matter must be a mapping")
    return fm, source_text[m.end() :]


def render_markdown(raw: bytes) -> bytes:
    """Render a Markdown document into a bare HTML page headed by its title."""
    text = raw.decode("utf-8", errors="replace")
    front_matter, body = split_front_matter(text)
    fragment = markdown.markdown(body, extensions=MD_EXTENSIONS)

    title = front_matter.get("title")
    title = html.escape(str(title)) if title is not None else ""

    page = f"<!DOCTYPE html>\n<html>\n<body>\n<h1>{title}</h1>{fragment}</body></html>"
    return page.encode("utf-8")
