"""HTML rewrites applied to each converted Markdown file.

The post-pass operates on a parsed tree (BeautifulSoup) rather than on the
serialized markup: it turns diagram code blocks into containers for the
client-side diagram renderer, restyles ``[!TYPE]`` blockquotes as alert
boxes, inlines local images and stylesheets, splices ``@ui:`` component
snippets, and normalizes climbing ``../assets/`` paths.

Missing assets never abort a build: each failure is logged as a warning and
the original markup is kept.
"""

from __future__ import annotations

import base64
import dataclasses as dc
import logging
import mimetypes
import re
from pathlib import Path
from urllib.parse import unquote

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

logger = logging.getLogger(__name__)

DIAGRAM_LANGUAGES = ("mermaid",)
ALERT_MARKER = re.compile(r"^\s*\[!(NOTE|TIP|IMPORTANT|WARNING|CAUTION)\]\s*")
UI_MARKER = re.compile(r"^\s*@ui:([A-Za-z0-9_-]+)\s*$")
CLIMBING_ASSETS = re.compile(r"^(?:\.\./)+assets/")
UI_SEARCH_DEPTH = 5
REMOTE_PREFIXES = ("http://", "https://", "//", "data:")


@dc.dataclass(frozen=True, slots=True)
class AlertStyle:
    """CSS class and Font Awesome icon for one alert type."""

    css_class: str
    icon: str


ALERT_STYLES: dict[str, AlertStyle] = {
    "NOTE": AlertStyle("alert-note", "fa-info-circle"),
    "TIP": AlertStyle("alert-tip", "fa-lightbulb"),
    "IMPORTANT": AlertStyle("alert-important", "fa-exclamation-circle"),
    "WARNING": AlertStyle("alert-warning", "fa-triangle-exclamation"),
    "CAUTION": AlertStyle("alert-caution", "fa-radiation"),
}


def _is_remote(url: str) -> bool:
    return url.lower().startswith(REMOTE_PREFIXES)


def convert_diagram_blocks(soup: BeautifulSoup) -> None:
    """Replace highlighted diagram code blocks with ``<div class="mermaid">``."""
    for block in soup.find_all("div", class_="codehilite"):
        if block.get("data-language") not in DIAGRAM_LANGUAGES:
            continue
        container = soup.new_tag("div", attrs={"class": "mermaid"})
        container.string = block.get_text()
        block.replace_with(container)


def _alert_type(blockquote: Tag) -> tuple[str, NavigableString] | None:
    """Return the alert type and marker text node for an alert blockquote."""
    first = blockquote.find(True, recursive=False)
    if first is None or first.name != "p" or not first.contents:
        return None
    lead = first.contents[0]
    if not isinstance(lead, NavigableString) or isinstance(lead, Comment):
        return None
    match = ALERT_MARKER.match(str(lead))
    if match is None:
        return None
    return match.group(1), lead


def _split_title_body(soup: BeautifulSoup, paragraph: Tag) -> None:
    """Turn ``<p><strong>Title</strong>: body</p>`` into title and body blocks."""
    contents = paragraph.contents
    if len(contents) < 2:
        return
    strong, rest = contents[0], contents[1]
    if not isinstance(strong, Tag) or strong.name != "strong" or strong.string is None:
        return
    if not isinstance(rest, NavigableString) or not rest.lstrip().startswith(":"):
        return
    remainder = rest.lstrip()[1:].lstrip()
    if not remainder and len(contents) == 2:
        return

    title = soup.new_tag("div", attrs={"class": "alert-title"})
    title.string = strong.string
    body = soup.new_tag("p", attrs={"class": "alert-body"})
    if remainder:
        body.append(remainder)
    for node in list(contents[2:]):
        body.append(node.extract())
    paragraph.insert_before(title)
    paragraph.replace_with(body)


def convert_alerts(soup: BeautifulSoup) -> None:
    """Restyle ``[!TYPE]`` blockquotes as alert boxes with icon and content."""
    for blockquote in soup.find_all("blockquote"):
        detected = _alert_type(blockquote)
        if detected is None:
            continue
        alert_type, lead = detected
        style = ALERT_STYLES[alert_type]
        remainder = ALERT_MARKER.sub("", str(lead), count=1)
        if remainder:
            lead.replace_with(remainder)
        else:
            lead.extract()

        box = soup.new_tag("div", attrs={"class": f"alert {style.css_class}"})
        icon_box = soup.new_tag("div", attrs={"class": "alert-icon"})
        icon_box.append(soup.new_tag("i", attrs={"class": f"fas {style.icon}"}))
        content = soup.new_tag("div", attrs={"class": "alert-content"})
        for node in list(blockquote.contents):
            content.append(node.extract())
        box.append(icon_box)
        box.append(content)
        blockquote.replace_with(box)

        for paragraph in content.find_all("p"):
            _split_title_body(soup, paragraph)


def _data_uri(path: Path) -> str:
    """Return a base64 data URI for the file at ``path``."""
    payload = path.read_bytes()
    mime_type, _ = mimetypes.guess_type(path.name)
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type or 'application/octet-stream'};base64,{encoded}"


def embed_images(soup: BeautifulSoup, source_file: Path) -> None:
    """Inline local ``<img>`` sources as data URIs, keeping the tag on failure."""
    base_dir = source_file.parent
    for image in soup.find_all("img", src=True):
        src = image["src"]
        if _is_remote(src):
            continue
        image_path = base_dir / unquote(src)
        try:
            image["src"] = _data_uri(image_path)
        except OSError as exc:
            logger.warning("Failed to read image for embedding: %s (%s)", image_path, exc)


def embed_stylesheets(soup: BeautifulSoup, source_file: Path) -> None:
    """Inline local stylesheet links as ``<style>`` blocks, keeping links on failure."""
    base_dir = source_file.parent
    for link in soup.find_all("link", href=True):
        if "stylesheet" not in (link.get("rel") or []):
            continue
        href = link["href"]
        if _is_remote(href):
            continue
        css_path = base_dir / unquote(href)
        try:
            css = css_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read CSS for embedding: %s (%s)", css_path, exc)
            continue
        style = soup.new_tag("style")
        style.string = f"\n{css}\n"
        link.replace_with(style)


def find_ui_component(name: str, start_dir: Path) -> Path | None:
    """Search ``assets/ui/<name>.html`` upward from ``start_dir``."""
    current = start_dir
    for _ in range(UI_SEARCH_DEPTH):
        candidate = current / "assets" / "ui" / f"{name}.html"
        if candidate.is_file():
            return candidate
        if current.parent == current:
            break
        current = current.parent
    return None


def expand_ui_components(soup: BeautifulSoup, source_file: Path) -> None:
    """Replace ``<!-- @ui:name -->`` markers with the matching snippet file."""
    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        match = UI_MARKER.match(str(comment))
        if match is None:
            continue
        name = match.group(1)
        snippet_path = find_ui_component(name, source_file.parent)
        if snippet_path is None:
            logger.warning("UI component not found: %s", name)
            continue
        try:
            snippet = snippet_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read UI component file: %s (%s)", snippet_path, exc)
            continue
        fragment = BeautifulSoup(snippet, "html.parser")
        nodes = list(fragment.contents)
        if nodes:
            comment.replace_with(*nodes)
        else:
            comment.extract()


def rewrite_asset_paths(soup: BeautifulSoup) -> None:
    """Rewrite ``src="../../assets/..."`` references to ``assets/...``."""
    for tag in soup.find_all(src=True):
        tag["src"] = CLIMBING_ASSETS.sub("assets/", tag["src"])


def postprocess_html(html: str, source_file: Path, *, embed_assets: bool) -> str:
    """Apply every post-conversion rewrite to one file's HTML.

    Parameters
    ----------
    html : str
        HTML produced by the Markdown converter.
    source_file : Path
        Markdown file the HTML came from; relative asset paths resolve
        against its directory.
    embed_assets : bool
        Inline local images and stylesheets.

    Returns
    -------
    str
        The rewritten HTML fragment.
    """
    soup = BeautifulSoup(html, "html.parser")
    convert_diagram_blocks(soup)
    convert_alerts(soup)
    if embed_assets:
        embed_images(soup, source_file)
        embed_stylesheets(soup, source_file)
    expand_ui_components(soup, source_file)
    rewrite_asset_paths(soup)
    return str(soup)


__all__ = [
    "ALERT_STYLES",
    "AlertStyle",
    "convert_alerts",
    "convert_diagram_blocks",
    "embed_images",
    "embed_stylesheets",
    "expand_ui_components",
    "find_ui_component",
    "postprocess_html",
    "rewrite_asset_paths",
]
