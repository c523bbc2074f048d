r"""Line-oriented Markdown rewrites applied before HTML conversion.

Authors write callouts in two convenience dialects (``!>``/``?>`` prefixes and
Docusaurus ``:::type`` fences), highlight spans with ``==text==``, and use
``:shortcode:`` emoji. This module folds all of them into Markdown that the
core converter understands: a blockquote whose first line carries a
``[!TYPE]`` tag, ``<mark>`` tags, and literal emoji.

Example
-------
>>> from mdmanual.converter.preprocess import preprocess_markdown
>>> preprocess_markdown("!> Back up first\nthen upgrade")
'> [!IMPORTANT] Back up first\n> then upgrade'
"""

from __future__ import annotations

import re

HIGHLIGHT_PATTERN = re.compile(r"==([^=]+)==")
EMOJI_PATTERN = re.compile(r":[a-z0-9_+-]+:")
DIRECTIVE_FENCE = ":::"

DIRECTIVE_TYPES: dict[str, str] = {
    "note": "NOTE",
    "tip": "TIP",
    "info": "NOTE",
    "warning": "WARNING",
    "danger": "CAUTION",
    "caution": "CAUTION",
}

PREFIX_ALERTS: dict[str, str] = {
    "!> ": "IMPORTANT",
    "?> ": "TIP",
}

EMOJI_TABLE: dict[str, str] = {
    ":+1:": "\U0001f44d",
    ":-1:": "\U0001f44e",
    ":heart:": "❤️",
    ":star:": "⭐",
    ":fire:": "\U0001f525",
    ":rocket:": "\U0001f680",
    ":sparkles:": "✨",
    ":eyes:": "\U0001f440",
    ":clap:": "\U0001f44f",
    ":muscle:": "\U0001f4aa",
    ":pray:": "\U0001f64f",
    ":wave:": "\U0001f44b",
    ":warning:": "⚠️",
    ":x:": "❌",
    ":white_check_mark:": "✅",
    ":heavy_check_mark:": "✔️",
    ":question:": "❓",
    ":exclamation:": "❗",
    ":bangbang:": "‼️",
    ":info:": "ℹ️",
    ":bulb:": "\U0001f4a1",
    ":memo:": "\U0001f4dd",
    ":book:": "\U0001f4d6",
    ":smile:": "\U0001f60a",
    ":grin:": "\U0001f601",
    ":joy:": "\U0001f602",
    ":thinking:": "\U0001f914",
    ":sunglasses:": "\U0001f60e",
    ":sob:": "\U0001f62d",
    ":confused:": "\U0001f615",
    ":rage:": "\U0001f621",
    ":bug:": "\U0001f41b",
    ":wrench:": "\U0001f527",
    ":hammer:": "\U0001f528",
    ":gear:": "⚙️",
    ":lock:": "\U0001f512",
    ":key:": "\U0001f511",
    ":package:": "\U0001f4e6",
    ":link:": "\U0001f517",
    ":zap:": "⚡",
    ":construction:": "\U0001f6a7",
    ":recycle:": "♻️",
    ":trash:": "\U0001f5d1️",
    ":arrow_right:": "➡️",
    ":arrow_left:": "⬅️",
    ":arrow_up:": "⬆️",
    ":arrow_down:": "⬇️",
    ":point_right:": "\U0001f449",
    ":point_left:": "\U0001f448",
    ":point_up:": "\U0001f446",
    ":point_down:": "\U0001f447",
}


def _parse_directive(trimmed: str) -> tuple[str, str] | None:
    """Return ``(alert_type, title)`` for a ``:::type[Title]`` opener."""
    if not trimmed.startswith(DIRECTIVE_FENCE) or trimmed.endswith(DIRECTIVE_FENCE):
        return None
    rest = trimmed[len(DIRECTIVE_FENCE) :]
    type_part = rest
    title = ""
    bracket = rest.find("[")
    if bracket != -1:
        type_part = rest[:bracket]
        close = rest.find("]", bracket)
        if close != -1:
            title = rest[bracket + 1 : close]
    alert_type = DIRECTIVE_TYPES.get(type_part.strip().lower())
    if alert_type is None:
        return None
    return alert_type, title


def preprocess_alerts(content: str) -> str:
    """Rewrite ``!>``/``?>`` callouts and ``:::`` directives as alert blockquotes.

    Unknown directive types pass through as literal text.
    """
    lines: list[str] = []
    in_prefix_alert = False
    in_directive = False

    for line in content.split("\n"):
        trimmed = line.strip()

        directive = _parse_directive(trimmed)
        if directive is not None:
            alert_type, title = directive
            in_directive = True
            if title:
                lines.append(f"> [!{alert_type}] **{title}**")
            else:
                lines.append(f"> [!{alert_type}]")
            continue

        if in_directive:
            if trimmed == DIRECTIVE_FENCE:
                in_directive = False
                lines.append("")
            elif trimmed:
                lines.append(f"> {line}")
            else:
                lines.append(">")
            continue

        prefix = next((p for p in PREFIX_ALERTS if trimmed.startswith(p)), None)
        if prefix is not None:
            in_prefix_alert = True
            lines.append(f"> [!{PREFIX_ALERTS[prefix]}] {trimmed[len(prefix):]}")
        elif in_prefix_alert:
            if trimmed:
                lines.append(f"> {line}")
            else:
                in_prefix_alert = False
                lines.append("")
        else:
            lines.append(line)
    return "\n".join(lines)


def preprocess_highlight(content: str) -> str:
    """Replace ``==text==`` spans with ``<mark>`` tags."""
    return HIGHLIGHT_PATTERN.sub(r"<mark>\1</mark>", content)


def preprocess_emoji(content: str) -> str:
    """Replace known ``:shortcode:`` tokens; unknown tokens are kept."""
    return EMOJI_PATTERN.sub(
        lambda match: EMOJI_TABLE.get(match.group(0), match.group(0)), content
    )


def preprocess_markdown(content: str) -> str:
    """Apply every pre-conversion rewrite in order."""
    content = preprocess_alerts(content)
    content = preprocess_highlight(content)
    return preprocess_emoji(content)


__all__ = [
    "DIRECTIVE_TYPES",
    "EMOJI_TABLE",
    "preprocess_alerts",
    "preprocess_emoji",
    "preprocess_highlight",
    "preprocess_markdown",
]
