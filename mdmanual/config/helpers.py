"""Utility helpers shared by the mdmanual configuration loader."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .models import ConfigError, PageHeuristics, RenderOptions


def _optional_str(value: object | None) -> str:
    """Return a stripped string value or an empty string."""
    if value is None:
        return ""
    return str(value).strip()


def resolve_value(*candidates: str | None, default: str = "") -> str:
    """Return the first non-empty candidate, falling back to ``default``.

    Examples
    --------
    >>> resolve_value("", "from config", "fallback")
    'from config'
    >>> resolve_value(None, "", default="Document")
    'Document'
    """
    for candidate in candidates:
        if candidate:
            return candidate
    return default


def _coerce_number(key: str, value: object, kind: type[int] | type[float]) -> int | float:
    """Convert ``value`` to ``kind`` or raise ConfigError naming ``key``."""
    if isinstance(value, bool):
        msg = f"Config value '{key}' must be a number, not a boolean."
        raise ConfigError(msg)
    try:
        number = kind(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        msg = f"Config value '{key}' must be a number, got {value!r}."
        raise ConfigError(msg) from exc
    if number < 0:
        msg = f"Config value '{key}' must not be negative."
        raise ConfigError(msg)
    return number


def _build_heuristics(payload: typ.Mapping[str, typ.Any] | None) -> PageHeuristics:
    """Build PageHeuristics from the ``analysis`` mapping, keeping defaults."""
    base = PageHeuristics()
    if not payload:
        return base
    values: dict[str, int] = {}
    for field in dc.fields(PageHeuristics):
        if field.name in payload:
            values[field.name] = int(
                _coerce_number(f"analysis.{field.name}", payload[field.name], int)
            )
    return dc.replace(base, **values)


def _build_render_options(payload: typ.Mapping[str, typ.Any] | None) -> RenderOptions:
    """Build RenderOptions from the ``render`` mapping, keeping defaults."""
    base = RenderOptions()
    if not payload:
        return base
    landscape = payload.get("landscape", base.landscape)
    if not isinstance(landscape, bool):
        msg = "Config value 'render.landscape' must be true or false."
        raise ConfigError(msg)
    values: dict[str, float] = {}
    for key in ("scale", "timeout", "settle_seconds", "diagram_settle_seconds"):
        if key in payload:
            values[key] = float(_coerce_number(f"render.{key}", payload[key], float))
    return dc.replace(base, landscape=landscape, **values)


__all__ = [
    "_build_heuristics",
    "_build_render_options",
    "_optional_str",
    "resolve_value",
]
