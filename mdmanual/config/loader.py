"""Load ``AUTHORS.yml`` style YAML into typed dataclasses."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .helpers import _build_heuristics, _build_render_options, _optional_str
from .models import DocumentConfig, DocumentMeta

logger = logging.getLogger(__name__)


def load_document_config(path: Path | None) -> DocumentConfig:
    """Load the optional YAML file describing project and document metadata.

    Parameters
    ----------
    path : Path or None
        Filesystem path to the YAML file (for example ``AUTHORS.yml``). When
        ``None`` the defaults are returned without touching the filesystem.

    Returns
    -------
    DocumentConfig
        Parsed configuration. A missing or unparsable file degrades to the
        defaults with a warning rather than aborting the build.

    Raises
    ------
    ConfigError
        If the ``analysis`` or ``render`` blocks contain invalid values.

    Examples
    --------
    >>> from pathlib import Path
    >>> from mdmanual.config import load_document_config
    >>> config = load_document_config(Path("AUTHORS.yml"))  # doctest: +SKIP
    >>> config.document.title  # doctest: +SKIP
    'User Manual'
    """
    if path is None:
        return DocumentConfig()
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return DocumentConfig()

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except (OSError, YAMLError) as exc:
        logger.warning("Failed to parse config file %s: %s", path, exc)
        return DocumentConfig()
    if not isinstance(loaded, dict):
        logger.warning("Config file %s is not a mapping; using defaults", path)
        return DocumentConfig()

    raw: dict[str, typ.Any] = dict(loaded)
    document_raw = raw.get("document") or {}
    if not isinstance(document_raw, dict):
        document_raw = {}

    config = DocumentConfig(
        project_name=_optional_str(raw.get("project_name")),
        organization=_optional_str(raw.get("organization")),
        copyright=_optional_str(raw.get("copyright")),
        document=_build_document_meta(document_raw),
        analysis=_build_heuristics(raw.get("analysis")),
        render=_build_render_options(raw.get("render")),
    )
    logger.info("Loaded config: %s", path)
    return config


def _build_document_meta(payload: typ.Mapping[str, typ.Any]) -> DocumentMeta:
    """Build DocumentMeta from the ``document`` mapping."""
    base = DocumentMeta()
    return DocumentMeta(
        title=_optional_str(payload.get("title")),
        subtitle=_optional_str(payload.get("subtitle")),
        author=_optional_str(payload.get("author")),
        header=_optional_str(payload.get("header")),
        footer=_optional_str(payload.get("footer")),
        date_format=_optional_str(payload.get("date_format")) or base.date_format,
    )


__all__ = ["load_document_config"]
