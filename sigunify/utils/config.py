"""YAML loading for session configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

__all__ = ["load_config"]


def load_config(path: str | Path) -> dict[str, Any]:
    """Parse the YAML mapping stored at ``path``.

    An empty file is an empty mapping.  A missing file raises
    :class:`FileNotFoundError`; unparsable YAML or a root that is not a
    mapping raises :class:`ValueError` naming the file.
    """

    source = Path(path)
    if not source.is_file():
        raise FileNotFoundError(f"configuration file not found: {source}")
    try:
        document = yaml.safe_load(source.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"{source}: failed to parse configuration: {exc}") from exc
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ValueError(f"{source}: configuration root must be a mapping")
    return document
