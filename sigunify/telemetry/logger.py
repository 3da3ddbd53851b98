"""Logging setup for the statement driver, the unifier and the CLI.

Configuration comes from ``configs/logging.yaml`` and is applied once through
:func:`logging.config.dictConfig`.  Sections missing from the file fall back
to the built-in defaults, so a file that only tweaks ``loggers`` still gets a
console handler.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from threading import RLock
from typing import Any, Mapping

import yaml

ROOT_LOGGER = "sigunify"

LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"

_SECTIONS = ("version", "disable_existing_loggers", "formatters", "handlers", "root", "loggers")

_lock = RLock()
_configured = False


def _default_config() -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": "%(levelname)s %(name)s: %(message)s"}},
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "plain",
            }
        },
        "root": {"level": "WARNING", "handlers": ["stderr"]},
        "loggers": {ROOT_LOGGER: {"level": "INFO", "handlers": ["stderr"], "propagate": False}},
    }


def load_logging_config(path: Path = LOGGING_CONFIG_PATH) -> dict[str, Any]:
    """Return the dictConfig mapping for ``path`` layered over the defaults."""

    config = _default_config()
    if not path.exists():
        return config
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logging.getLogger(ROOT_LOGGER).warning("ignoring unreadable %s: %s", path, exc)
        return config
    if not isinstance(data, Mapping):
        return config
    for section in _SECTIONS:
        if section in data:
            config[section] = data[section]
    return config


def configure(path: Path | None = None, *, force: bool = False) -> None:
    """Apply the logging configuration; later calls are no-ops unless ``force``."""

    global _configured
    with _lock:
        if _configured and not force:
            return
        logging.config.dictConfig(load_logging_config(path or LOGGING_CONFIG_PATH))
        _configured = True


def set_level(level: int | str) -> None:
    """Adjust the ``sigunify`` logger tree, e.g. from ``--verbose``."""

    configure()
    logging.getLogger(ROOT_LOGGER).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger below ``sigunify``; bare names are prefixed."""

    if not isinstance(name, str) or not name:
        raise ValueError("logger name must be a non-empty string")
    configure()
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


__all__ = ["LOGGING_CONFIG_PATH", "configure", "get_logger", "load_logging_config", "set_level"]
