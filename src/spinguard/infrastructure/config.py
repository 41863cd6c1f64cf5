"""Settings loaded from ``spinguard.yml``."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import yaml
from rdflib import URIRef

from spinguard.constraints.report import OUTPUT_FORMATS
from spinguard.vocabulary import SPIN

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "spinguard.yml"

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class Settings:
    """Effective configuration for a spinguard run."""

    output_format: str = "turtle"
    include_source: bool = True
    log_level: str = "WARNING"
    constraint_predicate: URIRef = SPIN.constraint
    prefixes: dict[str, str] = field(default_factory=dict)


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring '%s' section in %s: expected a mapping", name, CONFIG_FILENAME)
        return {}
    return value


def load_settings(config_path: Path) -> Settings:
    """Load settings from *config_path*.

    Falls back to defaults for a missing file, an unreadable file, and for
    each individual key that is missing or invalid.
    """
    if not config_path.is_file():
        return Settings()

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError):
        logger.warning("Failed to read %s, using default settings", config_path)
        return Settings()

    if not isinstance(data, dict):
        return Settings()

    defaults = Settings()
    kwargs: dict[str, object] = {}

    output = _section(data, "output")
    fmt = output.get("format")
    if fmt is not None:
        if str(fmt) in OUTPUT_FORMATS:
            kwargs["output_format"] = str(fmt)
        else:
            logger.warning(
                "Unknown output format '%s', using '%s'", fmt, defaults.output_format
            )
    include_source = output.get("include_source")
    if isinstance(include_source, bool):
        kwargs["include_source"] = include_source

    level = _section(data, "logging").get("level")
    if level is not None:
        if str(level).upper() in VALID_LOG_LEVELS:
            kwargs["log_level"] = str(level).upper()
        else:
            logger.warning("Unknown log level '%s', using '%s'", level, defaults.log_level)

    predicate = _section(data, "rules").get("predicate")
    if isinstance(predicate, str) and predicate.strip():
        kwargs["constraint_predicate"] = URIRef(predicate.strip())

    prefixes = _section(data, "prefixes")
    if prefixes:
        kwargs["prefixes"] = {str(k): str(v) for k, v in prefixes.items()}

    return Settings(**kwargs)  # type: ignore[arg-type]
