"""Helper utilities for loading and normalising configuration inputs."""
from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from pydantic import ValidationError
from ruamel.yaml import YAML

from .errors import ConfigurationError
from .schema import Config

logger = logging.getLogger(__name__)


def parse_override_value(raw: str) -> Any:
    """Read the value of a ``path=value`` override as YAML.

    ``grid.nx=3`` gives an int, ``grid.nx=null`` clears the entry and
    ``region_keywords=[EQLNUM, FIPNUM]`` gives a list.
    """

    return YAML(typ="safe").load(raw.strip())


def apply_overrides_dict(payload: Dict[str, Any], overrides: Sequence[str]) -> Dict[str, Any]:
    """Apply dotted-path overrides to a configuration dictionary."""

    for item in overrides:
        key, sep, value_str = item.partition("=")
        parts = [segment for segment in key.strip().split(".") if segment]
        if not sep or not parts:
            raise ConfigurationError(f"Invalid override '{item}'; expected path=value")
        target: Any = payload
        for segment in parts[:-1]:
            if target.get(segment) is None:
                target[segment] = {}
            target = target[segment]
            if not isinstance(target, dict):
                raise ConfigurationError(f"Cannot apply override '{item}'; '{segment}' is not a mapping")
        target[parts[-1]] = parse_override_value(value_str)
    return payload


def load_config(path: Optional[Path] = None, overrides: Optional[Sequence[str]] = None) -> Config:
    """Load a YAML configuration file into a :class:`Config` instance.

    Without ``path`` the defaults are used, still subject to ``overrides``.
    A relative ``deck`` entry is resolved against the directory of the
    configuration file.
    """

    data: Any = {}
    base_dir: Optional[Path] = None
    if path is not None:
        yaml = YAML(typ="safe")
        source_path = Path(path).resolve()
        base_dir = source_path.parent
        with source_path.open("r", encoding="utf-8") as fh:
            data = yaml.load(fh)
        if data is None:
            data = {}
        logger.debug("Loaded configuration from %s", source_path)
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")
    data = apply_overrides_dict(data, overrides or ())
    try:
        cfg = Config(**data)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
    if base_dir is not None and cfg.deck is not None and not cfg.deck.is_absolute():
        cfg.deck = base_dir / cfg.deck
    return cfg


def configure_logging(level: int, suppress_warnings: bool = False) -> None:
    """Configure root logging and optionally silence Python warnings."""

    logging.basicConfig(level=level)
    root = logging.getLogger()
    root.setLevel(level)
    if suppress_warnings:
        warnings.filterwarnings("ignore")
    logging.captureWarnings(True)
