"""Command line runner: read a deck and write its threshold pressure table.

Usage:
    python -m resdeck.run --deck CASE.DATA --output thpres.csv
    python -m resdeck.run --config run.yml --override output.format=json
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from . import config_utils
from .deck import Deck, DeckParser
from .errors import ConfigurationError, ResDeckError
from .grid import GridDims
from .io import writer
from .properties import GridProperties, KeywordInfo
from .schema import Config
from .thpres import ThresholdPressureTable, build_threshold_pressure

logger = logging.getLogger(__name__)


def region_keyword_infos(cfg: Config) -> List[KeywordInfo]:
    """Integer region keywords default to 0, i.e. no region assigned."""
    return [KeywordInfo(name, 0, "") for name in cfg.region_keywords]


def prepare_grid_properties(deck: Deck, cfg: Config) -> GridProperties:
    dims = cfg.grid.to_dims()
    if dims is None:
        dims = GridDims.from_deck(deck)
    else:
        logger.info("Using grid dimensions %s from configuration", dims.dims)
    props = GridProperties(dims, region_keyword_infos(cfg))
    props.load_from_deck(deck)
    return props


def process_deck(cfg: Config, deck_path: Optional[Path] = None) -> Tuple[Deck, ThresholdPressureTable]:
    """Read the configured deck and build its threshold pressure table."""

    path = deck_path or cfg.deck
    if path is None:
        raise ConfigurationError("No deck given; use --deck or set 'deck' in the configuration")
    deck = DeckParser(cfg.parser, region_keywords=cfg.region_keywords).parse_file(path)
    props = prepare_grid_properties(deck, cfg)
    table = build_threshold_pressure(deck, props)
    return deck, table


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the region threshold pressure table of a deck")
    parser.add_argument("--deck", type=Path, help="Deck file to read (overrides 'deck' in the config)")
    parser.add_argument("--config", type=Path, help="Path to YAML configuration")
    parser.add_argument("--output", type=Path, help="Output file (overrides output.path)")
    parser.add_argument(
        "--format",
        choices=("csv", "json", "parquet"),
        help="Output format (overrides output.format)",
    )
    parser.add_argument(
        "--override",
        action="append",
        default=[],
        metavar="PATH=VALUE",
        help="Override a configuration value using dotted paths; may be repeated",
    )
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``python -m resdeck.run``; returns the exit code."""

    args = _parse_args(argv)
    config_utils.configure_logging(logging.WARNING if args.quiet else logging.INFO)

    overrides = list(args.override)
    if args.output is not None:
        overrides.append(f"output.path={args.output}")
    if args.format is not None:
        overrides.append(f"output.format={args.format}")
    try:
        cfg = config_utils.load_config(args.config, overrides)
        _, table = process_deck(cfg, args.deck)
    except (ResDeckError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    if table.is_empty:
        logger.info("Threshold pressure table is empty")
    else:
        logger.info("Threshold pressures [Pa]:\n%s", table.to_frame().to_string())
    if cfg.output.path is not None:
        out = writer.write_table(table, cfg.output.path, cfg.output.format)
        logger.info("Wrote %s table to %s", cfg.output.format, out)
    return 0


if __name__ == "__main__":  # pragma: no cover - standard CLI entrypoint
    raise SystemExit(main())
