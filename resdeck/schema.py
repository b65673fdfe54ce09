"""Configuration schema for deck processing runs.

This module defines Pydantic models that mirror the structure of the YAML
configuration files accepted by :mod:`resdeck.run`.  Every block has
defaults so that an empty file (or no file at all) is a valid configuration.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from .errors import ConfigurationError
from .grid import GridDims


class ParserSettings(BaseModel):
    """Options for reading deck text."""

    unknown_keywords: Literal["error", "ignore"] = Field(
        "error",
        description="How to treat keywords the reader has no layout for: raise or skip with a warning.",
    )
    comment_prefix: str = Field("--", description="Start of a line comment in deck text.")

    @field_validator("comment_prefix")
    def _non_empty_prefix(cls, value: str) -> str:
        if not value or value.isspace():
            raise ConfigurationError("parser.comment_prefix must be a non-empty string")
        return value


class GridSettings(BaseModel):
    """Optional explicit grid size overriding the deck's ``DIMENS`` keyword."""

    nx: Optional[int] = Field(None, gt=0)
    ny: Optional[int] = Field(None, gt=0)
    nz: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def _all_or_none(self) -> "GridSettings":
        given = [v is not None for v in (self.nx, self.ny, self.nz)]
        if any(given) and not all(given):
            raise ConfigurationError("grid.nx, grid.ny and grid.nz must be given together")
        return self

    @property
    def is_set(self) -> bool:
        return self.nx is not None

    def to_dims(self) -> Optional[GridDims]:
        if not self.is_set:
            return None
        return GridDims(int(self.nx), int(self.ny), int(self.nz))


class OutputSettings(BaseModel):
    """Destination of the threshold-pressure table."""

    path: Optional[Path] = Field(None, description="Output file; the table is only logged when unset.")
    format: Literal["csv", "json", "parquet"] = "csv"

    @model_validator(mode="before")
    def _infer_format(cls, data: Any) -> Any:
        """Take the format from the file suffix when it is not given explicitly."""

        if not isinstance(data, dict):
            return data
        if data.get("format") is None and data.get("path") is not None:
            suffix = Path(str(data["path"])).suffix.lower().lstrip(".")
            if suffix in {"csv", "json", "parquet"}:
                data = dict(data)
                data["format"] = suffix
        return data


class Config(BaseModel):
    """Top-level configuration object."""

    deck: Optional[Path] = Field(None, description="Deck file to read; may be given on the command line instead.")
    parser: ParserSettings = ParserSettings()
    grid: GridSettings = GridSettings()
    output: OutputSettings = OutputSettings()
    region_keywords: Tuple[str, ...] = Field(
        ("EQLNUM",),
        description="Integer per-cell keywords the property container accepts.",
    )

    @field_validator("region_keywords")
    def _upper_keywords(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        names = tuple(str(v).strip().upper() for v in value)
        if any(not name for name in names):
            raise ConfigurationError("region_keywords entries must be non-empty")
        return names


__all__ = [
    "ParserSettings",
    "GridSettings",
    "OutputSettings",
    "Config",
]
