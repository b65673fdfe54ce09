"""Deck model and a reader for the keywords used by :mod:`resdeck`.

A deck is an ordered sequence of sections (``RUNSPEC``, ``GRID``, ...).  Each
section holds keywords in file order, each keyword holds zero or more
records, and each record holds positional items which may be left unset.
Items are unset when defaulted with ``*`` / ``N*`` or when the record is
closed by ``/`` before reaching them.

Only the keyword layouts listed in :data:`KEYWORDS`, plus any extra region
keywords handed to :class:`DeckParser`, are understood.  There is no ``INCLUDE``
handling and no unit system conversion.
"""
from __future__ import annotations

import logging
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Literal, Optional, Sequence, Tuple, Union

from . import constants
from .errors import DeckDataError, DeckParseError, IndexBoundsError
from .schema import ParserSettings
from .warnings import DeckWarning

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"'[^']*'|\"[^\"]*\"|/|[^\s/]+")
_KEYWORD_RE = re.compile(r"^[A-Z][A-Z0-9_+-]{0,7}$")
_REPEAT_RE = re.compile(r"^(\d+)\*(.*)$")


@dataclass(frozen=True)
class ItemSpec:
    """Layout of one item in a keyword record."""

    name: str
    kind: type
    all_cells: bool = False


@dataclass(frozen=True)
class KeywordSpec:
    """Record layout of a keyword.

    ``records`` is ``"none"`` for flag keywords, ``"single"`` for keywords
    holding exactly one ``/``-terminated record and ``"multi"`` for keywords
    whose record list is closed by an empty ``/``.
    """

    name: str
    records: Literal["none", "single", "multi"]
    items: Tuple[ItemSpec, ...] = ()


def _flag(name: str) -> KeywordSpec:
    return KeywordSpec(name, "none")


def region_spec(name: str) -> KeywordSpec:
    """Layout of an integer region keyword holding one value per cell."""
    return KeywordSpec(name, "single", (ItemSpec("data", int, all_cells=True),))


KEYWORDS: Dict[str, KeywordSpec] = {
    **{name: _flag(name) for name in constants.SECTION_NAMES},
    **{name: _flag(name) for name in ("METRIC", "OIL", "WATER", "GAS", "DISGAS", "VAPOIL")},
    constants.DIMENS: KeywordSpec(
        constants.DIMENS,
        "single",
        (ItemSpec("NX", int), ItemSpec("NY", int), ItemSpec("NZ", int)),
    ),
    constants.EQLOPTS: KeywordSpec(
        constants.EQLOPTS,
        "single",
        tuple(ItemSpec(f"OPTION{i}", str) for i in range(1, 5)),
    ),
    **{name: region_spec(name) for name in constants.REGION_KEYWORDS},
    constants.THPRES: KeywordSpec(
        constants.THPRES,
        "multi",
        (ItemSpec("REGION1", int), ItemSpec("REGION2", int), ItemSpec("VALUE", float)),
    ),
}


@dataclass(frozen=True)
class DeckItem:
    """One positional value of a record; ``value`` is ``None`` when unset."""

    name: str
    value: Any = None
    defaulted: bool = False

    @property
    def has_value(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class DeckRecord:
    items: Tuple[DeckItem, ...]
    line: int = 0

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[DeckItem]:
        return iter(self.items)

    def item(self, key: Union[int, str]) -> DeckItem:
        """Return an item by position or by name.

        Positions past the end of a short record yield an unset item rather
        than an error, matching how a ``/`` leaves trailing items defaulted.
        """
        if isinstance(key, str):
            for item in self.items:
                if item.name == key:
                    return item
            raise KeyError(f"record has no item named {key!r}")
        if key < 0:
            raise IndexBoundsError(f"item index {key} is negative")
        if key >= len(self.items):
            return DeckItem(name=f"ITEM{key + 1}", defaulted=True)
        return self.items[key]


@dataclass(frozen=True)
class DeckKeyword:
    name: str
    records: Tuple[DeckRecord, ...] = ()
    line: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[DeckRecord]:
        return iter(self.records)

    def record(self, index: int) -> DeckRecord:
        if not 0 <= index < len(self.records):
            raise IndexBoundsError(f"{self.name} has {len(self.records)} record(s); index {index} is out of range")
        return self.records[index]


@dataclass(frozen=True)
class Section:
    """Keywords that follow a section header, in file order."""

    name: str
    keywords: Tuple[DeckKeyword, ...] = ()

    def __iter__(self) -> Iterator[DeckKeyword]:
        return iter(self.keywords)

    def __len__(self) -> int:
        return len(self.keywords)

    def has_keyword(self, name: str) -> bool:
        return any(kw.name == name for kw in self.keywords)

    def count(self, name: str) -> int:
        return sum(1 for kw in self.keywords if kw.name == name)

    def keywords_named(self, name: str) -> List[DeckKeyword]:
        return [kw for kw in self.keywords if kw.name == name]

    def keyword(self, name: str) -> DeckKeyword:
        """Return the last occurrence of ``name`` in this section."""
        matches = self.keywords_named(name)
        if not matches:
            raise DeckDataError(f"section {self.name} has no keyword {name}")
        return matches[-1]


@dataclass(frozen=True)
class Deck:
    sections: Tuple[Section, ...] = ()
    source: Optional[Path] = None

    def __iter__(self) -> Iterator[Section]:
        return iter(self.sections)

    def has_section(self, name: str) -> bool:
        return any(sec.name == name for sec in self.sections)

    def section(self, name: str) -> Section:
        for sec in self.sections:
            if sec.name == name:
                return sec
        raise DeckDataError(f"deck has no {name} section")

    def has_keyword(self, name: str) -> bool:
        return any(sec.has_keyword(name) for sec in self.sections)

    @property
    def section_names(self) -> Tuple[str, ...]:
        return tuple(sec.name for sec in self.sections)


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------


def _strip_comment(line: str, prefix: str) -> str:
    # comment markers inside quotes are kept
    in_quote: Optional[str] = None
    i = 0
    while i < len(line):
        ch = line[i]
        if in_quote:
            if ch == in_quote:
                in_quote = None
        elif ch in ("'", '"'):
            in_quote = ch
        elif line.startswith(prefix, i):
            return line[:i]
        i += 1
    return line


def _expand(tokens: Sequence[str], line: int) -> List[Optional[str]]:
    """Expand ``N*value`` and ``N*`` repeats; ``None`` marks a defaulted value."""

    out: List[Optional[str]] = []
    for token in tokens:
        if token == "*":
            out.append(None)
            continue
        match = _REPEAT_RE.match(token)
        if match:
            count = int(match.group(1))
            if count <= 0:
                raise DeckParseError(f"invalid repeat count in {token!r}", line)
            value = match.group(2) or None
            out.extend([value] * count)
        else:
            out.append(token)
    return out


def _convert(raw: str, kind: type, keyword: str, item: str, line: int) -> Any:
    text = raw
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        text = text[1:-1]
    try:
        if kind is int:
            return int(text)
        if kind is float:
            return float(text.replace("D", "E").replace("d", "e"))
    except ValueError:
        raise DeckParseError(f"{keyword} item {item}: cannot read {raw!r} as {kind.__name__}", line) from None
    return text.strip()


def _build_record(spec: KeywordSpec, tokens: Sequence[str], line: int) -> DeckRecord:
    values = _expand(tokens, line)
    items: List[DeckItem] = []
    if len(spec.items) == 1 and spec.items[0].all_cells:
        item_spec = spec.items[0]
        if any(v is None for v in values):
            raise DeckParseError(f"{spec.name} data cannot be defaulted", line)
        data = tuple(_convert(v, item_spec.kind, spec.name, item_spec.name, line) for v in values)
        items.append(DeckItem(item_spec.name, data if data else None))
        return DeckRecord(tuple(items), line)

    if len(values) > len(spec.items):
        raise DeckParseError(
            f"{spec.name} record has {len(values)} items, at most {len(spec.items)} expected",
            line,
        )
    for index, item_spec in enumerate(spec.items):
        raw = values[index] if index < len(values) else None
        if raw is None:
            items.append(DeckItem(item_spec.name, None, defaulted=True))
        else:
            items.append(DeckItem(item_spec.name, _convert(raw, item_spec.kind, spec.name, item_spec.name, line)))
    return DeckRecord(tuple(items), line)


@dataclass
class _OpenKeyword:
    spec: KeywordSpec
    line: int
    records: List[DeckRecord] = field(default_factory=list)
    pending: List[str] = field(default_factory=list)
    pending_line: int = 0


class DeckParser:
    """Turn deck text into a :class:`Deck`.

    Parameters
    ----------
    settings:
        Reader options; see :class:`resdeck.schema.ParserSettings`.
    keywords:
        Keyword layouts to recognise.  Defaults to :data:`KEYWORDS`.
    region_keywords:
        Extra integer region keyword names, read with the one-value-per-cell
        layout of :func:`region_spec`.  Names that already have a layout
        keep it.
    """

    def __init__(
        self,
        settings: Optional[ParserSettings] = None,
        keywords: Optional[Dict[str, KeywordSpec]] = None,
        region_keywords: Sequence[str] = (),
    ) -> None:
        self.settings = settings or ParserSettings()
        self.keywords = dict(KEYWORDS if keywords is None else keywords)
        for name in region_keywords:
            if name not in self.keywords:
                logger.debug("Registering region keyword %s", name)
                self.keywords[name] = region_spec(name)

    def parse_file(self, path: Union[str, Path]) -> Deck:
        deck_path = Path(path)
        with deck_path.open("r", encoding="utf-8") as fh:
            text = fh.read()
        logger.info("Reading deck %s", deck_path)
        deck = self.parse_string(text)
        return Deck(sections=deck.sections, source=deck_path)

    def parse_string(self, text: str) -> Deck:
        sections: List[Section] = []
        current_name: Optional[str] = None
        current_keywords: List[DeckKeyword] = []
        open_kw: Optional[_OpenKeyword] = None
        skipping: Optional[str] = None

        def close_section() -> None:
            if current_name is not None:
                sections.append(Section(current_name, tuple(current_keywords)))

        def finish(kw: _OpenKeyword) -> None:
            current_keywords.append(DeckKeyword(kw.spec.name, tuple(kw.records), kw.line))

        for lineno, raw_line in enumerate(text.splitlines(), start=1):
            tokens = _TOKEN_RE.findall(_strip_comment(raw_line, self.settings.comment_prefix))
            pos = 0
            while pos < len(tokens):
                token = tokens[pos]

                if open_kw is not None:
                    spec = open_kw.spec
                    at_record_start = not open_kw.pending
                    if spec.records == "multi" and at_record_start and token in self.keywords:
                        # next keyword closes a multi-record list left without its empty '/'
                        finish(open_kw)
                        open_kw = None
                        continue
                    if token == "/":
                        if spec.records == "multi" and at_record_start:
                            finish(open_kw)
                            open_kw = None
                        else:
                            open_kw.records.append(_build_record(spec, open_kw.pending, open_kw.pending_line))
                            open_kw.pending = []
                            if spec.records == "single":
                                finish(open_kw)
                                open_kw = None
                    else:
                        if at_record_start:
                            open_kw.pending_line = lineno
                        open_kw.pending.append(token)
                    pos += 1
                    continue

                if skipping is not None:
                    if token in self.keywords:
                        skipping = None
                        continue
                    if len(tokens) == 1 and _KEYWORD_RE.match(token):
                        # a lone name on its line starts the next unknown keyword
                        warnings.warn(f"Skipping unknown keyword {token} at line {lineno}", DeckWarning, stacklevel=2)
                        skipping = token
                    pos += 1
                    continue

                if not _KEYWORD_RE.match(token):
                    raise DeckParseError(f"expected a keyword, found {token!r}", lineno)
                spec = self.keywords.get(token)
                if spec is None:
                    if self.settings.unknown_keywords == "error":
                        raise DeckParseError(f"unknown keyword {token}", lineno)
                    warnings.warn(f"Skipping unknown keyword {token} at line {lineno}", DeckWarning, stacklevel=2)
                    skipping = token
                    pos += 1
                    continue

                if token in constants.SECTION_NAMES:
                    if token in (s.name for s in sections) or token == current_name:
                        raise DeckParseError(f"section {token} appears more than once", lineno)
                    close_section()
                    current_name = token
                    current_keywords = []
                elif current_name is None:
                    raise DeckParseError(f"keyword {token} appears before the first section", lineno)
                elif spec.records == "none":
                    current_keywords.append(DeckKeyword(token, (), lineno))
                else:
                    open_kw = _OpenKeyword(spec, lineno)
                pos += 1

        if open_kw is not None:
            if open_kw.pending or open_kw.spec.records == "single":
                raise DeckParseError(f"keyword {open_kw.spec.name} is not terminated by '/'", open_kw.line)
            finish(open_kw)
        close_section()
        deck = Deck(tuple(sections))
        logger.debug("Parsed deck with sections %s", ", ".join(deck.section_names) or "<none>")
        return deck


def parse_string(text: str, settings: Optional[ParserSettings] = None) -> Deck:
    """Parse deck text with default keyword layouts."""
    return DeckParser(settings).parse_string(text)


def parse_file(path: Union[str, Path], settings: Optional[ParserSettings] = None) -> Deck:
    """Parse a deck file with default keyword layouts."""
    return DeckParser(settings).parse_file(path)


__all__ = [
    "ItemSpec",
    "KeywordSpec",
    "KEYWORDS",
    "region_spec",
    "DeckItem",
    "DeckRecord",
    "DeckKeyword",
    "Section",
    "Deck",
    "DeckParser",
    "parse_string",
    "parse_file",
]
