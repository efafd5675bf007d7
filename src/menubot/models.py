"""
Shared menu data types.

`MenuEntry` is the uniform record both extractors produce. The source price is
kept as raw text since the two sources format prices differently (the bistro
lists a student/staff pair, the Mensa a single amount).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class LayoutMismatch(Exception):
    """Raised when a source document no longer has the structure we expect."""

    def __init__(self, message: str, *, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class SourceUnavailable(Exception):
    """Raised when a source document could not be retrieved or converted."""
    pass


@dataclass(frozen=True)
class MenuEntry:
    name: str
    price: str
    # Dietary markers; None for sources that don't carry any.
    properties: Optional[str] = None


@dataclass(frozen=True)
class ColumnBounds:
    """Horizontal extent of one dish across all lines of a day block."""

    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    def slice(self, line: str) -> Optional[str]:
        """
        Cut this column out of `line`.

        The end offset is clamped to the line length. Returns None when the
        slice is empty or only whitespace.
        """
        end = min(self.end, len(line))
        if end <= self.start:
            return None
        cell = line[self.start:end].strip()
        return cell or None


class PriceRowPolicy(Enum):
    """How the fixed-width extractor decides which block row holds the price."""

    SEARCH_FOR_PRICE_ROW = "search"
    FIXED_LAST_ROW_IS_PRICE_ROW = "last_row"


@dataclass(frozen=True)
class SourceResult:
    """Outcome of one menu source within a run."""

    title: str
    entries: Tuple[MenuEntry, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
