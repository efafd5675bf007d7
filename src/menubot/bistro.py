"""
UKSH bistro menu extraction.

The bistro publishes a weekly PDF which `pdftotext -layout` renders as a
fixed-width table. One day looks roughly like this:

    Montag    Linsensuppe               Schweineschnitzel
              mit Brot                  mit Pommes frites
              vegan
              € 2,50 / € 3,50 kJ 1200   € 4,20 / € 5,60 kJ 2900

Columns are not delimited, so their bounds are taken from the price markers
(student price / staff price / energy) on the price anchor line. Every line of
the day block is then cut at those bounds.
"""

from __future__ import annotations

import re
from datetime import date
from typing import List, Optional

import structlog

from src.menubot.models import ColumnBounds, LayoutMismatch, MenuEntry, PriceRowPolicy

logger = structlog.get_logger(__name__)

CURRENCY = "€"
DEFAULT_BLOCK_LINES = 4

_LINE_SPLIT_RE = re.compile(r"[\r\n]+")
_ANCHOR_RE = re.compile(r"€.*?/.*?€.*?kJ\s+[0-9]+")
_PRICE_RE = re.compile(r"€.*?/.*?€ *[0-9,]+")

Grid = List[List[Optional[str]]]


def split_lines(report_text: str) -> List[str]:
    return [line for line in _LINE_SPLIT_RE.split(report_text or "") if line]


def find_column_bounds(anchor_line: str) -> List[ColumnBounds]:
    return [
        ColumnBounds(start=m.start(), length=m.end() - m.start())
        for m in _ANCHOR_RE.finditer(anchor_line)
    ]


class BistroReportExtractor:
    """
    Turns the text rendering of the weekly bistro PDF into one day's entries.
    """

    source = "bistro"

    def __init__(
        self,
        *,
        block_lines: int = DEFAULT_BLOCK_LINES,
        price_row_policy: PriceRowPolicy = PriceRowPolicy.SEARCH_FOR_PRICE_ROW,
    ):
        if block_lines < 1:
            raise ValueError("block_lines must be at least 1")
        self.block_lines = block_lines
        self.price_row_policy = price_row_policy

    def extract(self, report_text: str, day: date, day_name: str) -> List[MenuEntry]:
        lines = split_lines(report_text)

        row = self._find_day_row(lines, day_name)
        anchor = self._find_anchor_row(lines, row)

        bounds = find_column_bounds(lines[anchor])
        if not bounds:
            raise LayoutMismatch(
                f"No price markers on the price line of {day_name}.",
                source=self.source,
            )

        if row + self.block_lines > len(lines):
            raise LayoutMismatch(
                f"Day block of {day_name} is cut off after {len(lines) - row} lines.",
                source=self.source,
            )

        grid = self._build_grid(lines[row:row + self.block_lines], bounds)
        logger.debug(
            "Bistro day block parsed",
            date=day.isoformat(),
            day_name=day_name,
            first_line=row,
            num_columns=len(bounds),
        )

        return [self._column_to_entry(grid, column) for column in range(len(bounds))]

    def _find_day_row(self, lines: List[str], day_name: str) -> int:
        wanted = day_name.casefold()
        for index, line in enumerate(lines):
            if line.casefold().startswith(wanted):
                return index
        raise LayoutMismatch(f"No day block starts with {day_name!r}.", source=self.source)

    def _find_anchor_row(self, lines: List[str], row: int) -> int:
        for index in range(row, min(row + self.block_lines, len(lines))):
            if CURRENCY in lines[index]:
                return index
        raise LayoutMismatch(
            f"No price line within {self.block_lines} lines of the day block.",
            source=self.source,
        )

    @staticmethod
    def _build_grid(block: List[str], bounds: List[ColumnBounds]) -> Grid:
        # Row-major; None marks an absent cell.
        grid: Grid = [[None] * len(bounds) for _ in block]
        for r, line in enumerate(block):
            for c, column in enumerate(bounds):
                grid[r][c] = column.slice(line)
        return grid

    def _price_row(self, grid: Grid, column: int) -> int:
        if self.price_row_policy is PriceRowPolicy.FIXED_LAST_ROW_IS_PRICE_ROW:
            return len(grid) - 1

        for r, cells in enumerate(grid):
            cell = cells[column]
            if cell is not None and CURRENCY in cell:
                return r
        raise LayoutMismatch(f"Column {column + 1} has no price cell.", source=self.source)

    def _column_to_entry(self, grid: Grid, column: int) -> MenuEntry:
        price_row = self._price_row(grid, column)

        name = ", ".join(
            cells[column] for cells in grid[:price_row] if cells[column] is not None
        )

        match = _PRICE_RE.search(grid[price_row][column] or "")
        if match is None:
            raise LayoutMismatch(
                f"Column {column + 1} has no price in row {price_row + 1}.",
                source=self.source,
            )

        return MenuEntry(name=name, price=match.group(0))
