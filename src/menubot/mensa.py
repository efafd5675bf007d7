"""
Mensa menu extraction.

The Studentenwerk page lists a whole week of menus. Each day lives in its own
container element tagged with the ISO date:

- The day container is a `div` whose `longdesc` attribute is the date
  (`yyyy-mm-dd`)
- The menu is a table inside it; the first row is the table head
- Each dish row has exactly three cells: name, property icons, price
- The dish name is the first `strong` element of the name cell; `small`
  annotations and `br` tags inside it are decorative
- Properties are icons whose `alt` text names the category
"""

from __future__ import annotations

from datetime import date
from html.parser import HTMLParser
from typing import List, Optional, Tuple

import structlog

from src.menubot.labels import DEFAULT_FALLBACK_LABEL, normalize_property_label
from src.menubot.models import LayoutMismatch, MenuEntry

logger = structlog.get_logger(__name__)

DEFAULT_DAY_ATTRIBUTE = "longdesc"
CELLS_PER_ROW = 3


def _collapse(text: str) -> str:
    return " ".join(text.split())


class _Cell:
    def __init__(self) -> None:
        self.text_parts: List[str] = []
        self.strong_parts: List[str] = []
        self.image_alts: List[str] = []
        # 0: no strong seen yet, 1: inside the first strong, 2: first strong closed
        self.strong_state = 0
        self.strong_depth = 0
        self.small_depth = 0

    @property
    def text(self) -> str:
        return _collapse("".join(self.text_parts))

    @property
    def strong_text(self) -> str:
        return _collapse("".join(self.strong_parts))


class _DaySectionParser(HTMLParser):
    """
    Collects the table rows of a single day container.

    Everything outside the container is ignored, and parsing stops caring
    once the container closes.
    """

    def __init__(self, day_attribute: str, day_value: str) -> None:
        super().__init__(convert_charrefs=True)
        self._day_attribute = day_attribute
        self._day_value = day_value

        self.found = False
        self._done = False
        self._div_depth = 0

        self._row: Optional[List[_Cell]] = None
        self._cell: Optional[_Cell] = None
        self._rows: List[List[_Cell]] = []

    @property
    def rows(self) -> Tuple[Tuple[_Cell, ...], ...]:
        return tuple(tuple(row) for row in self._rows)

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if self._done:
            return

        if self._div_depth == 0:
            attrs_dict = {k: v for k, v in attrs}
            if tag == "div" and attrs_dict.get(self._day_attribute) == self._day_value:
                self.found = True
                self._div_depth = 1
            return

        if tag == "div":
            self._div_depth += 1
            return

        if tag == "tr":
            self._close_row()
            self._row = []
            return

        if tag == "td":
            if self._row is None:
                return
            self._close_cell()
            self._cell = _Cell()
            return

        cell = self._cell
        if cell is None:
            return

        if tag == "strong":
            if cell.strong_state == 0:
                cell.strong_state = 1
            if cell.strong_state == 1:
                cell.strong_depth += 1
        elif tag == "small":
            cell.small_depth += 1
        elif tag == "img":
            attrs_dict = {k: v for k, v in attrs}
            cell.image_alts.append(attrs_dict.get("alt") or "")

    def handle_endtag(self, tag: str) -> None:
        if self._done or self._div_depth == 0:
            return

        if tag == "div":
            self._div_depth -= 1
            if self._div_depth == 0:
                self._close_row()
                self._done = True
            return

        if tag == "td":
            self._close_cell()
            return

        if tag == "tr":
            self._close_row()
            return

        cell = self._cell
        if cell is None:
            return

        if tag == "strong" and cell.strong_state == 1:
            cell.strong_depth -= 1
            if cell.strong_depth <= 0:
                cell.strong_state = 2
        elif tag == "small" and cell.small_depth > 0:
            cell.small_depth -= 1

    def handle_data(self, data: str) -> None:
        cell = self._cell
        if cell is None or self._done:
            return

        cell.text_parts.append(data)
        if cell.strong_state == 1 and cell.small_depth == 0:
            cell.strong_parts.append(data)

    def close(self) -> None:
        super().close()
        self._close_row()

    def _close_cell(self) -> None:
        if self._cell is not None and self._row is not None:
            self._row.append(self._cell)
        self._cell = None

    def _close_row(self) -> None:
        self._close_cell()
        if self._row is not None:
            self._rows.append(self._row)
        self._row = None


class MensaHtmlExtractor:
    """
    Turns the Mensa HTML page into the menu entries of one day.
    """

    source = "mensa"

    def __init__(
        self,
        *,
        day_attribute: str = DEFAULT_DAY_ATTRIBUTE,
        fallback_label: str = DEFAULT_FALLBACK_LABEL,
    ):
        self.day_attribute = day_attribute
        self.fallback_label = fallback_label

    def extract(self, html: str, day: date) -> List[MenuEntry]:
        day_value = day.isoformat()

        parser = _DaySectionParser(self.day_attribute, day_value)
        parser.feed(html or "")
        parser.close()

        if not parser.found:
            raise LayoutMismatch(
                f"No day section for {day_value} in menu page. Layout changed or invalid date?",
                source=self.source,
            )

        rows = parser.rows
        logger.debug("Mensa day section parsed", date=day_value, num_rows=len(rows))

        entries: List[MenuEntry] = []
        # First row is the table head.
        for index, cells in enumerate(rows[1:], start=1):
            if len(cells) != CELLS_PER_ROW:
                raise LayoutMismatch(
                    f"Menu row {index} contains {len(cells)} cells, expected {CELLS_PER_ROW}.",
                    source=self.source,
                )
            entries.append(self._row_to_entry(cells))

        return entries

    def _row_to_entry(self, cells: Tuple[_Cell, ...]) -> MenuEntry:
        name_cell, properties_cell, price_cell = cells

        properties = ", ".join(
            normalize_property_label(alt, self.fallback_label)
            for alt in properties_cell.image_alts
        )

        return MenuEntry(
            name=name_cell.strong_text,
            price=price_cell.text,
            properties=properties,
        )
