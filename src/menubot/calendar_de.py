"""
German calendar helpers.

The bistro bulletin is published per calendar week and its day blocks are
labelled with German weekday names. Names are kept here rather than taken from
the process locale so that a host without `de_DE` installed behaves the same.
"""

from __future__ import annotations

from datetime import date
from typing import Tuple

# Indexed by date.weekday() (Monday == 0).
GERMAN_DAY_NAMES: Tuple[str, ...] = (
    "Montag",
    "Dienstag",
    "Mittwoch",
    "Donnerstag",
    "Freitag",
    "Samstag",
    "Sonntag",
)


def day_name(day: date) -> str:
    return GERMAN_DAY_NAMES[day.weekday()]


def week_number(day: date) -> int:
    """
    Calendar week of `day`.

    German weeks start on Monday and week 1 contains the first Thursday of the
    year, which is exactly the ISO-8601 week.
    """
    return day.isocalendar()[1]
