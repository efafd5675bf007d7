"""
Markdown rendering of the collected menus.
"""

from __future__ import annotations

from typing import Iterable, List

from src.menubot.models import MenuEntry, SourceResult


def format_entry(entry: MenuEntry) -> str:
    if entry.properties:
        return f"- {entry.name}    [{entry.price}; {entry.properties}]"
    return f"- {entry.name}    [{entry.price}]"


def build_message(results: Iterable[SourceResult]) -> str:
    lines: List[str] = []
    for result in results:
        if lines:
            lines.append("")
        lines.append(f"**{result.title}**")
        if not result.ok:
            lines.append(f"_No menu available: {result.error}_")
        elif not result.entries:
            lines.append("_No menu entries today._")
        else:
            lines.extend(format_entry(entry) for entry in result.entries)
    return "\n".join(lines) + "\n"
