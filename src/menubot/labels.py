"""
Property-label normalization for Mensa dietary markers.

The Mensa page marks dishes with small icons whose `alt` text names the
category ("vegetarisch", "Fisch", ...). Poultry dishes carry an icon with an
empty `alt`, so an empty label maps to the poultry marker.
"""

from __future__ import annotations

DEFAULT_FALLBACK_LABEL = "Geflügel"


def normalize_property_label(raw_label: str, fallback: str = DEFAULT_FALLBACK_LABEL) -> str:
    label = (raw_label or "").strip()
    if not label:
        label = (fallback or "").strip()
    if not label:
        return label
    # Only the first character; the rest keeps its source casing.
    return label[0].upper() + label[1:]
