"""
Menu bot: posts the daily Mensa and UKSH Bistro menus to a Webex room.

- `mensa`, `bistro`: turn the raw documents into `MenuEntry` lists
- `sources`: download the documents, convert the bistro PDF
- `runner`: collect both menus and post the message through `webex`

`Config` and `get_config` are resolved on first access, so importing an
extractor does not read `.env`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.menubot.config import Config

__all__ = ["Config", "get_config"]


def __getattr__(name: str) -> Any:
    if name in __all__:
        from src.menubot.config import Config, get_config

        return {"Config": Config, "get_config": get_config}[name]
    raise AttributeError(name)
