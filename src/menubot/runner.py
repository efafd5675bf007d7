"""
Daily run: collect both menus, render one message, post it.

A source that fails (document missing, layout changed) is reported in the
message instead of aborting the run, so the other menu still goes out.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, List, Optional

import httpx
import structlog

from src.menubot.bistro import BistroReportExtractor
from src.menubot.calendar_de import day_name
from src.menubot.mensa import MensaHtmlExtractor
from src.menubot.message import build_message
from src.menubot.models import LayoutMismatch, MenuEntry, SourceResult, SourceUnavailable
from src.menubot.sources import fetch_bistro_report, fetch_mensa_html
from src.menubot.webex import TokenStore, WebexClient, WebexError

logger = structlog.get_logger(__name__)

MENSA_TITLE = "Mensa"
BISTRO_TITLE = "UKSH Bistro"


def mensa_extractor(config: Any) -> MensaHtmlExtractor:
    return MensaHtmlExtractor(
        day_attribute=config.mensa_day_attribute,
        fallback_label=config.property_fallback_label,
    )


def bistro_extractor(config: Any) -> BistroReportExtractor:
    return BistroReportExtractor(
        block_lines=config.bistro_block_lines,
        price_row_policy=config.bistro_price_row_policy,
    )


def _collect(title: str, day: date, produce: Callable[[], List[MenuEntry]]) -> SourceResult:
    try:
        entries = produce()
    except LayoutMismatch as e:
        logger.warning("Menu layout mismatch", source=title, date=day.isoformat(), error=str(e))
        return SourceResult(title=title, error=str(e))
    except SourceUnavailable as e:
        logger.warning("Menu source unavailable", source=title, date=day.isoformat(), error=str(e))
        return SourceResult(title=title, error=str(e))

    logger.info("Menu extracted", source=title, date=day.isoformat(), num_entries=len(entries))
    return SourceResult(title=title, entries=tuple(entries))


def collect_menus(config: Any, day: date, client: httpx.Client) -> List[SourceResult]:
    """Fetch and extract both menus for `day`."""
    mensa = mensa_extractor(config)
    bistro = bistro_extractor(config)

    return [
        _collect(
            MENSA_TITLE,
            day,
            lambda: mensa.extract(fetch_mensa_html(config, client), day),
        ),
        _collect(
            BISTRO_TITLE,
            day,
            lambda: bistro.extract(fetch_bistro_report(config, day, client), day, day_name(day)),
        ),
    ]


def run(
    config: Any,
    day: date,
    *,
    dry_run: bool = False,
    http_client: Optional[httpx.Client] = None,
    webex_client: Optional[WebexClient] = None,
) -> int:
    """
    Collect, render and post the menus of `day`.

    Returns a process exit code.
    """
    logger.info("Retrieving menus", date=day.isoformat())

    client = http_client or httpx.Client(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        follow_redirects=True,
    )
    try:
        results = collect_menus(config, day, client)
    finally:
        if http_client is None:
            client.close()

    message = build_message(results)

    if dry_run:
        print(message)
        return 0

    logger.info("Posting message")
    webex = webex_client or WebexClient(config)
    try:
        access_token = webex.ensure_access_token(TokenStore(config.webex_token_file))
        webex.post_message(message, access_token)
    except WebexError as e:
        logger.error("Posting message failed", error=str(e))
        return 1
    finally:
        if webex_client is None:
            webex.close()

    return 0
