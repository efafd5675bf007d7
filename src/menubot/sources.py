"""
Retrieval of the raw menu documents.

- Mensa: one HTML page covering the published days
- Bistro: one PDF per calendar week, converted to fixed-width text with
  `pdftotext -layout` (poppler or xpdf must be installed)
"""

from __future__ import annotations

import subprocess
from datetime import date
from pathlib import Path
from typing import Any

import httpx
import structlog

from src.menubot.calendar_de import week_number
from src.menubot.models import SourceUnavailable

logger = structlog.get_logger(__name__)


def bistro_report_url(config: Any, day: date) -> str:
    return config.bistro_url_template.format(week=week_number(day))


def fetch_mensa_html(config: Any, client: httpx.Client) -> str:
    """Download the Mensa menu page."""
    try:
        response = client.get(config.mensa_url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise SourceUnavailable(f"Mensa page could not be retrieved: {e}") from e

    logger.info("Mensa page fetched", url=config.mensa_url, num_chars=len(response.text))
    return response.text


def download_bistro_pdf(config: Any, day: date, client: httpx.Client) -> Path:
    """
    Download the bistro PDF of the week containing `day` into the work dir.

    Returns the path of the saved file (`bistro{week}.pdf`).
    """
    week = week_number(day)
    url = bistro_report_url(config, day)
    pdf_path = Path(config.resolved_work_dir) / f"bistro{week}.pdf"

    try:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            with open(pdf_path, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
    except httpx.HTTPError as e:
        raise SourceUnavailable(f"Bistro PDF for week {week} could not be retrieved: {e}") from e
    except OSError as e:
        raise SourceUnavailable(f"Bistro PDF could not be saved to {pdf_path}: {e}") from e

    logger.info("Bistro PDF downloaded", url=url, path=str(pdf_path))
    return pdf_path


def convert_pdf_to_text(config: Any, pdf_path: Path) -> str:
    """
    Run `pdftotext -layout` next to `pdf_path` and read the result back.
    """
    txt_path = pdf_path.with_suffix(".txt")
    cmd = [config.pdftotext_path, "-layout", "-enc", "UTF-8", pdf_path.name, txt_path.name]

    try:
        res = subprocess.run(
            cmd,
            cwd=str(pdf_path.parent),
            capture_output=True,
            text=True,
            timeout=config.http_timeout_seconds,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise SourceUnavailable(f"pdftotext could not be run: {e}") from e

    if res.returncode != 0:
        raise SourceUnavailable(
            f"pdftotext failed with exit code {res.returncode}: {res.stderr.strip()[:200]}"
        )

    try:
        text = txt_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise SourceUnavailable(f"pdftotext output {txt_path} could not be read: {e}") from e

    logger.info("Bistro PDF converted", path=str(txt_path), num_lines=text.count("\n"))
    return text


def fetch_bistro_report(config: Any, day: date, client: httpx.Client) -> str:
    """Download and convert the bistro PDF for the week of `day`."""
    pdf_path = download_bistro_pdf(config, day, client)
    return convert_pdf_to_text(config, pdf_path)
