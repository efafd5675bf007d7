"""
Tests for document retrieval and PDF conversion.
"""

import subprocess
from datetime import date
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from src.menubot.config import get_config
from src.menubot.models import SourceUnavailable
from src.menubot.sources import (
    bistro_report_url,
    convert_pdf_to_text,
    fetch_bistro_report,
    fetch_mensa_html,
)


MONDAY = date(2024, 10, 14)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _fake_pdftotext(text: str, returncode: int = 0):
    def _run(cmd, cwd=None, **kwargs):
        if returncode == 0:
            Path(cwd, cmd[-1]).write_text(text, encoding="utf-8")
        return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr="Syntax Error")

    return _run


class TestMensaFetch:
    def test_returns_page_text(self):
        config = get_config()

        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == config.mensa_url
            return httpx.Response(200, text="<html>ok</html>")

        with _client(handler) as client:
            assert fetch_mensa_html(config, client) == "<html>ok</html>"

    def test_http_error_becomes_source_unavailable(self):
        with _client(lambda request: httpx.Response(503)) as client:
            with pytest.raises(SourceUnavailable):
                fetch_mensa_html(get_config(), client)


class TestBistroFetch:
    def test_url_uses_two_digit_week(self):
        assert bistro_report_url(get_config(), date(2024, 1, 3)).endswith("KW+01.pdf")
        assert bistro_report_url(get_config(), MONDAY).endswith("KW+42.pdf")

    def test_downloads_and_converts(self, tmp_path):
        """Test that the PDF is stored in the work dir and pdftotext runs there."""
        config = get_config()
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, content=b"%PDF-1.4 fake")

        with patch("src.menubot.sources.subprocess.run", side_effect=_fake_pdftotext("Montag ...")) as run:
            with _client(handler) as client:
                text = fetch_bistro_report(config, MONDAY, client)

        assert text == "Montag ..."
        assert requested == ["https://bistro.test/Speiseplan+Bistro+KW+42.pdf"]
        assert (tmp_path / "bistro42.pdf").read_bytes() == b"%PDF-1.4 fake"

        cmd = run.call_args.args[0]
        assert cmd == ["pdftotext", "-layout", "-enc", "UTF-8", "bistro42.pdf", "bistro42.txt"]
        assert run.call_args.kwargs["cwd"] == str(tmp_path)

    def test_missing_pdf_becomes_source_unavailable(self):
        with _client(lambda request: httpx.Response(404)) as client:
            with pytest.raises(SourceUnavailable):
                fetch_bistro_report(get_config(), MONDAY, client)

    def test_converter_failure_becomes_source_unavailable(self, tmp_path):
        pdf_path = tmp_path / "bistro42.pdf"
        pdf_path.write_bytes(b"broken")

        with patch("src.menubot.sources.subprocess.run", side_effect=_fake_pdftotext("", returncode=1)):
            with pytest.raises(SourceUnavailable) as exc_info:
                convert_pdf_to_text(get_config(), pdf_path)

        assert "exit code 1" in str(exc_info.value)

    def test_missing_converter_becomes_source_unavailable(self, tmp_path):
        pdf_path = tmp_path / "bistro42.pdf"
        pdf_path.write_bytes(b"%PDF")

        with patch("src.menubot.sources.subprocess.run", side_effect=FileNotFoundError("pdftotext")):
            with pytest.raises(SourceUnavailable):
                convert_pdf_to_text(get_config(), pdf_path)
