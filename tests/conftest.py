"""
Pytest configuration and fixtures.
"""

import pytest
import os
from unittest.mock import patch


@pytest.fixture(autouse=True)
def mock_env_vars(tmp_path):
    """Mock environment variables for tests."""
    env_vars = {
        "LOG_LEVEL": "DEBUG",
        "MENSA_URL": "https://mensa.test/speiseplan.html",
        "BISTRO_URL_TEMPLATE": "https://bistro.test/Speiseplan+Bistro+KW+{week:02d}.pdf",
        "WORK_DIR": str(tmp_path),
        "WEBEX_CLIENT_ID": "test_client_id",
        "WEBEX_CLIENT_SECRET": "test_client_secret",
        "WEBEX_ROOM_ID": "test_room_id",
        "WEBEX_API_BASE": "https://webex.test/v1",
        "WEBEX_TOKEN_FILE": str(tmp_path / "webex_tokens.json"),
    }

    with patch.dict(os.environ, env_vars):
        # Clear config cache
        from src.menubot.config import get_config
        get_config.cache_clear()
        yield
        get_config.cache_clear()


def _bistro_line(day: str = "", left: str = "", right: str = "") -> str:
    """One line of a two-column bistro table as rendered by `pdftotext -layout`."""
    return f"{day:<11}{left:<31}{right}".rstrip()


MONDAY_PRICES = ("€ 2,50 / € 3,50 kJ 1200", "€ 4,20 / € 5,60 kJ 2900")
TUESDAY_PRICES = ("€ 3,10 / € 4,10 kJ 2100", "€ 4,80 / € 6,20 kJ 2600")


@pytest.fixture
def bistro_report() -> str:
    """Text rendering of a weekly bulletin with two days of two dishes each."""
    lines = [
        "                 Speiseplan Bistro KW 42",
        "",
        _bistro_line("Montag", "Linsensuppe", "Schnitzel"),
        _bistro_line("", "mit Brot", "mit Pommes"),
        _bistro_line("", "vegan"),
        _bistro_line("", *MONDAY_PRICES),
        "",
        _bistro_line("Dienstag", "Nudelauflauf", "Fischfilet"),
        _bistro_line("", "mit Salat", "mit Reis"),
        _bistro_line("", "vegetarisch", "Zitrone"),
        _bistro_line("", *TUESDAY_PRICES),
    ]
    return "\r\n".join(lines) + "\r\n\f"


@pytest.fixture
def mensa_html() -> str:
    """Excerpt of the Mensa page with two published days."""
    return """<!DOCTYPE html>
<html>
<head><title>Speiseplan Mensa L&uuml;beck</title></head>
<body>
<div class="tabs">
  <div class="tab_content" longdesc="2024-10-14">
    <table class="menu">
      <tr><th>Essen</th><th>Art</th><th>Preis</th></tr>
      <tr>
        <td class="essen"><strong>Linsensuppe <small>(1,2,Gl)</small><br/></strong>mit Brot</td>
        <td class="art"><img src="/icons/vegan.png" alt="vegan"/></td>
        <td class="preis"> 2,50 &euro; </td>
      </tr>
      <tr>
        <td class="essen"><strong>H&auml;hnchenbrust<br> mit Reis</strong></td>
        <td class="art"><img src="/icons/gefluegel.png" alt=""/><img src="/icons/mensavital.png" alt=" mensaVital "/></td>
        <td class="preis">3,80 &euro;</td>
      </tr>
      <tr>
        <td class="essen"><strong>Pommes frites</strong></td>
        <td class="art"></td>
        <td class="preis">1,50 &euro;</td>
      </tr>
    </table>
  </div>
  <div class="tab_content" longdesc="2024-10-15">
    <table class="menu">
      <tr><th>Essen</th><th>Art</th><th>Preis</th></tr>
      <tr>
        <td class="essen"><strong>Seelachsfilet</strong></td>
        <td class="art"><img src="/icons/fisch.png" alt="fisch"/></td>
        <td class="preis">3,20 &euro;</td>
      </tr>
    </table>
  </div>
</div>
</body>
</html>
"""
