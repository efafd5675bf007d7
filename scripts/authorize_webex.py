#!/usr/bin/env python3
"""
One-time Webex authorization.

Prints the authorize URL, asks for the `code` parameter of the redirect the
browser ends up on, and stores the resulting tokens in WEBEX_TOKEN_FILE.
"""

from __future__ import annotations

import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.menubot.config import ConfigError, init_config
from src.menubot.log_setup import configure_logging
from src.menubot.webex import TokenStore, WebexClient, WebexError


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--code", default=None, help="Authorization code (skips the prompt)")
    args = parser.parse_args()

    try:
        config = init_config()
    except ConfigError as e:
        print(f"[ERR] {e}", file=sys.stderr)
        return 1

    configure_logging(config.log_level)

    with WebexClient(config) as client:
        code = args.code
        if not code:
            print('Please open the following URL and copy the final "code" parameter:')
            print(client.authorize_url())
            code = input("Code: ").strip()
        if not code:
            print("[ERR] No code entered")
            return 1

        try:
            tokens = client.exchange_code(code)
        except WebexError as e:
            print(f"[ERR] {e}", file=sys.stderr)
            return 1

    TokenStore(config.webex_token_file).save(tokens)
    print(f"[OK] Tokens saved to {config.webex_token_file}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
