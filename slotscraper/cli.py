from __future__ import annotations

import argparse
import json
import logging

from slotscraper.config import load_settings
from slotscraper.worker import run_once


def _setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="slotscraper: appointment slot watcher")
    parser.add_argument("--env-file", default=None, help="Path to a .env file (default: ./.env)")
    args = parser.parse_args()

    try:
        settings = load_settings(dotenv_path=args.env_file)
    except Exception as e:
        _setup_logging()
        logging.getLogger(__name__).error("Configuration failed (%s: %s)", type(e).__name__, e)
        payload = {"error": f"{type(e).__name__}: {e}"}
    else:
        _setup_logging(settings.log_level)
        payload = run_once(settings)

    # Errors are part of the payload; the exit status stays 0.
    print(json.dumps(payload))
    return 0
