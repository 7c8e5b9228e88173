from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    page_url: str
    timeslots_table_name: str
    notification_topic_arn: str

    # None lets boto3 resolve the region from its usual chain.
    aws_region: str | None = None

    fetch_timeout_seconds: float = 30.0
    # 1 means a single attempt, no retry.
    fetch_retry_attempts: int = 1

    notification_subject: str = "New slots"
    log_level: str = "INFO"


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise RuntimeError(f"Invalid LOG_LEVEL value: {raw!r}")
    return level


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    try:
        fetch_timeout_seconds = float(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))
    except ValueError as e:
        raise RuntimeError("FETCH_TIMEOUT_SECONDS must be a number") from e
    if fetch_timeout_seconds <= 0:
        raise RuntimeError("FETCH_TIMEOUT_SECONDS must be > 0")

    try:
        fetch_retry_attempts = int(os.getenv("FETCH_RETRY_ATTEMPTS", "1"))
    except ValueError as e:
        raise RuntimeError("FETCH_RETRY_ATTEMPTS must be an integer") from e
    if fetch_retry_attempts < 1:
        raise RuntimeError("FETCH_RETRY_ATTEMPTS must be >= 1")

    aws_region = os.getenv("AWS_REGION") or None
    notification_subject = os.getenv("NOTIFICATION_SUBJECT") or "New slots"
    log_level = _parse_log_level(os.getenv("LOG_LEVEL", "INFO"))

    return Settings(
        page_url=_require("PAGE_URL"),
        timeslots_table_name=_require("TIMESLOTS_TABLE_NAME"),
        notification_topic_arn=_require("NOTIFICATION_TOPIC_ARN"),
        aws_region=aws_region,
        fetch_timeout_seconds=fetch_timeout_seconds,
        fetch_retry_attempts=fetch_retry_attempts,
        notification_subject=notification_subject,
        log_level=log_level,
    )
