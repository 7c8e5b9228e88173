from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from slotscraper.domain import NotificationError

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def publish(self, subject: str, message: str) -> None: ...


def format_new_slots_message(source: str, new_slots: Iterable[str]) -> str:
    return f"{source}: New slots are {','.join(new_slots)}"


class SnsNotifier:
    def __init__(self, topic_arn: str, client: Any) -> None:
        self.topic_arn = topic_arn
        self.client = client

    def publish(self, subject: str, message: str) -> None:
        try:
            r = self.client.publish(TopicArn=self.topic_arn, Subject=subject, Message=message)
        except (BotoCoreError, ClientError) as e:
            raise NotificationError(f"SNS publish failed ({type(e).__name__}: {e})") from e
        logger.info("SNS.Publish done (MessageId=%s)", r.get("MessageId"))


def build_sns_notifier(topic_arn: str, *, region_name: str | None = None) -> SnsNotifier:
    return SnsNotifier(topic_arn, boto3.client("sns", region_name=region_name))
