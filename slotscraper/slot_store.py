from __future__ import annotations

import json
import logging
from typing import Any, Protocol, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from slotscraper.domain import BATCH_LIMIT, LookupResult, StoreError

logger = logging.getLogger(__name__)

KEY_ATTRIBUTE = "Timeslot"

# DynamoDB BatchGetItem accepts at most 100 keys per call.
LOOKUP_LIMIT = 100


class SlotStore(Protocol):
    def lookup(self, ids: Sequence[str]) -> LookupResult: ...

    def put_many(self, ids: Sequence[str]) -> None: ...


def _key(slot_id: str) -> dict[str, dict[str, str]]:
    return {KEY_ATTRIBUTE: {"S": slot_id}}


class DynamoSlotStore:
    """Slot ids kept as items of a DynamoDB table keyed by ``Timeslot``.

    ``client`` is a low-level boto3 DynamoDB client. Clients are thread-safe,
    so one instance serves concurrent ``put_many`` calls.
    """

    def __init__(self, table_name: str, client: Any) -> None:
        self.table_name = table_name
        self.client = client

    def lookup(self, ids: Sequence[str]) -> LookupResult:
        # DynamoDB rejects a request that names the same key twice.
        ids = list(dict.fromkeys(ids))
        confirmed: set[str] = set()
        unknown: set[str] = set()

        for start in range(0, len(ids), LOOKUP_LIMIT):
            keys = [_key(i) for i in ids[start : start + LOOKUP_LIMIT]]
            logger.info("DynamoDB request for %d keys", len(keys))
            try:
                data = self.client.batch_get_item(RequestItems={self.table_name: {"Keys": keys}})
            except (BotoCoreError, ClientError) as e:
                raise StoreError(f"batch_get_item failed ({type(e).__name__}: {e})") from e

            returned = data.get("Responses", {}).get(self.table_name, [])
            confirmed.update(item[KEY_ATTRIBUTE]["S"] for item in returned)
            logger.info("DynamoDB response: %d", len(returned))

            unprocessed = data.get("UnprocessedKeys", {}).get(self.table_name)
            if unprocessed:
                logger.warning("DynamoDB unprocessed: %s", json.dumps(unprocessed))
                unknown.update(k[KEY_ATTRIBUTE]["S"] for k in unprocessed.get("Keys", []))

        return LookupResult(confirmed=frozenset(confirmed), unknown=frozenset(unknown))

    def put_many(self, ids: Sequence[str]) -> None:
        ids = list(dict.fromkeys(ids))
        if len(ids) > BATCH_LIMIT:
            raise ValueError(f"put_many accepts at most {BATCH_LIMIT} ids, got {len(ids)}")
        if not ids:
            return

        # PutRequest overwrites an existing item with the same key.
        requests = [{"PutRequest": {"Item": _key(i)}} for i in ids]
        try:
            data = self.client.batch_write_item(RequestItems={self.table_name: requests})
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"batch_write_item failed ({type(e).__name__}: {e})") from e

        unprocessed = data.get("UnprocessedItems", {}).get(self.table_name)
        if unprocessed:
            logger.warning("DynamoDB batchWriteItem unprocessed: %d items", len(unprocessed))


def build_dynamo_store(table_name: str, *, region_name: str | None = None) -> DynamoSlotStore:
    return DynamoSlotStore(table_name, boto3.client("dynamodb", region_name=region_name))
