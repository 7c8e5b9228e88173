from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Sequence

from slotscraper.domain import BATCH_LIMIT
from slotscraper.slot_store import SlotStore

logger = logging.getLogger(__name__)


def chunk(ids: Sequence[str], size: int = BATCH_LIMIT) -> list[list[str]]:
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [list(ids[i : i + size]) for i in range(0, len(ids), size)]


def write_batches(store: SlotStore, ids: Sequence[str], *, batch_size: int = BATCH_LIMIT) -> int:
    """Persist ``ids`` with one ``put_many`` call per chunk, all in parallel.

    Succeeds only if every chunk succeeds; the first failure is re-raised and
    nothing is retried. Returns the number of chunks written.
    """
    batches = chunk(ids, batch_size)
    if not batches:
        return 0

    for i, batch in enumerate(batches):
        logger.info("batchWriteItem request %d: %d items to put", i, len(batch))

    with ThreadPoolExecutor(max_workers=len(batches)) as executor:
        futures = [executor.submit(store.put_many, batch) for batch in batches]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        failed = [f.exception() for f in futures if f in done and f.exception() is not None]
        if failed:
            raise failed[0]

    logger.info("DynamoDB batchWriteItem complete for %d slots", len(ids))
    return len(batches)
