# ingestion/indexer.py
"""
ingestion.indexer

Fetch a block or its transactions from the node, map them and hand them to
a writer (any storage backend). Each call is a single attempt; retrying is
up to the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from common.utils import chunked
from ingestion.mapper import map_block, map_transaction, parse_int
from ingestion.models import Block, Transaction
from ingestion.provider import Provider
from storage.errors import NoPreviousHeightError

logger = logging.getLogger(__name__)


class Indexer:
    def __init__(self, provider: Provider, writer, per_page: Optional[int] = None):
        self.provider = provider
        self.writer = writer
        self.per_page = per_page

    def index_block(self, height: int) -> Block:
        wire_block = self.provider.get_block(height)
        block = map_block(wire_block)
        self.writer.write_block(block)
        logger.info("indexed block %s hash=%s", block.height, block.hash)
        return block

    def index_block_transactions(self, height: int) -> List[Transaction]:
        """
        Page through every transaction of a block, then write them in one batch.

        A response with page_count == 0 means there is nothing more to read,
        including on the very first page. Nothing is written if any page fails.
        """
        page = 1
        wire_txs: List[Dict[str, Any]] = []
        while True:
            resp = self.provider.get_block_transactions(
                height, prove=True, page=page, per_page=self.per_page
            )
            if parse_int(resp.get("page_count")) == 0:
                break
            wire_txs.extend(t for t in (resp.get("txs") or []) if isinstance(t, dict))
            page += 1

        txs = [map_transaction(t) for t in wire_txs]
        self.writer.write_transactions(txs)
        logger.info("indexed %d txs for block %s (%d pages)", len(txs), height, page - 1)
        return txs


def next_height(store, start_height: int = 1) -> int:
    """Height to index next: one past the highest stored block, or start_height."""
    try:
        return store.max_block_height() + 1
    except NoPreviousHeightError:
        return start_height


def sync(
    indexer: Indexer,
    store,
    start_height: int = 1,
    end_height: Optional[int] = None,
    chunk_size: int = 100,
) -> Optional[int]:
    """
    Index every block from the resume point up to end_height (default: node tip).

    Transactions go in before their block, so max_block_height only ever
    reports blocks whose transactions are stored. Any transactions left at a
    height whose block never landed are cleared before that height is redone.
    Returns the last indexed height, or None if there was nothing to do.
    """
    start = next_height(store, start_height)
    end = end_height if end_height is not None else indexer.provider.get_height()
    if start > end:
        logger.info("up to date at height %s", start - 1)
        return None

    last = None
    for lo, hi in chunked(start, end, max(1, chunk_size)):
        for height in range(lo, hi + 1):
            stale = store.delete_transactions(height)
            if stale:
                logger.warning("cleared %d txs left from an unfinished run at height %s", stale, height)
            indexer.index_block_transactions(height)
            indexer.index_block(height)
            last = height
        logger.info("synced blocks %s..%s of %s", lo, hi, end)
    return last
