import argparse
import dataclasses
import json
import logging
import sys
from typing import Optional, Sequence

from common.logging_setup import setup_logging
from common.settings import Settings, load_settings
from ingestion.indexer import Indexer, sync
from ingestion.provider import PocketProvider
from storage.codec import to_wire
from storage.errors import NoPreviousHeightError, NotFoundError
from storage.manager import get_storage

logger = logging.getLogger(__name__)


def _entity_json(entity) -> str:
    d = dataclasses.asdict(entity)
    # asdict leaves pydantic sub-records untouched
    for name in ("proof", "stdtx", "tx_result"):
        if name in d:
            d[name] = to_wire(getattr(entity, name))
    return json.dumps(d, default=str, indent=2, sort_keys=True)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Index Pocket blocks and transactions")
    p.add_argument("--config", default="config.yaml", help="Path to YAML settings")
    p.add_argument("--log-level", dest="log_level", default=None, help="Overrides logging.level from config")
    sub = p.add_subparsers(dest="command", required=True)

    b = sub.add_parser("block", help="Index one block and its transactions")
    b.add_argument("--height", type=int, required=True)

    s = sub.add_parser("sync", help="Resume indexing from the highest stored block")
    s.add_argument("--end-height", dest="end_height", type=int, default=None,
                   help="Last height to index (default: node tip)")
    s.add_argument("--chunk-size", dest="chunk_size", type=int, default=None)

    sb = sub.add_parser("show-block", help="Print a stored block")
    sb.add_argument("--hash", required=True)

    st = sub.add_parser("show-tx", help="Print a stored transaction")
    st.add_argument("--hash", required=True)

    sub.add_parser("max-height", help="Print the highest stored block height")
    return p


def run(args: argparse.Namespace, settings: Settings) -> int:
    storage = get_storage(settings.db.driver, **settings.db.storage_options())
    with storage:
        if args.command in ("block", "sync"):
            provider = PocketProvider(settings.rpc.url, timeout=settings.rpc.timeout)
            indexer = Indexer(provider, storage, per_page=settings.ingestion.per_page)
            if args.command == "block":
                indexer.index_block_transactions(args.height)
                block = indexer.index_block(args.height)
                print(f"Indexed block {block.height} with {block.tx_count} total txs")
            else:
                last = sync(
                    indexer,
                    storage,
                    start_height=settings.ingestion.start_height,
                    end_height=args.end_height,
                    chunk_size=args.chunk_size or settings.ingestion.chunk_size,
                )
                print("Already up to date" if last is None else f"Synced up to block {last}")
            return 0

        try:
            if args.command == "show-block":
                print(_entity_json(storage.read_block(args.hash)))
            elif args.command == "show-tx":
                print(_entity_json(storage.read_transaction(args.hash)))
            else:
                print(storage.max_block_height())
        except (NotFoundError, NoPreviousHeightError) as e:
            logger.error("%s", e)
            return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    setup_logging(args.log_level or settings.logging.level)
    return run(args, settings)


if __name__ == "__main__":
    sys.exit(main())
