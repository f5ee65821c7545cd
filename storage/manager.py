# storage/manager.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List

from ingestion.models import Block, Transaction


class StorageManager(ABC):
    """
    Operations every backend offers to the indexer and to readers.

    Store failures raise StorageError. Point lookups that match nothing raise
    NotFoundError, and max_block_height on an empty table raises
    NoPreviousHeightError, so callers can tell "missing" from "broken".
    """

    @abstractmethod
    def setup(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def write_block(self, block: Block) -> None: ...

    @abstractmethod
    def write_transactions(self, txs: List[Transaction]) -> None:
        """Insert all txs in one statement. An empty list is a no-op."""

    @abstractmethod
    def delete_transactions(self, height: int) -> int:
        """Remove every transaction stored at height. Returns the number of rows removed."""

    @abstractmethod
    def read_block(self, hash: str) -> Block: ...

    @abstractmethod
    def read_blocks(self) -> List[Block]:
        """Every stored block ordered by height. Not paginated."""

    @abstractmethod
    def read_transaction(self, hash: str) -> Transaction: ...

    @abstractmethod
    def read_transactions(self) -> List[Transaction]:
        """Every stored transaction ordered by (height, index). Not paginated."""

    @abstractmethod
    def max_block_height(self) -> int: ...

    def __enter__(self):
        self.setup()
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def get_storage(backend: str, **opts: Any) -> StorageManager:
    """
    Factory for storage backends. Accepts flexible option names.
      - sqlite: db_path | sqlite_path | path
      - postgres: dsn
    """
    b = (backend or "").lower()
    if b == "sqlite":
        from storage.sqlite_backend import SQLiteStorage

        db_path = opts.get("db_path") or opts.get("sqlite_path") or opts.get("path") or "data/indexer.db"
        return SQLiteStorage(db_path)
    elif b in ("postgres", "postgresql", "pg"):
        from storage.postgres_backend import PostgresStorage

        dsn = opts.get("dsn")
        if not dsn:
            raise ValueError("postgres backend requires a dsn")
        return PostgresStorage(dsn)
    else:
        raise ValueError(f"Unknown storage backend: {backend!r}")
