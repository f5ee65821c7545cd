from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ingestion.models import Block, Transaction
from storage.errors import NoPreviousHeightError, NotFoundError, StorageError
from storage.manager import StorageManager
from storage.rows import block_to_row, row_to_block, row_to_transaction, transaction_to_row
from storage.schema import BLOCK_COLUMNS, SQLITE_DDL, TX_COLUMNS, column_list

logger = logging.getLogger(__name__)


def _insert_sql(table: str, columns) -> str:
    params = ", ".join(f":{c}" for c in columns)
    return f"INSERT INTO {table} ({column_list(columns)}) VALUES ({params})"


INSERT_BLOCK = _insert_sql("blocks", BLOCK_COLUMNS)
INSERT_TX = _insert_sql("transactions", TX_COLUMNS)
SELECT_BLOCKS = f"SELECT {column_list(BLOCK_COLUMNS)} FROM blocks"
SELECT_TXS = f"SELECT {column_list(TX_COLUMNS)} FROM transactions"


def _to_sqlite_block(block: Block) -> Dict[str, Any]:
    row = block_to_row(block)
    # stored as ISO 8601 text; sqlite has no timestamp type
    row["time"] = row["time"].isoformat() if row["time"] is not None else None
    return row


def _from_sqlite_block(row: sqlite3.Row) -> Block:
    d = dict(row)
    d["time"] = datetime.fromisoformat(d["time"]) if d["time"] else None
    return row_to_block(d)


def _to_sqlite_tx(tx: Transaction) -> Dict[str, Any]:
    row = transaction_to_row(tx)
    # no array type; blockchains kept as a JSON list
    row["blockchains"] = json.dumps(row["blockchains"])
    return row


def _from_sqlite_tx(row: sqlite3.Row) -> Transaction:
    d = dict(row)
    d["blockchains"] = json.loads(d["blockchains"]) if d["blockchains"] else []
    return row_to_transaction(d)


class SQLiteStorage(StorageManager):
    def __init__(self, path: str):
        self.path = path
        self.conn: Optional[sqlite3.Connection] = None

    def _ensure(self) -> sqlite3.Connection:
        if self.conn is None:
            self.setup()
        return self.conn

    def setup(self) -> None:
        if self.conn is not None:
            return
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        try:
            con = sqlite3.connect(self.path)
            con.row_factory = sqlite3.Row
            with con:
                for ddl in SQLITE_DDL:
                    con.execute(ddl)
        except sqlite3.Error as e:
            raise StorageError(f"sqlite setup failed for {self.path}: {e}") from e
        self.conn = con

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def write_block(self, block: Block) -> None:
        con = self._ensure()
        row = _to_sqlite_block(block)
        try:
            with con:
                con.execute(INSERT_BLOCK, row)
        except (sqlite3.Error, OverflowError) as e:
            raise StorageError(f"write block {block.height}: {e}") from e

    def write_transactions(self, txs: List[Transaction]) -> None:
        if not txs:
            return
        con = self._ensure()
        rows = [_to_sqlite_tx(tx) for tx in txs]
        try:
            # one transaction: either every row lands or none does
            with con:
                con.executemany(INSERT_TX, rows)
        except (sqlite3.Error, OverflowError) as e:
            raise StorageError(f"write {len(rows)} transactions: {e}") from e
        logger.debug("wrote %d transactions", len(rows))

    def delete_transactions(self, height: int) -> int:
        con = self._ensure()
        try:
            with con:
                cur = con.execute("DELETE FROM transactions WHERE height = ?", (height,))
        except sqlite3.Error as e:
            raise StorageError(f"delete transactions at {height}: {e}") from e
        return cur.rowcount

    def _fetchone(self, sql: str, params=()) -> Optional[sqlite3.Row]:
        con = self._ensure()
        try:
            return con.execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def _fetchall(self, sql: str, params=()) -> List[sqlite3.Row]:
        con = self._ensure()
        try:
            return con.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def read_block(self, hash: str) -> Block:
        row = self._fetchone(f"{SELECT_BLOCKS} WHERE hash = ?", (hash,))
        if row is None:
            raise NotFoundError(f"block {hash} not found")
        return _from_sqlite_block(row)

    def read_blocks(self) -> List[Block]:
        return [_from_sqlite_block(r) for r in self._fetchall(f"{SELECT_BLOCKS} ORDER BY height")]

    def read_transaction(self, hash: str) -> Transaction:
        row = self._fetchone(f"{SELECT_TXS} WHERE hash = ?", (hash,))
        if row is None:
            raise NotFoundError(f"transaction {hash} not found")
        return _from_sqlite_tx(row)

    def read_transactions(self) -> List[Transaction]:
        rows = self._fetchall(f'{SELECT_TXS} ORDER BY height, "index"')
        return [_from_sqlite_tx(r) for r in rows]

    def max_block_height(self) -> int:
        row = self._fetchone("SELECT MAX(height) FROM blocks")
        if row is None or row[0] is None:
            raise NoPreviousHeightError()
        return int(row[0])
