from __future__ import annotations

import logging
from typing import Any, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor, execute_values

from ingestion.models import Block, Transaction
from storage.errors import NoPreviousHeightError, NotFoundError, StorageError
from storage.manager import StorageManager
from storage.rows import block_to_row, row_to_block, row_to_transaction, transaction_to_row
from storage.schema import BLOCK_COLUMNS, PG_DDL, TX_COLUMNS, column_list

logger = logging.getLogger(__name__)

_JSONB_COLUMNS = ("proof", "stdtx", "tx_result")

INSERT_BLOCK = f"""
INSERT INTO blocks ({column_list(BLOCK_COLUMNS)})
VALUES ({", ".join(f"%({c})s" for c in BLOCK_COLUMNS)})
"""

INSERT_TXS = f"INSERT INTO transactions ({column_list(TX_COLUMNS)}) VALUES %s"
INSERT_TXS_TEMPLATE = "(" + ", ".join(
    f"%({c})s::jsonb" if c in _JSONB_COLUMNS else f"%({c})s" for c in TX_COLUMNS
) + ")"

SELECT_BLOCKS = f"SELECT {column_list(BLOCK_COLUMNS)} FROM blocks"
# sub-records come back as text so the codec, not psycopg2, parses them
SELECT_TXS = "SELECT " + ", ".join(
    f"{c}::text AS {c}" if c in _JSONB_COLUMNS else column_list([c]) for c in TX_COLUMNS
) + " FROM transactions"

SELECT_MAX_HEIGHT = "SELECT MAX(height) AS max_height FROM blocks"


class PostgresStorage(StorageManager):
    def __init__(self, dsn: str):
        self.dsn = dsn
        self.conn = None

    def _ensure(self):
        if self.conn is None:
            self.setup()
        return self.conn

    def setup(self) -> None:
        if self.conn is not None:
            return
        try:
            self.conn = psycopg2.connect(self.dsn)
        except psycopg2.Error as e:
            raise StorageError(f"postgres connect failed: {e}") from e

        def create(cur):
            for ddl in PG_DDL:
                cur.execute(ddl)

        self._run(create, commit=True)

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def _run(self, fn, commit: bool = False) -> Any:
        """
        Run fn(cursor) in its own transaction and wrap driver errors.

        Writes commit; reads roll back so the connection is never left idle in a transaction.
        """
        conn = self._ensure()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                out = fn(cur)
            if commit:
                conn.commit()
            else:
                conn.rollback()
            return out
        except psycopg2.Error as e:
            conn.rollback()
            raise StorageError(str(e).strip()) from e

    def write_block(self, block: Block) -> None:
        row = block_to_row(block)
        self._run(lambda cur: cur.execute(INSERT_BLOCK, row), commit=True)

    def write_transactions(self, txs: List[Transaction]) -> None:
        if not txs:
            return
        rows = [transaction_to_row(tx) for tx in txs]
        # page_size covers the whole batch so it goes out as a single statement
        self._run(
            lambda cur: execute_values(cur, INSERT_TXS, rows, template=INSERT_TXS_TEMPLATE, page_size=len(rows)),
            commit=True,
        )
        logger.debug("wrote %d transactions", len(rows))

    def delete_transactions(self, height: int) -> int:
        def delete(cur):
            cur.execute("DELETE FROM transactions WHERE height = %s", (height,))
            return cur.rowcount

        return self._run(delete, commit=True)

    def _fetchone(self, sql: str, params=None) -> Optional[dict]:
        def q(cur):
            cur.execute(sql, params)
            return cur.fetchone()
        return self._run(q)

    def _fetchall(self, sql: str, params=None) -> List[dict]:
        def q(cur):
            cur.execute(sql, params)
            return cur.fetchall()
        return self._run(q)

    def read_block(self, hash: str) -> Block:
        row = self._fetchone(f"{SELECT_BLOCKS} WHERE hash = %s", (hash,))
        if row is None:
            raise NotFoundError(f"block {hash} not found")
        return row_to_block(row)

    def read_blocks(self) -> List[Block]:
        return [row_to_block(r) for r in self._fetchall(f"{SELECT_BLOCKS} ORDER BY height")]

    def read_transaction(self, hash: str) -> Transaction:
        row = self._fetchone(f"{SELECT_TXS} WHERE hash = %s", (hash,))
        if row is None:
            raise NotFoundError(f"transaction {hash} not found")
        return row_to_transaction(row)

    def read_transactions(self) -> List[Transaction]:
        rows = self._fetchall(f'{SELECT_TXS} ORDER BY height, "index"')
        return [row_to_transaction(r) for r in rows]

    def max_block_height(self) -> int:
        row = self._fetchone(SELECT_MAX_HEIGHT)
        if row is None or row["max_height"] is None:
            raise NoPreviousHeightError()
        return int(row["max_height"])
