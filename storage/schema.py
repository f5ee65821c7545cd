# storage/schema.py
# Tables are created if missing; existing tables are never altered.

SQLITE_CREATE_TABLE_BLOCKS = """
CREATE TABLE IF NOT EXISTS blocks (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    hash             TEXT NOT NULL UNIQUE,
    height           INTEGER NOT NULL UNIQUE,
    time             TEXT,
    proposer_address TEXT NOT NULL DEFAULT '',
    tx_count         INTEGER NOT NULL DEFAULT 0,
    relay_count      INTEGER NOT NULL DEFAULT 0
);
"""

SQLITE_CREATE_TABLE_TXS = """
CREATE TABLE IF NOT EXISTS transactions (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    hash             TEXT NOT NULL UNIQUE,
    from_address     TEXT NOT NULL DEFAULT '',
    to_address       TEXT NOT NULL DEFAULT '',
    app_pub_key      TEXT NOT NULL DEFAULT '',
    blockchains      TEXT NOT NULL DEFAULT '[]',
    message_type     TEXT NOT NULL DEFAULT '',
    height           INTEGER NOT NULL,
    "index"          INTEGER NOT NULL,
    proof            TEXT,
    stdtx            TEXT,
    tx_result        TEXT,
    tx               TEXT NOT NULL DEFAULT '',
    entropy          INTEGER NOT NULL DEFAULT 0,
    fee              INTEGER NOT NULL DEFAULT 0,
    fee_denomination TEXT NOT NULL DEFAULT ''
);
"""

SQLITE_CREATE_INDEX_TXS_HEIGHT = """
CREATE INDEX IF NOT EXISTS idx_transactions_height ON transactions (height);
"""

PG_CREATE_TABLE_BLOCKS = """
CREATE TABLE IF NOT EXISTS blocks (
    id               BIGSERIAL PRIMARY KEY,
    hash             TEXT NOT NULL UNIQUE,
    height           BIGINT NOT NULL UNIQUE,
    time             TIMESTAMPTZ,
    proposer_address TEXT NOT NULL DEFAULT '',
    tx_count         BIGINT NOT NULL DEFAULT 0,
    relay_count      BIGINT NOT NULL DEFAULT 0
);
"""

PG_CREATE_TABLE_TXS = """
CREATE TABLE IF NOT EXISTS transactions (
    id               BIGSERIAL PRIMARY KEY,
    hash             TEXT NOT NULL UNIQUE,
    from_address     TEXT NOT NULL DEFAULT '',
    to_address       TEXT NOT NULL DEFAULT '',
    app_pub_key      TEXT NOT NULL DEFAULT '',
    blockchains      TEXT[] NOT NULL DEFAULT '{}',
    message_type     TEXT NOT NULL DEFAULT '',
    height           BIGINT NOT NULL,
    "index"          INTEGER NOT NULL,
    proof            JSONB,
    stdtx            JSONB,
    tx_result        JSONB,
    tx               TEXT NOT NULL DEFAULT '',
    entropy          BIGINT NOT NULL DEFAULT 0,
    fee              BIGINT NOT NULL DEFAULT 0,
    fee_denomination TEXT NOT NULL DEFAULT ''
);
"""

PG_CREATE_INDEX_TXS_HEIGHT = """
CREATE INDEX IF NOT EXISTS idx_transactions_height ON transactions (height);
"""

SQLITE_DDL = (SQLITE_CREATE_TABLE_BLOCKS, SQLITE_CREATE_TABLE_TXS, SQLITE_CREATE_INDEX_TXS_HEIGHT)
PG_DDL = (PG_CREATE_TABLE_BLOCKS, PG_CREATE_TABLE_TXS, PG_CREATE_INDEX_TXS_HEIGHT)

BLOCK_COLUMNS = ("hash", "height", "time", "proposer_address", "tx_count", "relay_count")

TX_COLUMNS = (
    "hash", "from_address", "to_address", "app_pub_key", "blockchains", "message_type",
    "height", "index", "proof", "stdtx", "tx_result", "tx", "entropy", "fee", "fee_denomination",
)


def column_list(columns) -> str:
    # "index" is a keyword in both dialects
    return ", ".join(f'"{c}"' if c == "index" else c for c in columns)
