# ingestion/mapper.py
"""
ingestion.mapper

Map wire records returned by the node into internal entities.

The mapper is best effort: a missing or mistyped field becomes its zero value,
it never rejects a record. Message payloads are free-form dicts whose keys
depend on the message type, so every lookup is type checked.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Type

from pydantic import BaseModel

from ingestion.models import Block, StdTx, Transaction, TransactionProof, TxResult
from storage.codec import DecodingError, from_wire

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?\d+")
_TIME_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))?(?P<tz>Z|[+-]\d{2}:\d{2})$"
)


def parse_int(value: Any, default: int = 0, non_negative: bool = False) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        out = value
    elif isinstance(value, str) and _INT_RE.fullmatch(value):
        out = int(value)
    else:
        return default
    if non_negative and out < 0:
        return default
    return out


def parse_time(value: Any) -> Optional[datetime]:
    """
    Parse an RFC3339 timestamp. The node reports nanoseconds, which datetime
    cannot hold, so the fraction is truncated to microseconds.
    """
    if not isinstance(value, str):
        return None
    m = _TIME_RE.match(value.strip())
    if not m:
        return None
    frac = (m.group("frac") or "")[:6].ljust(6, "0")
    tz = m.group("tz")
    if tz == "Z":
        tz = "+00:00"
    try:
        dt = datetime.fromisoformat(f"{m.group('base')}.{frac}{tz}")
    except ValueError:
        return None
    return dt.astimezone(timezone.utc)


def _get_dict(obj: Any, key: str) -> dict:
    v = obj.get(key) if isinstance(obj, dict) else None
    return v if isinstance(v, dict) else {}


def _get_str(obj: Any, key: str, default: str = "") -> str:
    v = obj.get(key) if isinstance(obj, dict) else None
    return v if isinstance(v, str) else default


def _get_list(obj: Any, key: str) -> list:
    v = obj.get(key) if isinstance(obj, dict) else None
    return v if isinstance(v, list) else []


def _sub_record(model: Type[BaseModel], payload: Any, tx_hash: str):
    if payload is None:
        return None
    try:
        return from_wire(model, payload)
    except DecodingError as e:
        logger.warning("tx %s: dropping unreadable %s: %s", tx_hash, model.__name__, e)
        return None


def map_block(wire_block: dict) -> Block:
    header = _get_dict(_get_dict(wire_block, "block"), "header")
    return Block(
        hash=_get_str(_get_dict(wire_block, "block_id"), "hash"),
        height=parse_int(header.get("height"), non_negative=True),
        time=parse_time(header.get("time")),
        proposer_address=_get_str(header, "proposer_address"),
        # cumulative chain count as reported by the header
        tx_count=parse_int(header.get("total_txs"), non_negative=True),
        relay_count=0,
    )


def map_transaction(wire_tx: dict) -> Transaction:
    tx_hash = _get_str(wire_tx, "hash")
    raw_stdtx = _get_dict(wire_tx, "stdTx")
    msg = _get_dict(raw_stdtx, "msg")
    msg_value = _get_dict(msg, "value")

    chains: List[str] = [c for c in _get_list(msg_value, "chains") if isinstance(c, str)]

    fees = _get_list(raw_stdtx, "fee")
    first_fee = fees[0] if fees and isinstance(fees[0], dict) else {}

    return Transaction(
        hash=tx_hash,
        from_address=_get_str(msg_value, "from_address"),
        to_address=_get_str(msg_value, "to_address"),
        app_pub_key=_get_str(_get_dict(raw_stdtx, "signature"), "pub_key"),
        blockchains=chains,
        message_type=_get_str(msg, "type"),
        height=parse_int(wire_tx.get("height")),
        index=parse_int(wire_tx.get("index")),
        proof=_sub_record(TransactionProof, wire_tx.get("proof"), tx_hash),
        stdtx=_sub_record(StdTx, wire_tx.get("stdTx"), tx_hash),
        tx_result=_sub_record(TxResult, wire_tx.get("tx_result"), tx_hash),
        tx=_get_str(wire_tx, "tx"),
        entropy=parse_int(raw_stdtx.get("entropy")),
        fee=parse_int(first_fee.get("amount")),
        fee_denomination=_get_str(first_fee, "denom"),
    )
