# storage/rows.py
"""
storage.rows

Entity <-> row dict mapping shared by every backend. Keys are column names.
Sub-records go through the codec; backends adapt the remaining values
(timestamps, string arrays) to what their driver accepts.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from ingestion.models import Block, StdTx, Transaction, TransactionProof, TxResult
from storage.codec import decode, encode


def block_to_row(block: Block) -> Dict[str, Any]:
    return {
        "hash": block.hash,
        "height": block.height,
        "time": block.time,
        "proposer_address": block.proposer_address,
        "tx_count": block.tx_count,
        "relay_count": block.relay_count,
    }


def row_to_block(row: Mapping[str, Any]) -> Block:
    return Block(
        hash=row["hash"],
        height=int(row["height"]),
        time=row["time"],
        proposer_address=row["proposer_address"] or "",
        tx_count=int(row["tx_count"] or 0),
        relay_count=int(row["relay_count"] or 0),
    )


def transaction_to_row(tx: Transaction) -> Dict[str, Any]:
    return {
        "hash": tx.hash,
        "from_address": tx.from_address,
        "to_address": tx.to_address,
        "app_pub_key": tx.app_pub_key,
        "blockchains": list(tx.blockchains),
        "message_type": tx.message_type,
        "height": tx.height,
        "index": tx.index,
        "proof": encode(tx.proof),
        "stdtx": encode(tx.stdtx),
        "tx_result": encode(tx.tx_result),
        "tx": tx.tx,
        "entropy": tx.entropy,
        "fee": tx.fee,
        "fee_denomination": tx.fee_denomination,
    }


def row_to_transaction(row: Mapping[str, Any]) -> Transaction:
    return Transaction(
        hash=row["hash"],
        from_address=row["from_address"] or "",
        to_address=row["to_address"] or "",
        app_pub_key=row["app_pub_key"] or "",
        blockchains=list(row["blockchains"] or []),
        message_type=row["message_type"] or "",
        height=int(row["height"]),
        index=int(row["index"]),
        proof=decode(TransactionProof, row["proof"]),
        stdtx=decode(StdTx, row["stdtx"]),
        tx_result=decode(TxResult, row["tx_result"]),
        tx=row["tx"] or "",
        entropy=int(row["entropy"] or 0),
        fee=int(row["fee"] or 0),
        fee_denomination=row["fee_denomination"] or "",
    )
