# ingestion/models.py
"""
Internal entities produced by the mapper and stored by the storage backends.

Block and Transaction are plain dataclasses. The nested sub-records a
transaction carries (proof, stdTx, tx_result) come from untyped JSON on the
wire, so they are pydantic models that keep the wire key names and any keys
we do not model explicitly.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class WireModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def null_is_default(cls, v: Any, info: ValidationInfo) -> Any:
        # the node sends null for empty values; keep the rest of the record
        if v is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return v


class MerkleProof(WireModel):
    total: int = 0
    index: int = 0
    leaf_hash: str = ""
    aunts: Optional[List[str]] = Field(default_factory=list)


class TransactionProof(WireModel):
    root_hash: str = ""
    data: str = ""
    proof: MerkleProof = Field(default_factory=MerkleProof)


class Coin(WireModel):
    amount: str = ""
    denom: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def amount_as_text(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class Msg(WireModel):
    type: str = ""
    value: Optional[Dict[str, Any]] = Field(default_factory=dict)


class Signature(WireModel):
    pub_key: str = ""
    signature: str = ""


class StdTx(WireModel):
    entropy: int = 0
    fee: Optional[List[Coin]] = Field(default_factory=list)
    memo: str = ""
    msg: Msg = Field(default_factory=Msg)
    signature: Signature = Field(default_factory=Signature)


class EventAttribute(WireModel):
    key: str = ""
    value: Optional[str] = None


class Event(WireModel):
    type: str = ""
    attributes: Optional[List[EventAttribute]] = Field(default_factory=list)


class TxResult(WireModel):
    code: int = 0
    data: Optional[str] = None
    log: str = ""
    info: str = ""
    events: Optional[List[Event]] = Field(default_factory=list)
    codespace: str = ""
    signer: str = ""
    recipient: str = ""
    message_type: str = ""


@dataclass
class Block:
    hash: str
    height: int
    time: Optional[datetime] = None
    proposer_address: str = ""
    tx_count: int = 0
    # not provided by the node; always 0 until relays are counted from txs
    relay_count: int = 0


@dataclass
class Transaction:
    hash: str
    from_address: str = ""
    to_address: str = ""
    app_pub_key: str = ""
    blockchains: List[str] = field(default_factory=list)
    message_type: str = ""
    height: int = 0
    index: int = 0
    proof: Optional[TransactionProof] = None
    stdtx: Optional[StdTx] = None
    tx_result: Optional[TxResult] = None
    tx: str = ""
    entropy: int = 0
    fee: int = 0
    fee_denomination: str = ""
