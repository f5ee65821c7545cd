import copy

import pytest

WIRE_TX = {
    "hash": "AF5BB3EAFF431E2E5E784D639825979FF20A779725BFE61D4521340F70C3996D0",
    "height": 21,
    "index": 3,
    "tx": "0gHwYl3uCkOnw5rbCh",
    "proof": {
        "root_hash": "7C4A0E",
        "data": "0gHw",
        "proof": {"total": 4, "index": 3, "leaf_hash": "fD5c", "aunts": ["a1", "a2"]},
    },
    "stdTx": {
        "entropy": 3223323,
        "fee": [{"amount": "10000", "denom": "upokt"}],
        "memo": "",
        "msg": {
            "type": "pos/Send",
            "value": {"from_address": "addr1", "to_address": "addr2", "chains": ["0021"], "amount": "1"},
        },
        "signature": {"pub_key": "adasdsfd", "signature": "c2ln"},
    },
    "tx_result": {
        "code": 0,
        "data": None,
        "log": "",
        "info": "",
        "events": [{"type": "transfer", "attributes": [{"key": "cmVjaXBpZW50", "value": "YWRkcjI="}]}],
        "codespace": "",
        "signer": "addr1",
        "recipient": "addr2",
        "message_type": "send",
    },
}

WIRE_BLOCK = {
    "block_id": {"hash": "AF5B0D1E", "parts": {"hash": "11", "total": "1"}},
    "block": {
        "header": {
            "chain_id": "mainnet",
            "height": "21",
            "time": "2022-05-19T20:14:07.123456789Z",
            "num_txs": "2",
            "total_txs": "2045",
            "proposer_address": "D3B4A0",
        },
    },
}


@pytest.fixture
def wire_tx():
    return copy.deepcopy(WIRE_TX)


@pytest.fixture
def wire_block():
    return copy.deepcopy(WIRE_BLOCK)


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch):
    monkeypatch.delenv("RPC_URL_OVERRIDE", raising=False)
    monkeypatch.delenv("DB_DSN_OVERRIDE", raising=False)
