import pytest

from ingestion.mapper import map_transaction
from ingestion.models import StdTx, TransactionProof, TxResult
from storage.codec import DecodingError, EncodingError, decode, encode, from_wire, to_wire


def test_sub_records_survive_column_round_trip(wire_tx):
    tx = map_transaction(wire_tx)
    for model, value in ((StdTx, tx.stdtx), (TransactionProof, tx.proof), (TxResult, tx.tx_result)):
        back = decode(model, encode(value))
        assert back == value


def test_to_wire_uses_wire_shape(wire_tx):
    stdtx = from_wire(StdTx, wire_tx["stdTx"])
    out = to_wire(stdtx)
    assert out["msg"]["value"]["chains"] == ["0021"]
    assert out["fee"] == [{"amount": "10000", "denom": "upokt"}]
    assert out["signature"]["pub_key"] == "adasdsfd"


def test_unknown_keys_are_kept():
    rec = from_wire(TxResult, {"code": 1, "gas_used": "55"})
    assert decode(TxResult, encode(rec)).model_dump()["gas_used"] == "55"


def test_none_maps_to_null():
    assert encode(None) is None
    assert decode(StdTx, None) is None
    assert to_wire(None) is None


def test_decode_accepts_bytes():
    rec = decode(StdTx, b'{"entropy": 5}')
    assert rec.entropy == 5


def test_decode_malformed_raises():
    with pytest.raises(DecodingError):
        decode(StdTx, "{not json")
    with pytest.raises(DecodingError):
        decode(StdTx, '{"entropy": "many"}')


def test_from_wire_rejects_non_objects():
    with pytest.raises(DecodingError):
        from_wire(StdTx, ["a"])


def test_encode_unencodable_value_raises():
    rec = StdTx(msg={"type": "x", "value": {"obj": object()}})
    with pytest.raises(EncodingError):
        encode(rec)
