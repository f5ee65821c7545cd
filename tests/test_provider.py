import pytest
import requests

from ingestion.provider import PocketProvider, RemoteFetchError


class FakeResp:
    def __init__(self, json_data, status_code=200):
        self._json = json_data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json


@pytest.fixture
def calls(monkeypatch):
    recorded = []
    replies = []

    def fake_post(url, json, timeout):
        recorded.append((url, json, timeout))
        return replies.pop(0)

    monkeypatch.setattr(requests, "post", fake_post)
    return recorded, replies


def test_get_block_posts_height(calls):
    recorded, replies = calls
    replies.append(FakeResp({"block_id": {"hash": "AB"}, "block": {"header": {"height": "10"}}}))
    out = PocketProvider("http://node:8081/", timeout=5).get_block(10)
    assert out["block_id"]["hash"] == "AB"
    assert recorded == [("http://node:8081/v1/query/block", {"height": 10}, 5)]


def test_get_block_transactions_payload(calls):
    recorded, replies = calls
    replies.append(FakeResp({"txs": [], "page_count": 0, "total_txs": 0}))
    out = PocketProvider("http://node").get_block_transactions(10, prove=True, page=2, per_page=50)
    assert out["page_count"] == 0
    url, payload, _ = recorded[0]
    assert url == "http://node/v1/query/blocktxs"
    assert payload == {"height": 10, "prove": True, "page": 2, "per_page": 50}


def test_get_block_transactions_omits_unset_per_page(calls):
    recorded, replies = calls
    replies.append(FakeResp({"txs": [], "page_count": 0}))
    PocketProvider("http://node").get_block_transactions(10)
    assert "per_page" not in recorded[0][1]


def test_get_height(calls):
    _, replies = calls
    replies.append(FakeResp({"height": 65432}))
    assert PocketProvider("http://node").get_height() == 65432


def test_http_error_becomes_remote_fetch_error(calls):
    _, replies = calls
    replies.append(FakeResp({"code": 400, "message": "height out of range"}, status_code=400))
    with pytest.raises(RemoteFetchError):
        PocketProvider("http://node").get_block(999999999)


def test_transport_error_becomes_remote_fetch_error(monkeypatch):
    def boom(url, json, timeout):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "post", boom)
    with pytest.raises(RemoteFetchError) as ei:
        PocketProvider("http://node").get_block(1)
    assert isinstance(ei.value.__cause__, requests.ConnectionError)


def test_non_json_body(calls):
    _, replies = calls
    replies.append(FakeResp(ValueError("no json")))
    with pytest.raises(RemoteFetchError):
        PocketProvider("http://node").get_block(1)


def test_non_object_body(calls):
    _, replies = calls
    replies.append(FakeResp(["not", "an", "object"]))
    with pytest.raises(RemoteFetchError):
        PocketProvider("http://node").get_block(1)


def test_negative_height_rejected():
    with pytest.raises(ValueError):
        PocketProvider("http://node").get_block(-1)
