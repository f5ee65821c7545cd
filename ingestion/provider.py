# ingestion/provider.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class RemoteFetchError(RuntimeError):
    pass


class Provider:
    """Node capabilities the indexer needs. Tests swap in scripted fakes."""

    def get_height(self) -> int:
        raise NotImplementedError

    def get_block(self, height: int) -> Dict[str, Any]:
        raise NotImplementedError

    def get_block_transactions(
        self,
        height: int,
        prove: bool = True,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> Dict[str, Any]:
        raise NotImplementedError


class PocketProvider(Provider):
    """
    Thin client over the Pocket node query RPC.

    Every call is a single attempt. Transport failures, non 2xx answers and
    bodies that are not JSON objects surface as RemoteFetchError.
    """

    def __init__(self, url: str, timeout: float = 30.0):
        self.url = url.rstrip("/")
        self.timeout = timeout

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        u = f"{self.url}{path}"
        try:
            resp = requests.post(u, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.HTTPError as e:
            raise RemoteFetchError(f"{path} failed url={u}: {e}") from e
        except requests.RequestException as e:
            raise RemoteFetchError(f"{path} transport failed url={u}") from e
        except ValueError as e:
            raise RemoteFetchError(f"{path} returned a non JSON body url={u}") from e
        if not isinstance(data, dict):
            raise RemoteFetchError(f"{path} returned {type(data).__name__}, expected an object")
        return data

    def get_height(self) -> int:
        data = self._post("/v1/query/height", {})
        height = data.get("height")
        if not isinstance(height, int) or isinstance(height, bool):
            raise RemoteFetchError(f"/v1/query/height returned no height: {data!r}")
        return height

    def get_block(self, height: int) -> Dict[str, Any]:
        if not isinstance(height, int) or height < 0:
            raise ValueError("height must be a non negative integer")
        return self._post("/v1/query/block", {"height": height})

    def get_block_transactions(
        self,
        height: int,
        prove: bool = True,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> Dict[str, Any]:
        if not isinstance(height, int) or height < 0:
            raise ValueError("height must be a non negative integer")
        payload: Dict[str, Any] = {"height": height, "prove": prove, "page": page}
        if per_page:
            payload["per_page"] = per_page
        logger.debug("blocktxs height=%s page=%s", height, page)
        return self._post("/v1/query/blocktxs", payload)
