# storage/codec.py
"""
storage.codec

Converts transaction sub-records between three shapes:
  wire dict  <-> pydantic model   (from_wire / to_wire)
  pydantic model <-> JSON column  (encode / decode)

None passes through every direction so optional sub-records map to NULL.
"""
from __future__ import annotations

from typing import Any, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

M = TypeVar("M", bound=BaseModel)


class EncodingError(ValueError):
    pass


class DecodingError(ValueError):
    pass


def from_wire(model: Type[M], payload: Any) -> M:
    if not isinstance(payload, dict):
        raise DecodingError(f"{model.__name__} payload must be an object, got {type(payload).__name__}")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise DecodingError(f"invalid {model.__name__} payload: {e}") from e


def to_wire(record: Optional[BaseModel]) -> Optional[dict]:
    if record is None:
        return None
    try:
        return record.model_dump(mode="json", by_alias=True)
    except PydanticSerializationError as e:
        raise EncodingError(f"cannot convert {type(record).__name__}: {e}") from e


def encode(record: Optional[BaseModel]) -> Optional[str]:
    """Serialize a sub-record to JSON text for a single column."""
    if record is None:
        return None
    try:
        return record.model_dump_json(by_alias=True)
    except PydanticSerializationError as e:
        raise EncodingError(f"cannot encode {type(record).__name__}: {e}") from e


def decode(model: Type[M], data: Union[str, bytes, bytearray, memoryview, None]) -> Optional[M]:
    """Inverse of encode. Accepts text or raw bytes as returned by the driver."""
    if data is None:
        return None
    if isinstance(data, memoryview):
        data = data.tobytes()
    try:
        return model.model_validate_json(data)
    except ValidationError as e:
        raise DecodingError(f"invalid {model.__name__} column: {e}") from e
