"""
Codecs that turn a site's materialized state into stored bytes.

The snapshot store treats the stored blob as opaque. A codec is the only
component that understands its structure, and it must fail with a
``CodecError`` (never a bare ``ValueError`` or a silent ``None``) when it
cannot encode or decode a value.
"""

from __future__ import annotations

import json
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from sitesnap.exceptions import CodecError
from sitesnap.serialization.json import json_dumps, json_loads

TModel = TypeVar("TModel", bound=BaseModel)


@runtime_checkable
class Codec(Protocol):
    """
    Protocol for snapshot state codecs.

    Implementations must satisfy ``decode(encode(state)) == state`` for
    every state they accept.
    """

    def encode(self, state: Any) -> bytes:
        """Encode state to bytes. Raises CodecError on failure."""
        ...

    def decode(self, data: bytes) -> Any:
        """Decode bytes to state. Raises CodecError on malformed input."""
        ...


class JSONCodec:
    """
    UTF-8 JSON codec.

    This is the default codec. It accepts any JSON-native value plus
    UUIDs and datetimes (written as strings).

    Example:
        >>> codec = JSONCodec()
        >>> codec.decode(codec.encode({"pages": 3}))
        {'pages': 3}
    """

    def encode(self, state: Any) -> bytes:
        try:
            return json_dumps(state).encode("utf-8")
        except (TypeError, ValueError, RecursionError) as e:
            raise CodecError(f"Cannot encode state as JSON: {e}") from e

    def decode(self, data: bytes) -> Any:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise CodecError(f"Expected bytes, got {type(data).__name__}")
        try:
            return json_loads(bytes(data).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CodecError(f"Malformed JSON snapshot blob: {e}") from e

    def __repr__(self) -> str:
        return "JSONCodec()"


class PydanticCodec(Generic[TModel]):
    """
    Codec for states modelled as Pydantic models.

    Encodes with ``model_dump_json`` and decodes with
    ``model_validate_json``, so a stored blob that no longer matches the
    model (for example after a field was made required) fails with a
    CodecError instead of producing a half-populated state.

    Example:
        >>> class SiteState(BaseModel):
        ...     title: str
        ...     pages: list[str] = []
        >>>
        >>> codec = PydanticCodec(SiteState)
        >>> codec.decode(codec.encode(SiteState(title="Home")))
        SiteState(title='Home', pages=[])
    """

    def __init__(self, model_type: type[TModel]) -> None:
        self._model_type = model_type

    @property
    def model_type(self) -> type[TModel]:
        return self._model_type

    def encode(self, state: Any) -> bytes:
        if not isinstance(state, self._model_type):
            raise CodecError(
                f"Expected {self._model_type.__name__} instance, got {type(state).__name__}"
            )
        try:
            return state.model_dump_json().encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode {self._model_type.__name__}: {e}") from e

    def decode(self, data: bytes) -> TModel:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise CodecError(f"Expected bytes, got {type(data).__name__}")
        try:
            return self._model_type.model_validate_json(bytes(data))
        except ValidationError as e:
            raise CodecError(
                f"Snapshot blob does not match {self._model_type.__name__}: {e}"
            ) from e

    def __repr__(self) -> str:
        return f"PydanticCodec({self._model_type.__name__})"


__all__ = [
    "Codec",
    "JSONCodec",
    "PydanticCodec",
]
