"""Document <-> bytes codecs.

The dispatcher stores only serialized payloads in its queue. A codec turns
a submitted document into those bytes and, at drain time, back into an
equal document.
"""

from __future__ import annotations

from typing import Generic, Protocol, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from .exceptions import SerializationError

D = TypeVar("D")
M = TypeVar("M", bound=BaseModel)


class Codec(Protocol[D]):
    """Faithful round trip: ``decode(encode(d)) == d``."""

    def encode(self, document: D) -> bytes: ...

    def decode(self, payload: bytes) -> D: ...


class JsonCodec(Generic[M]):
    """JSON codec for a pydantic model type.

    Usage:
        codec = JsonCodec(Document)
        payload = codec.encode(Document(doc_id="42"))
        assert codec.decode(payload) == Document(doc_id="42")
    """

    def __init__(self, model_type: type[M], *, indent: int | None = None) -> None:
        """Initialize the codec.

        Args:
            model_type: Pydantic model every document must be an instance of
            indent: Optional JSON indentation (None = compact)
        """
        self._model_type = model_type
        self._indent = indent

    @property
    def model_type(self) -> type[M]:
        """The pydantic model this codec handles."""
        return self._model_type

    def encode(self, document: M) -> bytes:
        """Serialize a document to JSON bytes.

        The payload is decoded again before it is returned, so a document
        that would not come back equal is refused here rather than at drain
        time. Subclasses of ``model_type`` are refused for the same reason:
        their extra fields have no place in the decoded model.

        Raises:
            SerializationError: If the document is not exactly a
                ``model_type``, contains values that cannot be rendered as
                JSON, or does not survive the round trip unchanged
        """
        if type(document) is not self._model_type:
            raise SerializationError(
                f"Expected {self._model_type.__name__}, got {type(document).__name__}"
            )
        try:
            payload = document.model_dump_json(indent=self._indent).encode("utf-8")
        except (PydanticSerializationError, ValueError) as e:
            raise SerializationError(f"Cannot serialize document: {e}") from e

        if self.decode(payload) != document:
            raise SerializationError(
                f"{self._model_type.__name__} does not survive a JSON round trip"
            )
        return payload

    def decode(self, payload: bytes) -> M:
        """Deserialize JSON bytes back into a document.

        Raises:
            SerializationError: If the payload is not a valid ``model_type``
        """
        try:
            return self._model_type.model_validate_json(payload)
        except ValidationError as e:
            raise SerializationError(f"Cannot deserialize payload: {e}") from e
