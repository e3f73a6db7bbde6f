"""
Payload codecs binding a response model type to its wire and store forms.
"""

from typing import Any, Generic, Mapping, Optional, Type, TypeVar

from fastapi import Response
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from shared.errors import SerializationError, validation_errors

T = TypeVar("T")

JSON_MEDIA_TYPE = "application/json"


class PayloadCodec(Generic[T]):
    """Encode and decode one payload type.

    Route handlers render their responses with ``render`` and the response
    cache re-renders stored values with the same codec, so a client receives
    identical bytes whether the payload came from upstream or from the store.
    """

    def __init__(self, payload_type: Type[T]):
        self.payload_type = payload_type
        self._adapter = TypeAdapter(payload_type)

    @property
    def name(self) -> str:
        return getattr(self.payload_type, "__name__", str(self.payload_type))

    def decode(self, body: bytes) -> T:
        """Parse a response body as the payload type."""
        try:
            return self._adapter.validate_json(body)
        except PydanticValidationError as exc:
            raise SerializationError(
                f"Response body does not match {self.name}",
                details={"payload_type": self.name, "errors": validation_errors(exc)},
            ) from exc

    def from_store(self, value: Any) -> T:
        """Validate a value read back from the store."""
        try:
            return self._adapter.validate_python(value)
        except PydanticValidationError as exc:
            raise SerializationError(
                f"Stored value does not match {self.name}",
                details={"payload_type": self.name, "errors": validation_errors(exc)},
            ) from exc

    def to_store(self, payload: T) -> Any:
        """JSON-compatible form written to the store."""
        return self._adapter.dump_python(payload, mode="json")

    def encode(self, payload: T) -> bytes:
        return self._adapter.dump_json(payload)

    def render(
        self,
        payload: T,
        status_code: int = 200,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Response:
        return Response(
            content=self.encode(payload),
            status_code=status_code,
            headers=dict(headers) if headers else None,
            media_type=JSON_MEDIA_TYPE,
        )
