"""
Response serializers: turn a validated payload into bytes, text, JSON or a
typed value.

Every parse failure is raised as ``SerializationError`` and is terminal;
the bytes already arrived, so nothing is retried.
"""

import codecs
import json
from typing import Any, Callable, Generic, Optional, Type, TypeVar

from pydantic import TypeAdapter
from requests.utils import get_encoding_from_headers

from .exceptions import SerializationError
from .models import ResponsePayload

T = TypeVar("T")


class ResponseSerializer(Generic[T]):
    """Base class for response serializers."""

    def serialize(self, payload: ResponsePayload) -> T:
        raise NotImplementedError

    def __call__(self, payload: ResponsePayload) -> T:
        return self.serialize(payload)


class PayloadSerializer(ResponseSerializer[ResponsePayload]):
    def serialize(self, payload: ResponsePayload) -> ResponsePayload:
        return payload


class DataSerializer(ResponseSerializer[bytes]):
    def serialize(self, payload: ResponsePayload) -> bytes:
        return payload.body


class StringSerializer(ResponseSerializer[str]):
    """
    Decode the body as text.

    Without an explicit encoding the response charset is used, then utf-8.
    """

    def __init__(self, encoding: Optional[str] = None):
        self.encoding = encoding

    def resolve_encoding(self, payload: ResponsePayload) -> str:
        if self.encoding:
            return self.encoding
        charset = get_encoding_from_headers({"content-type": payload.content_type or ""})
        # requests assumes ISO-8859-1 for text/* without a charset
        if charset and "charset" in (payload.content_type or "").lower():
            return charset
        return "utf-8"

    def serialize(self, payload: ResponsePayload) -> str:
        encoding = self.resolve_encoding(payload)
        try:
            codecs.lookup(encoding)
            return payload.body.decode(encoding)
        except (LookupError, UnicodeDecodeError) as e:
            raise SerializationError(e) from e


class JSONSerializer(ResponseSerializer[Any]):
    """Parse the body as JSON. An empty body is a serialization failure."""

    def __init__(self, **loads_kwargs: Any):
        self.loads_kwargs = loads_kwargs

    def serialize(self, payload: ResponsePayload) -> Any:
        try:
            return json.loads(payload.body, **self.loads_kwargs)
        except (ValueError, UnicodeDecodeError) as e:
            raise SerializationError(e) from e


class DecodableSerializer(ResponseSerializer[T]):
    """
    Validate a JSON body into ``model``.

    ``model`` may be a pydantic model or any type ``pydantic.TypeAdapter``
    accepts, such as ``List[Item]`` or a dataclass.
    """

    def __init__(self, model: Type[T]):
        self.model = model
        self.adapter: TypeAdapter = TypeAdapter(model)

    def serialize(self, payload: ResponsePayload) -> T:
        try:
            return self.adapter.validate_json(payload.body)
        except Exception as e:
            # ValidationError, or anything a custom validator raised
            raise SerializationError(e) from e


class FunctionSerializer(ResponseSerializer[T]):
    """Serializer built from a ``bytes -> T`` callable."""

    def __init__(self, fn: Callable[[bytes], T]):
        self.fn = fn

    def serialize(self, payload: ResponsePayload) -> T:
        try:
            return self.fn(payload.body)
        except Exception as e:
            raise SerializationError(e) from e
