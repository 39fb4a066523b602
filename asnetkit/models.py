"""
asnetkit data models
"""

from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import core_schema
from requests.structures import CaseInsensitiveDict


class HTTPMethod(str, Enum):
    """HTTP request methods"""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"

    def __str__(self) -> str:
        return self.value


class HTTPHeaders(Mapping[str, str]):
    """
    Read-only, case-insensitive header mapping.

    Lookups ignore case and the last write for a name wins, including the
    casing of the stored name. Use ``set``/``updated`` to derive a new
    instance.

    Example:
        >>> headers = HTTPHeaders({"content-type": "text/plain"})
        >>> headers["Content-Type"]
        'text/plain'
        >>> headers.set("CONTENT-TYPE", "application/json")["content-type"]
        'application/json'
    """

    __slots__ = ("_store",)

    def __init__(self, headers: Optional[Mapping[str, str]] = None):
        self._store: CaseInsensitiveDict = CaseInsensitiveDict()
        if headers:
            for name, value in headers.items():
                self._store[name] = str(value)

    def __getitem__(self, name: str) -> str:
        return self._store[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return dict(self._store.lower_items()) == dict(
            CaseInsensitiveDict(other).lower_items()
        )

    def __repr__(self) -> str:
        return f"HTTPHeaders({dict(self._store.items())!r})"

    def set(self, name: str, value: str) -> "HTTPHeaders":
        """Return a copy with ``name`` set to ``value``."""
        return self.updated({name: value})

    def updated(self, other: Mapping[str, str]) -> "HTTPHeaders":
        """Return a copy with every header of ``other`` applied in order."""
        merged = HTTPHeaders(self)
        for name, value in other.items():
            merged._store[name] = str(value)
        return merged

    def to_dict(self) -> Dict[str, str]:
        return dict(self._store.items())

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler):
        return core_schema.no_info_plain_validator_function(
            _coerce_headers,
            serialization=core_schema.plain_serializer_function_ser_schema(lambda h: h.to_dict()),
        )


HeadersInput = Union[HTTPHeaders, Mapping[str, str], None]


def _coerce_headers(value: Any) -> HTTPHeaders:
    if value is None:
        return HTTPHeaders()
    if isinstance(value, HTTPHeaders):
        return value
    return HTTPHeaders(value)


class RequestSpec(BaseModel):
    """
    Immutable description of one outbound request.

    Adapters never mutate a spec; they derive a new one with
    ``with_header``/``with_headers``/``with_body``.
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod = Field(HTTPMethod.GET, description="HTTP method")
    url: str = Field(..., description="Absolute request URL")
    headers: HTTPHeaders = Field(default_factory=HTTPHeaders, description="Request headers")
    body: Optional[bytes] = Field(None, description="Request body bytes")

    def with_header(self, name: str, value: str) -> "RequestSpec":
        return self.model_copy(update={"headers": self.headers.set(name, value)})

    def with_headers(self, headers: Mapping[str, str]) -> "RequestSpec":
        return self.model_copy(update={"headers": self.headers.updated(headers)})

    def with_body(self, body: Optional[bytes]) -> "RequestSpec":
        return self.model_copy(update={"body": body})


class ResponsePayload(BaseModel):
    """A validated response: body bytes plus status and headers"""

    model_config = ConfigDict(frozen=True)

    body: bytes = b""
    status_code: int
    headers: HTTPHeaders = Field(default_factory=HTTPHeaders)
    url: Optional[str] = None

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")
