"""
Request construction: URL validation plus query, form and JSON encoding.

``build_request`` is a pure function from caller arguments to a
``RequestSpec``. It raises ``InvalidURLError`` or ``ParameterEncodingError``
and never touches the network.
"""

import json
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlencode

from requests.exceptions import InvalidURL, MissingSchema, InvalidSchema
from requests.models import PreparedRequest

from .exceptions import InvalidURLError, ParameterEncodingError
from .models import HeadersInput, HTTPHeaders, HTTPMethod, RequestSpec

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"

QUERY_METHODS = frozenset([HTTPMethod.GET, HTTPMethod.HEAD, HTTPMethod.DELETE])

# Characters left unescaped in query keys and values
_QUERY_SAFE = "/?"


class Destination(str, Enum):
    """Where URL-encoded parameters go"""

    METHOD_DEPENDENT = "method_dependent"
    QUERY_STRING = "query_string"
    HTTP_BODY = "http_body"


class URLEncoding:
    """
    Percent-encode parameters into the query string or a form body.

    With ``METHOD_DEPENDENT`` (the default) GET, HEAD and DELETE put
    parameters in the query string and every other method sends a form body.
    """

    def __init__(self, destination: Destination = Destination.METHOD_DEPENDENT):
        self.destination = Destination(destination)

    def encodes_in_query(self, method: HTTPMethod) -> bool:
        if self.destination is Destination.METHOD_DEPENDENT:
            return method in QUERY_METHODS
        return self.destination is Destination.QUERY_STRING

    def __repr__(self) -> str:
        return f"URLEncoding(destination={self.destination.value!r})"


class JSONEncoding:
    """Serialize parameters as a JSON request body."""

    def __init__(self, **dumps_kwargs: Any):
        self.dumps_kwargs = dumps_kwargs

    def __repr__(self) -> str:
        return "JSONEncoding()"


ParameterEncoding = Union[URLEncoding, JSONEncoding]


def validate_url(url: Any) -> str:
    """
    Check that ``url`` is an absolute http(s) URL.

    Raises:
        InvalidURLError: On anything requests would refuse to send
    """
    if not isinstance(url, str):
        url = str(url) if url is not None else ""
    if not url or any(c.isspace() for c in url):
        raise InvalidURLError(url, "empty or contains whitespace")
    prepared = PreparedRequest()
    try:
        prepared.prepare_url(url, None)
    except (MissingSchema, InvalidSchema, InvalidURL) as e:
        raise InvalidURLError(url, str(e)) from e
    if not prepared.url.startswith(("http://", "https://")):
        raise InvalidURLError(url, "only http and https URLs are supported")
    return url


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def query_pairs(parameters: Mapping[str, Any], sort: bool = False) -> List[Tuple[str, str]]:
    """
    Flatten parameters to key/value pairs.

    List and tuple values repeat the key once per element.
    """
    keys: Iterable[str] = sorted(parameters) if sort else parameters
    pairs: List[Tuple[str, str]] = []
    for key in keys:
        value = parameters[key]
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), _format_value(v)) for v in value)
        else:
            pairs.append((str(key), _format_value(value)))
    return pairs


def query_string(parameters: Mapping[str, Any], sort: bool = False) -> str:
    return urlencode(query_pairs(parameters, sort=sort), safe=_QUERY_SAFE, quote_via=quote)


def append_query(url: str, parameters: Optional[Mapping[str, Any]]) -> str:
    """Append parameters to any query already present on ``url``."""
    if not parameters:
        return url
    base, _, fragment = url.partition("#")
    separator = "&" if "?" in base else "?"
    if base.endswith(("?", "&")):
        separator = ""
    composed = f"{base}{separator}{query_string(parameters)}"
    if fragment:
        composed = f"{composed}#{fragment}"
    return composed


def build_request(
    url: Any,
    method: Union[HTTPMethod, str] = HTTPMethod.GET,
    parameters: Optional[Mapping[str, Any]] = None,
    encoding: Optional[ParameterEncoding] = None,
    headers: HeadersInput = None,
) -> RequestSpec:
    """
    Build a ``RequestSpec`` from caller arguments.

    Args:
        url: Absolute request URL
        method: HTTP method
        parameters: Query, form or JSON parameters
        encoding: ``URLEncoding`` (default) or ``JSONEncoding``
        headers: Caller headers, applied last so they win over defaults

    Returns:
        The request spec

    Raises:
        InvalidURLError: If ``url`` is malformed
        ParameterEncodingError: If ``parameters`` cannot be encoded

    Examples:
        >>> spec = build_request("https://example.com/search", parameters={"q": "python"})
        >>> spec.url
        'https://example.com/search?q=python'
    """
    url = validate_url(url)
    method = HTTPMethod(str(method).upper())
    encoding = encoding if encoding is not None else URLEncoding()
    spec_headers = HTTPHeaders()
    body: Optional[bytes] = None

    if isinstance(encoding, JSONEncoding):
        if parameters is not None:
            try:
                body = json.dumps(parameters, **encoding.dumps_kwargs).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise ParameterEncodingError(e) from e
            spec_headers = spec_headers.set("Content-Type", JSON_CONTENT_TYPE)
    elif encoding.encodes_in_query(method):
        url = append_query(url, parameters)
    else:
        if parameters is not None:
            body = query_string(parameters, sort=True).encode("utf-8")
        spec_headers = spec_headers.set("Content-Type", FORM_CONTENT_TYPE)

    if headers:
        spec_headers = spec_headers.updated(headers)

    return RequestSpec(method=method, url=url, headers=spec_headers, body=body)
