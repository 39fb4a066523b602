"""
multipart/form-data body encoding.
"""

import uuid
from typing import Callable, Dict, List, NamedTuple, Optional

CRLF = b"\r\n"


class BodyPart(NamedTuple):
    """One part of a multipart body"""

    headers: Dict[str, str]
    data: bytes

    @property
    def name(self) -> Optional[str]:
        return _disposition_param(self.headers.get("Content-Disposition", ""), "name")

    @property
    def filename(self) -> Optional[str]:
        return _disposition_param(self.headers.get("Content-Disposition", ""), "filename")


def make_boundary() -> str:
    return f"asnk-{uuid.uuid4()}"


class MultipartFormData:
    """
    Builder for multipart/form-data bodies.

    Example:
        >>> form = MultipartFormData()
        >>> form.append_text("Arindam", name="author")
        >>> form.append(b"hello", name="file", filename="hello.txt", mime_type="text/plain")
        >>> body = form.encode("asnk-boundary")
    """

    def __init__(self, build: Optional[Callable[["MultipartFormData"], None]] = None):
        self.parts: List[BodyPart] = []
        if build is not None:
            build(self)

    def append(
        self,
        data: bytes,
        name: str,
        filename: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> None:
        disposition = f'form-data; name="{name}"'
        if filename is not None:
            disposition = f'{disposition}; filename="{filename}"'
        headers = {"Content-Disposition": disposition}
        if mime_type is not None:
            headers["Content-Type"] = mime_type
        self.parts.append(BodyPart(headers=headers, data=bytes(data)))

    def append_text(self, value: str, name: str) -> None:
        self.append(value.encode("utf-8"), name=name)

    def content_type(self, boundary: str) -> str:
        return f"multipart/form-data; boundary={boundary}"

    def encode(self, boundary: str) -> bytes:
        """
        Encode every part between ``--boundary`` lines.

        Each part is ``--boundary CRLF headers CRLF CRLF data CRLF`` and the
        body ends with ``--boundary-- CRLF``.
        """
        delimiter = f"--{boundary}".encode("utf-8")
        body = bytearray()
        for part in self.parts:
            body += delimiter + CRLF
            for key, value in part.headers.items():
                body += f"{key}: {value}".encode("utf-8") + CRLF
            body += CRLF
            body += part.data
            body += CRLF
        body += delimiter + b"--" + CRLF
        return bytes(body)

    def __len__(self) -> int:
        return len(self.parts)


def parse_multipart(body: bytes, boundary: str) -> List[BodyPart]:
    """
    Split an encoded multipart body back into its parts.

    Raises:
        ValueError: If the closing delimiter is missing or a part is malformed
    """
    delimiter = f"--{boundary}".encode("utf-8")
    closing = delimiter + b"--"
    if closing not in body:
        raise ValueError("multipart body has no closing delimiter")

    content = body[: body.index(closing)]
    parts: List[BodyPart] = []
    for chunk in content.split(delimiter + CRLF)[1:]:
        if chunk.endswith(CRLF):
            chunk = chunk[: -len(CRLF)]
        head, sep, data = chunk.partition(CRLF + CRLF)
        if not sep:
            raise ValueError("multipart part has no header separator")
        headers: Dict[str, str] = {}
        for line in head.split(CRLF):
            if not line:
                continue
            key, _, value = line.decode("utf-8").partition(":")
            headers[key.strip()] = value.strip()
        parts.append(BodyPart(headers=headers, data=data))
    return parts


def _disposition_param(disposition: str, param: str) -> Optional[str]:
    for item in disposition.split(";")[1:]:
        key, _, value = item.strip().partition("=")
        if key == param:
            return value.strip('"')
    return None
