"""HTTP request and response messages."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class HttpRequest:
    """A parsed GET request: the requested URI and its headers.

    Header names are stored as given; callers store and look them up in
    lower case, since HTTP header names are case-insensitive.
    """

    uri: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    def header_value(self, name: str) -> str:
        """Return the value of header ``name``, or "" if it is absent."""
        return self.headers.get(name, "")

    def add_header(self, name: str, value: str) -> None:
        """Set header ``name`` to ``value``, replacing any earlier value."""
        self.headers[name] = value

    def header_count(self) -> int:
        """Return the number of headers."""
        return len(self.headers)


@dataclass
class HttpResponse:
    """An HTTP response: status line, optional content type and a body."""

    protocol: str = ""
    response_code: int = 0
    message: str = ""
    content_type: str = ""
    body: bytes = b""

    def append_to_body(self, fragment: str | bytes) -> None:
        """Append text (encoded as UTF-8) or bytes to the body."""
        if isinstance(fragment, str):
            fragment = fragment.encode("utf-8")
        self.body += fragment

    def to_bytes(self) -> bytes:
        """Render the response for the wire.

        A "Content-length" header giving the body size in bytes is always
        the last header.
        """
        head = f"{self.protocol} {self.response_code} {self.message}\r\n"
        if self.content_type:
            head += f"Content-type: {self.content_type}\r\n"
        head += f"Content-length: {len(self.body)}\r\n\r\n"
        return head.encode("utf-8") + self.body