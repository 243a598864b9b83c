"""A client connection that reads HTTP requests and writes responses."""

from __future__ import annotations

import os
import re

from gleserve.httputils import read_some, write_all
from gleserve.messages import HttpRequest, HttpResponse

_HEADER_END = b"\r\n\r\n"
_READ_SIZE = 1024

_LINE_BREAKS = re.compile(r"[\r\n]+")
_SPACES = re.compile(r" +")
_HEADER_SEPARATORS = re.compile(r"[: ]+")


def parse_request(text: str) -> HttpRequest:
    """Parse the header block of a GET request.

    The URI is taken from the request line. Each following line is split on
    runs of ":" and " "; lines that do not yield exactly a name and a value
    are skipped. Header names are stored in lower case.

    Raises ValueError if the request line holds no URI.
    """
    first, *rest = _LINE_BREAKS.split(text)
    parts = _SPACES.split(first)
    if len(parts) < 2:
        raise ValueError(f"malformed request line: {first!r}")
    request = HttpRequest(uri=parts[1])
    for line in rest:
        pieces = _HEADER_SEPARATORS.split(line.strip())
        if len(pieces) != 2:
            continue
        name, value = pieces
        request.add_header(name.lower(), value)
    return request


class HttpConnection:
    """One client connection over a socket or a file descriptor.

    Clients may send several requests back to back; bytes read beyond the
    end of one request are kept for the next call to ``next_request``.
    """

    def __init__(self, sock) -> None:
        self._sock = sock
        self._buffer = b""
        self._closed = False

    def next_request(self) -> HttpRequest | None:
        """Read and parse the next request.

        Returns None if the connection ends before a complete header block
        arrives. Raises OSError if reading fails.
        """
        while (end := self._buffer.find(_HEADER_END)) == -1:
            chunk = read_some(self._sock, _READ_SIZE)
            if not chunk:
                return None
            self._buffer += chunk
        end += len(_HEADER_END)
        head, self._buffer = self._buffer[:end], self._buffer[end:]
        return parse_request(head.decode("latin-1"))

    def write_response(self, response: HttpResponse) -> None:
        """Send ``response`` in full.

        Raises ConnectionError if the peer stops accepting data part way.
        """
        data = response.to_bytes()
        written = write_all(self._sock, data)
        if written != len(data):
            raise ConnectionError(
                f"connection dropped after {written} of {len(data)} bytes"
            )

    def close(self) -> None:
        """Close the underlying socket or descriptor; later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        if isinstance(self._sock, int):
            os.close(self._sock)
        else:
            self._sock.close()

    def __enter__(self) -> HttpConnection:
        return self

    def __exit__(self, *args) -> None:
        self.close()