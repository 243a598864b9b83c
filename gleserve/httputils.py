"""HTTP and HTML helpers: path safety, escaping, URI decoding and raw I/O."""

from __future__ import annotations

import os
import random
import re
import select
import socket
from dataclasses import dataclass, field

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)

_PERCENT_ESCAPE = re.compile(r"%([0-9A-Fa-f]{2})|\+")


def is_path_safe(root_dir: str, test_file: str) -> bool:
    """Return True if ``test_file`` exists and lies strictly below ``root_dir``.

    Both paths are resolved, so "." and ".." components and symbolic links
    cannot be used to escape the root directory.
    """
    try:
        target = os.path.realpath(test_file, strict=True)
    except OSError:
        return False
    root = os.path.join(os.path.realpath(root_dir), "")
    return target.startswith(root)


def escape_html(text: str) -> str:
    """Replace the five characters that are unsafe in HTML with entities."""
    for char, entity in _HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


def _decode_match(match: re.Match[str]) -> str:
    matched = match.group(0)
    if matched == "+":
        return " "
    code = int(match.group(1), 16)
    if 32 <= code <= 127:
        return chr(code)
    return matched


def uri_decode(text: str) -> str:
    """Decode "%XY" escapes whose value lies in 32..127 and turn "+" into a space.

    Escapes that are malformed or out of range are left as they are.
    """
    return _PERCENT_ESCAPE.sub(_decode_match, text)


@dataclass
class URLParser:
    """Splits a request URL into a decoded path and decoded query arguments."""

    url: str = ""
    path: str = ""
    args: dict[str, str] = field(default_factory=dict)

    def parse(self, url: str) -> URLParser:
        """Parse ``url``, replacing any earlier result, and return self."""
        self.url = url
        self.args = {}
        path, *rest = url.split("?")
        self.path = uri_decode(path)
        if not rest:
            return self
        for chunk in rest[0].split("&"):
            parts = chunk.split("=")
            if len(parts) == 2:
                name, value = parts
                self.args[uri_decode(name)] = uri_decode(value)
        return self


def get_rand_port() -> int:
    """Return a pseudo-random port number between 10000 and 39999."""
    port = 10000
    port += (os.getpid() & 0xFFFF) % 25000
    port += random.randrange(5000)
    return port


def _descriptor(fd) -> int:
    return fd if isinstance(fd, int) else fd.fileno()


def read_some(fd, size: int) -> bytes:
    """Read at most ``size`` bytes from a descriptor or socket-like object.

    Interrupted and would-block reads are retried. Returns ``b""`` at end of
    file; raises OSError on a fatal error.
    """
    descriptor = _descriptor(fd)
    while True:
        try:
            return os.read(descriptor, size)
        except InterruptedError:
            continue
        except BlockingIOError:
            select.select([descriptor], [], [])


def write_all(fd, data: bytes) -> int:
    """Write all of ``data``, retrying partial, interrupted and blocked writes.

    Returns the number of bytes written, which is less than ``len(data)`` only
    if the other end stopped accepting data. Raises OSError on a fatal error.
    """
    descriptor = _descriptor(fd)
    view = memoryview(data)
    written = 0
    while written < len(view):
        try:
            count = os.write(descriptor, view[written:])
        except InterruptedError:
            continue
        except BlockingIOError:
            select.select([], [descriptor], [])
            continue
        if count == 0:
            break
        written += count
    return written


def connect_to_server(host_name: str, port: int) -> socket.socket:
    """Open a blocking TCP connection to ``host_name``:``port``.

    Every address the name resolves to is tried in turn. Raises OSError
    if none of them accepts the connection.
    """
    return socket.create_connection((host_name, port))