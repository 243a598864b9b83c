"""A TCP listening socket that accepts clients and describes both ends."""

from __future__ import annotations

import errno
import logging
import os
import select
import socket
from dataclasses import dataclass

_log = logging.getLogger(__name__)

_NAME_SIZE_FLAGS = 0


@dataclass
class AcceptedClient:
    """A newly accepted connection and what is known about both of its ends.

    The caller owns ``sock`` and is responsible for closing it.
    """

    sock: socket.socket
    client_addr: str
    client_port: int
    client_dns: str
    server_addr: str
    server_dns: str


def _client_endpoint(family: int, address) -> tuple[str, int]:
    if family in (socket.AF_INET, socket.AF_INET6):
        return address[0], address[1]
    raise OSError(errno.EAFNOSUPPORT, f"unsupported client address family {family}")


def _reverse_dns(address) -> str:
    host, _service = socket.getnameinfo(address, _NAME_SIZE_FLAGS)
    return host


class ServerSocket:
    """Creates a TCP listening socket on a given number and accepts clients.

    The constructor only remembers the number; ``bind_and_listen`` creates
    the socket. Passing 0 lets the system choose a free number; after
    binding, the chosen number is stored back in the ``port`` attribute.
    """

    def __init__(self, port: int) -> None:
        self.port = port
        self.family: int | None = None
        self._listener: socket.socket | None = None

    @property
    def listen_sock(self) -> socket.socket | None:
        """The listening socket, or None if not listening."""
        return self._listener

    def bind_and_listen(self, family: int = socket.AF_INET6) -> socket.socket:
        """Bind to the wildcard address and start listening.

        ``family`` is AF_INET, AF_INET6 (which also serves IPv4 clients) or
        AF_UNSPEC. Every address the system suggests is tried in turn.
        Returns the listening socket; raises OSError if none can be bound
        or the socket cannot listen.
        """
        flags = socket.AI_PASSIVE | getattr(socket, "AI_V4MAPPED", 0)
        candidates = socket.getaddrinfo(
            None, self.port, family, socket.SOCK_STREAM, socket.IPPROTO_TCP, flags
        )
        listener: socket.socket | None = None
        last_error: OSError | None = None
        for fam, socktype, proto, _canon, address in candidates:
            try:
                sock = socket.socket(fam, socktype, proto)
            except OSError as exc:
                _log.warning("socket() failed: %s", exc)
                last_error = exc
                continue
            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                if fam == socket.AF_INET6:
                    try:
                        sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
                    except OSError:
                        pass
                sock.bind(address)
            except OSError as exc:
                sock.close()
                last_error = exc
                continue
            listener = sock
            break
        if listener is None:
            if last_error is not None:
                raise last_error
            raise OSError(errno.EADDRNOTAVAIL, f"no address to bind port {self.port}")
        try:
            listener.listen(socket.SOMAXCONN)
        except OSError:
            listener.close()
            raise
        self.close()
        self._listener = listener
        self.family = listener.family
        self.port = listener.getsockname()[1]
        return listener

    def accept(self) -> AcceptedClient:
        """Block until a client connects and return a description of it.

        Raises OSError if the socket is not listening, if accepting fails,
        or if the client's address cannot be described.
        """
        listener = self._listener
        if listener is None:
            raise OSError(errno.EBADF, os.strerror(errno.EBADF))
        while True:
            try:
                conn, address = listener.accept()
            except InterruptedError:
                continue
            except BlockingIOError:
                select.select([listener], [], [])
                continue
            break
        try:
            client_addr, client_port = _client_endpoint(conn.family, address)
            client_dns = _reverse_dns(address)
            server_addr, server_dns = self._server_side(conn)
        except OSError:
            conn.close()
            raise
        return AcceptedClient(
            sock=conn,
            client_addr=client_addr,
            client_port=client_port,
            client_dns=client_dns,
            server_addr=server_addr,
            server_dns=server_dns,
        )

    @staticmethod
    def _server_side(conn: socket.socket) -> tuple[str, str]:
        local = conn.getsockname()
        try:
            server_dns = _reverse_dns(local)
        except OSError:
            server_dns = ""
        return local[0], server_dns

    def close(self) -> None:
        """Close the listening socket if it is open; later calls do nothing."""
        if self._listener is not None:
            self._listener.close()
            self._listener = None

    def __enter__(self) -> ServerSocket:
        return self

    def __exit__(self, *args) -> None:
        self.close()