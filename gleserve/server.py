"""The search web server: static files, the query page and client handling."""

from __future__ import annotations

import functools
import os
import re
import socket
from dataclasses import dataclass, field
from typing import Callable, Sequence

from gleserve.connection import HttpConnection
from gleserve.filereader import FileReader
from gleserve.httputils import URLParser, escape_html
from gleserve.messages import HttpRequest, HttpResponse
from gleserve.serversocket import AcceptedClient, ServerSocket
from gleserve.threadpool import ThreadPool

STATIC_PREFIX = "/static/"
DEFAULT_NUM_THREADS = 100
MIN_PORT = 1024
MAX_PORT = 65535

_PAGE_HEAD = (
    "<html><head><title>333gle</title>"
    "<style>"
    ".custom-list {"
    "  list-style-type: circle;"
    "  margin: 0;"
    "  padding: 0;"
    "}"
    ".custom-list li {"
    "  margin-bottom: 10px;"
    "}"
    "</style>"
    "</head>\n"
    "<body>\n"
    '<center style="font-size:500%;">\n'
    '<span style="position:relative;bottom:-0.33em;color:orange;">3</span>'
    '<span style="color:red;">3</span>'
    '<span style="color:gold;">3</span>'
    '<span style="color:blue;">g</span>'
    '<span style="color:green;">l</span>'
    '<span style="color:red;">e</span>\n'
    "</center>\n"
    "<p>\n"
    '<div style="height:20px;"></div>\n'
    "<center>\n"
    '<form action="/query" method="get">\n'
    '<input type="text" size=30 name="terms" />\n'
    '<input type="submit" value="Search" />\n'
    "</form>\n"
    "</center><p>\n"
)

_PAGE_TAIL = "</body></html>"

_CONTENT_TYPES = {
    "html": "text/html",
    "htm": "text/html",
    "csv": "text/csv",
    "txt": "text/plain",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "js": "text/javascript",
    "css": "text/css",
    "xml": "text/xml",
    "gif": "image/gif",
    "tiff": "image/tiff",
}
_DEFAULT_CONTENT_TYPE = "application/octet-stream"

_USAGE = "Usage: gleserve port staticfiles_directory indices+"


@dataclass(frozen=True)
class SearchResult:
    """One matching document and its rank."""

    document_name: str
    rank: int


Search = Callable[[Sequence[str]], Sequence[SearchResult]]


@dataclass
class ServerOptions:
    """Command-line settings: the port, the static directory and index files."""

    port: int
    static_dir: str
    indices: list[str] = field(default_factory=list)


def content_type_for(filename: str) -> str:
    """Return the MIME type for ``filename`` judged by its last "." suffix."""
    extension = filename.split(".")[-1]
    return _CONTENT_TYPES.get(extension, _DEFAULT_CONTENT_TYPE)


def _ok(response: HttpResponse) -> None:
    response.protocol = "HTTP/1.1"
    response.response_code = 200
    response.message = "OK"


def process_file_request(uri: str, static_dir: str) -> HttpResponse:
    """Serve the file named after "/static/" in ``uri`` from ``static_dir``.

    Missing, unreadable or out-of-tree files give a 404 page.
    """
    response = HttpResponse()
    file_name = URLParser().parse(uri).path[len(STATIC_PREFIX):]
    try:
        contents = FileReader(static_dir, file_name).read()
    except OSError:
        response.protocol = "HTTP/1.1"
        response.response_code = 404
        response.message = "Not Found"
        response.append_to_body(
            f'<html><body>Couldn\'t find file "{escape_html(file_name)}"'
            "</body></html>\n"
        )
        response.append_to_body(_PAGE_TAIL)
        return response
    _ok(response)
    response.content_type = content_type_for(file_name)
    response.append_to_body(contents)
    return response


def _query_terms(uri: str) -> str | None:
    parts = re.split(r"\?+", uri)
    if len(parts) < 2:
        return None
    fields = re.split(r"=+", parts[1])
    if len(fields) < 2:
        return None
    return fields[1].strip().lower()


def _result_item(result: SearchResult) -> str:
    prefix = "" if result.document_name.startswith("http://") else STATIC_PREFIX
    return (
        f'<li> <a href="{prefix}{result.document_name}">'
        f"{escape_html(result.document_name)}</a> [{result.rank}]</li>"
    )


def process_query_request(uri: str, search: Search) -> HttpResponse:
    """Render the search page, with results if ``uri`` carries search terms.

    Terms are lower-cased and split on "+"; ``search`` receives the list of
    words and returns the matching documents in order.
    """
    response = HttpResponse()
    _ok(response)
    response.content_type = "text/html"
    response.append_to_body(_PAGE_HEAD)

    terms = _query_terms(uri)
    words = [word for word in re.split(r"\++", terms) if word] if terms else []
    if words:
        results = list(search(words))
        if results:
            response.append_to_body(
                f"{len(results)} results found for "
                f"<b>{escape_html(' '.join(words))}</b>"
            )
            response.append_to_body("<br>")
            response.append_to_body("<ul>")
            for result in results:
                response.append_to_body(_result_item(result))
            response.append_to_body("</ul>")
        else:
            response.append_to_body("<p><br>")
            response.append_to_body(f"No results found for <b>{escape_html(terms)}</b>")
            response.append_to_body("<p>")

    response.append_to_body(_PAGE_TAIL)
    return response


def process_request(request: HttpRequest, static_dir: str, search: Search) -> HttpResponse:
    """Answer ``request``: a static file under "/static/", otherwise the query page."""
    if request.uri.startswith(STATIC_PREFIX):
        return process_file_request(request.uri, static_dir)
    return process_query_request(request.uri, search)


class HttpServer:
    """Serves static files and search queries on a port.

    ``search`` is called with the list of query words and returns the
    matching documents.
    """

    def __init__(
        self,
        port: int,
        static_dir: str,
        search: Search,
        num_threads: int = DEFAULT_NUM_THREADS,
    ) -> None:
        self.port = port
        self.static_dir = static_dir
        self.search = search
        self.num_threads = num_threads

    def run(self) -> None:
        """Listen on the port and serve clients until accepting fails.

        Raises OSError if the listening socket cannot be created.
        """
        print("  creating and binding the listening socket...")
        with ServerSocket(self.port) as server_socket:
            server_socket.bind_and_listen(socket.AF_INET6)
            self.port = server_socket.port
            print("  accepting connections...\n")
            with ThreadPool(self.num_threads) as pool:
                while True:
                    try:
                        client = server_socket.accept()
                    except OSError:
                        break
                    pool.dispatch(functools.partial(self.handle_client, client))

    def handle_client(self, client: AcceptedClient) -> None:
        """Answer requests from ``client`` until it closes or asks to close."""
        print(
            f"  client {client.client_dns}:{client.client_port} "
            f"(IP address {client.client_addr}) connected."
        )
        with HttpConnection(client.sock) as connection:
            while True:
                try:
                    request = connection.next_request()
                except (OSError, ValueError):
                    break
                if request is None:
                    break
                response = process_request(request, self.static_dir, self.search)
                try:
                    connection.write_response(response)
                except OSError:
                    break
                if request.header_value("connection") == "close":
                    break


def parse_arguments(argv: Sequence[str]) -> ServerOptions:
    """Parse "port staticfiles_directory indices+" (without the program name).

    Raises ValueError with a usage message if there are too few arguments,
    the port is not a number from 1024 to 65535, the directory is not a
    directory, or an index is not a regular file.
    """
    if len(argv) < 3:
        raise ValueError(_USAGE)
    try:
        port = int(argv[0], 10)
    except ValueError:
        raise ValueError(_USAGE) from None
    if not MIN_PORT <= port <= MAX_PORT:
        raise ValueError(_USAGE)
    static_dir = argv[1]
    if not os.path.isdir(static_dir):
        raise ValueError(_USAGE)
    indices = list(argv[2:])
    if not all(os.path.isfile(index) for index in indices):
        raise ValueError(_USAGE)
    return ServerOptions(port=port, static_dir=static_dir, indices=indices)