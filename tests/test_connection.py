import socket
import threading

import pytest

from gleserve.connection import HttpConnection, parse_request
from gleserve.httputils import read_some, write_all
from gleserve.messages import HttpResponse

REQ1 = (
    b"GET /foo HTTP/1.1\r\n"
    b"Host: somehost.foo.bar\r\n"
    b"Connection: close\r\n"
    b"\r\n"
)
REQ2 = (
    b"GET /bar HTTP/1.1\r\n"
    b"Connection: close\r\n"
    b"Host: somehost.foo.bar\r\n"
    b"\r\n"
)
REQ3 = (
    b"GET /baz HTTP/1.1\r\n"
    b"connection: keep-alive\r\n"
    b"host: somehost.foo.bar\r\n"
    b"OTHER: some_value\r\n"
    b"\r\n"
)


@pytest.fixture
def pair():
    ours, theirs = socket.socketpair()
    conn = HttpConnection(ours)
    yield conn, theirs
    conn.close()
    theirs.close()


def _check_first_three(first, second, third):
    assert first.uri == "/foo"
    assert first.header_value("host") == "somehost.foo.bar"
    assert first.header_value("connection") == "close"
    assert first.header_count() == 2

    assert second.uri == "/bar"
    assert second.header_value("host") == "somehost.foo.bar"
    assert second.header_value("connection") == "close"
    assert second.header_count() == 2

    assert third.uri == "/baz"
    assert third.header_value("host") == "somehost.foo.bar"
    assert third.header_value("connection") == "keep-alive"
    assert third.header_value("other") == "some_value"
    assert third.header_count() == 3


def test_back_to_back_requests(pair):
    conn, peer = pair
    for req in (REQ1, REQ2, REQ3):
        assert write_all(peer, req) == len(req)
    first = conn.next_request()
    second = conn.next_request()
    third = conn.next_request()
    _check_first_three(first, second, third)


def test_write_responses(pair):
    conn, peer = pair
    rep1 = HttpResponse(protocol="HTTP/1.1", response_code=200, message="OK")
    rep1.append_to_body("This is the body of the response.")
    expected1 = (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-length: 33\r\n\r\n"
        b"This is the body of the response."
    )
    conn.write_response(rep1)
    got1 = read_some(peer, 1024)
    assert len(got1) == 72
    assert got1 == expected1

    rep2 = HttpResponse(
        protocol="HTTP/1.1", response_code=200, message="OK", content_type="text/html"
    )
    rep2.append_to_body("This is the second response.")
    expected2 = (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-type: text/html\r\n"
        b"Content-length: 28\r\n\r\n"
        b"This is the second response."
    )
    conn.write_response(rep2)
    got2 = read_some(peer, 1024)
    assert len(got2) == 92
    assert got2 == expected2


def test_partial_reads(pair):
    conn, peer = pair
    part1 = (
        b"GET /foo HTTP/1.1\r\n"
        b"Host: somehost.foo.bar\r\n"
        b"Connection: close\r\n"
        b"\r\nGET /bar "
    )
    part2 = (
        b"HTTP/1.1\r\n"
        b"Connection: close\r\n"
        b"Host: somehost.foo.bar\r\n"
        b"\r\nGET /baz HTTP/1.1\r\n"
        b"connection:"
    )
    part3 = (
        b" keep-alive\r\n"
        b"host: somehost.foo.bar\r\n"
        b"OTHER: some_value\r\n"
    )
    tail = b"\r\n"

    write_all(peer, part1)
    first = conn.next_request()
    write_all(peer, part2)
    second = conn.next_request()
    write_all(peer, part3)
    timer = threading.Timer(0.3, write_all, args=(peer, tail))
    timer.start()
    third = conn.next_request()
    timer.join()
    _check_first_three(first, second, third)


def test_end_of_stream_returns_none(pair):
    conn, peer = pair
    write_all(peer, REQ1 + b"GET /partial HTTP/1.1\r\n")
    peer.shutdown(socket.SHUT_WR)
    assert conn.next_request().uri == "/foo"
    assert conn.next_request() is None


def test_write_to_closed_peer_raises(pair):
    conn, peer = pair
    peer.close()
    response = HttpResponse(protocol="HTTP/1.1", response_code=200, message="OK")
    response.append_to_body(b"x" * 100000)
    with pytest.raises(OSError):
        conn.write_response(response)


def test_close_releases_socket():
    ours, theirs = socket.socketpair()
    with HttpConnection(ours):
        pass
    assert ours.fileno() == -1
    assert theirs.recv(10) == b""
    theirs.close()


def test_parse_request_lowercases_names_and_skips_malformed():
    text = (
        "GET /a/b?c=d HTTP/1.1\r\n"
        "X-Custom-Name: Value\r\n"
        "Broken header line\r\n"
        "User-Agent: two words\r\n"
        "\r\n"
    )
    request = parse_request(text)
    assert request.uri == "/a/b?c=d"
    assert request.headers == {"x-custom-name": "Value"}


def test_parse_request_later_header_overrides():
    request = parse_request("GET / HTTP/1.1\r\nHost: one\r\nhost: two\r\n\r\n")
    assert request.header_value("host") == "two"
    assert request.header_count() == 1


def test_parse_request_without_uri_raises():
    with pytest.raises(ValueError):
        parse_request("GET\r\n\r\n")