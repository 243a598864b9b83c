from gleserve.messages import HttpRequest, HttpResponse


def test_request_missing_header_is_empty():
    req = HttpRequest("/foo")
    assert req.uri == "/foo"
    assert req.header_value("host") == ""
    assert req.header_count() == 0


def test_request_add_header_overwrites():
    req = HttpRequest("/bar")
    req.add_header("connection", "close")
    req.add_header("host", "somehost.foo.bar")
    req.add_header("connection", "keep-alive")
    assert req.header_value("connection") == "keep-alive"
    assert req.header_value("host") == "somehost.foo.bar"
    assert req.header_count() == 2


def test_request_lookup_is_exact():
    req = HttpRequest()
    req.add_header("other", "some_value")
    assert req.header_value("OTHER") == ""
    assert req.header_value("other") == "some_value"


def test_response_without_content_type():
    rep = HttpResponse(protocol="HTTP/1.1", response_code=200, message="OK")
    rep.append_to_body("This is the body of the response.")
    expected = (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-length: 33\r\n\r\n"
        b"This is the body of the response."
    )
    assert rep.to_bytes() == expected
    assert len(rep.to_bytes()) == 72


def test_response_with_content_type():
    rep = HttpResponse(protocol="HTTP/1.1", response_code=200, message="OK")
    rep.content_type = "text/html"
    rep.append_to_body("This is the second response.")
    expected = (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-type: text/html\r\n"
        b"Content-length: 28\r\n\r\n"
        b"This is the second response."
    )
    assert rep.to_bytes() == expected
    assert len(rep.to_bytes()) == 92


def test_response_body_appends_text_and_bytes():
    rep = HttpResponse(protocol="HTTP/1.1", response_code=404, message="Not Found")
    rep.append_to_body("caf\u00e9 ")
    rep.append_to_body(b"\x00\xff")
    body = "caf\u00e9 ".encode("utf-8") + b"\x00\xff"
    assert rep.body == body
    wire = rep.to_bytes()
    assert wire.startswith(b"HTTP/1.1 404 Not Found\r\n")
    assert f"Content-length: {len(body)}\r\n\r\n".encode() in wire
    assert wire.endswith(body)


def test_response_empty_body_has_header_only():
    rep = HttpResponse(protocol="HTTP/1.1", response_code=200, message="OK")
    head, _, rest = rep.to_bytes().partition(b"\r\n\r\n")
    assert rest == b""
    assert head.split(b"\r\n")[-1] == b"Content-length: 0"