"""
Unit tests for the request codec.
"""

import pytest

from minihttp.http.request import (
    HTTPParseError,
    RequestLine,
    RequestParser,
    build_request,
    parse_request,
)
from minihttp.http.status_codes import HTTPStatus
from minihttp.http.url import URL, parse_url


class TestBuildRequest:
    """Tests for the client-side request builder."""

    def test_exact_wire_format(self):
        """Test that the request is byte-for-byte what peers expect."""
        request = build_request(URL(host="example.com", path="/docs/index.html"))

        assert request == (
            b"GET /docs/index.html HTTP/1.1\r\n"
            b"Host: example.com\r\n"
            b"Connection: close\r\n"
            b"\r\n"
        )

    def test_no_extra_headers(self):
        """Test that only Host and Connection are sent."""
        request = build_request(parse_url("http://127.0.0.1/"))
        header_lines = request.split(b"\r\n")[1:-2]

        assert header_lines == [b"Host: 127.0.0.1", b"Connection: close"]

    def test_built_request_parses(self):
        """Test that the server parser accepts what the client builds."""
        request = build_request(parse_url("http://localhost/a.txt"))

        assert parse_request(request) == RequestLine("GET", "/a.txt", "HTTP/1.1")


class TestRequestParser:
    """Tests for the server-side request line parser."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        line = RequestParser().parse(sample_get_request)

        assert line.method == "GET"
        assert line.path == "/index.html"
        assert line.version == "HTTP/1.1"

    def test_headers_are_ignored(self):
        """Test that anything after the request line does not matter."""
        raw = b"GET / HTTP/1.1\r\nX-Junk: a b c d e\r\nnot even a header\r\n\r\n"

        assert parse_request(raw).path == "/"

    def test_repeated_spaces_collapse(self):
        """Test that empty tokens between spaces are skipped."""
        raw = b"GET   /a.txt  HTTP/1.1\r\n\r\n"

        assert parse_request(raw) == RequestLine("GET", "/a.txt", "HTTP/1.1")

    def test_fourth_token_is_bad_request(self):
        """Test that an extra token in the request line yields 400."""
        raw = b"GET / HTTP/1.1 extra\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == HTTPStatus.BAD_REQUEST

    @pytest.mark.parametrize("version", [b"HTTP/1.0", b"HTTP/2", b"http/1.1"])
    def test_wrong_version_is_bad_request(self, version: bytes):
        """Test that only HTTP/1.1 is accepted."""
        raw = b"GET / " + version + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("raw", [b"", b"GET\r\n\r\n", b"GET /\r\n\r\n"])
    def test_missing_tokens_is_bad_request(self, raw: bytes):
        """Test handling of a truncated request line."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("method", [b"POST", b"HEAD", b"DELETE", b"get"])
    def test_other_methods_not_implemented(self, method: bytes):
        """Test that methods other than GET yield 501."""
        raw = method + b" / HTTP/1.1\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == HTTPStatus.NOT_IMPLEMENTED

    def test_framing_checked_before_method(self):
        """Test that a bad version wins over a bad method."""
        raw = b"POST / HTTP/1.0\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 400

    def test_request_line_str(self):
        assert str(RequestLine("GET", "/x", "HTTP/1.1")) == "GET /x HTTP/1.1"
