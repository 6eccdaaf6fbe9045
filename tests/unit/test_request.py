"""
Unit tests for HTTP request parsing.
"""

import pytest

from minihttp.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/echo/abc"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)
        assert request.body == b""

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed correctly."""
        request = parse_request(sample_get_request)

        assert request.headers["host"] == "localhost:4221"
        assert request.user_agent == "pytest"
        assert request.headers["accept"] == "*/*"

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test parsing POST request with a body."""
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.path == "/files/number"
        assert request.headers["content-length"] == "5"
        assert request.body == b"12345"

    def test_path_kept_verbatim(self):
        """No decoding, no query splitting, no normalization."""
        data = b"GET /echo/a%20b/../c?x=1 HTTP/1.1\r\n\r\n"
        request = parse_request(data)

        assert request.path == "/echo/a%20b/../c?x=1"

    def test_unknown_method_parses(self):
        """Method is not validated; routing answers 404 later."""
        request = parse_request(b"BREW /pot HTTP/1.1\r\n\r\n")

        assert request.method == "BREW"

    def test_trailing_tokens_after_version_ignored(self):
        request = parse_request(b"GET / HTTP/1.1 extra stuff\r\n\r\n")

        assert request.path == "/"
        assert request.version == "HTTP/1.1"

    @pytest.mark.parametrize("request_line", [
        b"GARBAGE",
        b"GET /",
        b"get / HTTP/1.1",
        b"GET  / HTTP/1.1",
        b"GET / HTTX/1.1",
        b"",
    ])
    def test_parse_invalid_request_line(self, request_line: bytes):
        """Malformed request lines are 400."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(request_line + b"\r\nHost: x\r\n\r\n")

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("version", [b"HTTP/1.0", b"HTTP/2.0", b"HTTP/0.9"])
    def test_unsupported_version(self, version: bytes):
        """Anything but HTTP/1.1 is 505."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET / " + version + b"\r\n\r\n")

        assert exc_info.value.status_code == 505

    def test_parse_missing_terminator(self):
        """A head that never ends is 400."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET / HTTP/1.1\r\nHost: localhost\r\n")

        assert exc_info.value.status_code == 400

    def test_parse_empty_request(self):
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"")

        assert exc_info.value.status_code == 400

    def test_parse_request_too_large(self):
        """Test that oversized requests are rejected with 413."""
        parser = RequestParser(max_request_size=100)
        data = b"GET / HTTP/1.1\r\n" + b"X-Pad: " + b"a" * 200 + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(data)

        assert exc_info.value.status_code == 413

    def test_content_length_truncates_body(self):
        """Bytes beyond Content-Length are not part of the body."""
        data = b"POST /files/a HTTP/1.1\r\nContent-Length: 3\r\n\r\nabcdef"
        request = parse_request(data)

        assert request.body == b"abc"

    def test_short_body_rejected(self):
        """Fewer body bytes than Content-Length announced is 400."""
        data = b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(data)

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("value", [b"ten", b"-1", b"1.5"])
    def test_invalid_content_length(self, value: bytes):
        data = b"POST /files/a HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\nabc"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(data)

        assert exc_info.value.status_code == 400

    def test_duplicate_content_length_last_wins(self):
        data = b"POST /files/a HTTP/1.1\r\nContent-Length: 50\r\nContent-Length: 3\r\n\r\nabc"

        assert parse_request(data).body == b"abc"

    def test_no_content_length_takes_rest(self):
        """Without Content-Length, everything after the head is the body."""
        data = b"POST /files/a HTTP/1.1\r\n\r\nhello"
        request = parse_request(data)

        assert request.body == b"hello"

    def test_binary_body_preserved(self):
        body = bytes(range(256))
        data = b"POST /files/bin HTTP/1.1\r\nContent-Length: 256\r\n\r\n" + body

        assert parse_request(data).body == body

    def test_malformed_header_line_skipped(self):
        data = b"GET /user-agent HTTP/1.1\r\nbroken\r\nUser-Agent: x\r\n\r\n"
        request = parse_request(data)

        assert request.headers == {"user-agent": "x"}

    def test_case_insensitive_headers(self):
        """Test case-insensitive header access."""
        data = b"GET / HTTP/1.1\r\nUSER-AGENT: curl/8.4.0\r\nAccept-ENCODING: gzip\r\n\r\n"
        request = parse_request(data)

        assert request.user_agent == "curl/8.4.0"
        assert request.accept_encoding == "gzip"
        assert request.get_header("User-Agent") == "curl/8.4.0"


class TestHTTPRequest:
    """Tests for HTTPRequest class."""

    def test_get_header_default(self):
        request = HTTPRequest(method="GET", path="/", headers={})

        assert request.get_header("X-Custom") == ""
        assert request.get_header("X-Custom", "default") == "default"

    def test_missing_user_agent_is_empty(self):
        request = HTTPRequest(method="GET", path="/user-agent")

        assert request.user_agent == ""
        assert request.accept_encoding is None
