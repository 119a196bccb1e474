"""
Unit tests for the header collection.
"""

import pytest

from http_writer.exceptions import ConfigurationError
from http_writer.headers import Headers, capitalize


class TestCapitalize:
    """Test canonical header name capitalization."""
    
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("content-type", "Content-Type"),
            ("CONTENT-LENGTH", "Content-Length"),
            ("x-API-key", "X-Api-Key"),
            ("host", "Host"),
        ],
    )
    def test_capitalize(self, name: str, expected: str) -> None:
        """Test each dash-separated segment is capitalized."""
        assert capitalize(name) == expected


class TestHeaders:
    """Test Headers get/set/delete and serialization order."""
    
    def test_case_insensitive_access(self) -> None:
        """Test lookups ignore case."""
        headers = Headers({"content-type": "text/plain"})
        assert headers["Content-Type"] == "text/plain"
        assert headers.get("CONTENT-TYPE") == "text/plain"
        assert "Content-type" in headers
        assert "Accept" not in headers
    
    def test_items_preserve_order_and_capitalize(self) -> None:
        """Test serialization order follows insertion."""
        headers = Headers([("host", "example.com"), ("x-trace-id", "abc")])
        headers["accept"] = "*/*"
        assert list(headers.items()) == [
            ("Host", "example.com"),
            ("X-Trace-Id", "abc"),
            ("Accept", "*/*"),
        ]
    
    def test_set_keeps_position(self) -> None:
        """Test replacing a header keeps its place."""
        headers = Headers([("A", "1"), ("B", "2")])
        headers["a"] = "3"
        assert list(headers.items()) == [("A", "3"), ("B", "2")]
    
    def test_add_joins_values(self) -> None:
        """Test repeated fields are joined on output."""
        headers = Headers()
        headers.add("Accept", "text/html")
        headers.add("accept", "application/json")
        assert headers["Accept"] == "text/html, application/json"
        assert list(headers.items()) == [("Accept", "text/html, application/json")]
    
    def test_delete(self) -> None:
        """Test deleting headers."""
        headers = Headers({"Transfer-Encoding": "chunked"})
        assert headers.delete("transfer-encoding") == ["chunked"]
        assert headers.delete("transfer-encoding") is None
        assert len(headers) == 0
    
    def test_set_none_deletes(self) -> None:
        """Test assigning None removes a header."""
        headers = Headers({"X-Test": "1"})
        headers["X-Test"] = None
        assert "X-Test" not in headers
    
    def test_copy_from_headers(self) -> None:
        """Test building Headers from another Headers instance."""
        original = Headers({"Host": "example.com"})
        copy = Headers(original)
        copy["Host"] = "other.example"
        assert original["Host"] == "example.com"
    
    def test_invalid_name(self) -> None:
        """Test names must be tokens."""
        with pytest.raises(ConfigurationError, match="invalid header name"):
            Headers({"Bad Header": "x"})
    
    def test_value_with_line_break(self) -> None:
        """Test values cannot smuggle extra header lines."""
        headers = Headers()
        with pytest.raises(ConfigurationError, match="line break"):
            headers["X-Test"] = "ok\r\nInjected: yes"


class TestContentType:
    """Test Content-Type helpers."""
    
    def test_media_type_without_params(self) -> None:
        """Test content_type strips parameters."""
        headers = Headers({"Content-Type": "multipart/form-data; boundary=B123"})
        assert headers.content_type == "multipart/form-data"
        assert headers.type_params == {"boundary": "B123"}
    
    def test_quoted_params(self) -> None:
        """Test quoted parameter values are unquoted."""
        headers = Headers({"Content-Type": 'text/plain; Charset="utf-8"'})
        assert headers.type_params == {"charset": "utf-8"}
    
    def test_missing(self) -> None:
        """Test missing Content-Type."""
        headers = Headers()
        assert headers.content_type is None
        assert headers.type_params == {}
    
    def test_set_content_type(self) -> None:
        """Test setting a media type with parameters."""
        headers = Headers()
        headers.set_content_type("multipart/form-data", boundary="xyz")
        assert headers["Content-Type"] == "multipart/form-data; boundary=xyz"


class TestFraming:
    """Test Content-Length and chunked helpers."""
    
    def test_content_length_roundtrip(self) -> None:
        """Test setting and reading Content-Length."""
        headers = Headers()
        assert headers.content_length is None
        headers.content_length = 42
        assert headers["Content-Length"] == "42"
        assert headers.content_length == 42
        headers.content_length = None
        assert "Content-Length" not in headers
    
    def test_content_length_bad_format(self) -> None:
        """Test malformed Content-Length."""
        headers = Headers({"Content-Length": "abc"})
        with pytest.raises(ConfigurationError, match="wrong Content-Length format"):
            headers.content_length
    
    def test_negative_content_length(self) -> None:
        """Test negative lengths are rejected."""
        headers = Headers()
        with pytest.raises(ConfigurationError):
            headers.content_length = -1
    
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("chunked", True),
            ("Chunked", True),
            ("gzip, chunked", True),
            ("chunked-ish", False),
            ("identity", False),
        ],
    )
    def test_chunked(self, value: str, expected: bool) -> None:
        """Test chunked transfer-encoding detection."""
        headers = Headers({"Transfer-Encoding": value})
        assert headers.chunked is expected
    
    def test_not_chunked_without_header(self) -> None:
        """Test chunked is False when Transfer-Encoding is absent."""
        assert Headers().chunked is False


class TestCredentials:
    """Test authorization helpers."""
    
    def test_basic_auth(self) -> None:
        """Test Basic credentials are base64 encoded."""
        headers = Headers()
        headers.basic_auth("user", "pass")
        assert headers["Authorization"] == "Basic dXNlcjpwYXNz"
    
    def test_proxy_basic_auth(self) -> None:
        """Test Proxy-Authorization header."""
        headers = Headers()
        headers.proxy_basic_auth("user", "pass")
        assert headers["Proxy-Authorization"] == "Basic dXNlcjpwYXNz"
