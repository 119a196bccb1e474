"""
Pytest configuration for http_writer tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

import io
from typing import List, Tuple

import h11
import pytest

from http_writer.config import RequestDefaults
from http_writer.network.mock import MemorySink, MockBodySource


def _parse_request(data: bytes) -> Tuple[h11.Request, bytes]:
    """Parse written request bytes as a server would and return (event, body)."""
    connection = h11.Connection(h11.SERVER)
    connection.receive_data(data)
    request = connection.next_event()
    assert isinstance(request, h11.Request), request
    
    body: List[bytes] = []
    while True:
        event = connection.next_event()
        if isinstance(event, h11.Data):
            body.append(bytes(event.data))
        elif isinstance(event, h11.EndOfMessage):
            break
        else:
            raise AssertionError(f"incomplete request, got {event!r}")
    
    return request, b"".join(body)


@pytest.fixture
def parse_request():
    """Parse written requests with h11 in the server role."""
    return _parse_request


@pytest.fixture
def sink() -> MemorySink:
    """Create an in-memory sink."""
    return MemorySink()


@pytest.fixture
def bare_defaults() -> RequestDefaults:
    """Defaults that add no headers, for exact output comparisons."""
    return RequestDefaults(accept="", accept_encoding="", user_agent="")


@pytest.fixture
def test_defaults() -> RequestDefaults:
    """Defaults with a fixed user agent."""
    return RequestDefaults(user_agent="http_writer-test/1.0")


@pytest.fixture
def mock_source():
    """Create a mock body source for testing."""
    def _create_source(data: bytes, **kwargs) -> MockBodySource:
        return MockBodySource(data, **kwargs)
    return _create_source


@pytest.fixture
def sample_fields():
    """The file field plus plain field pair used across multipart tests."""
    return [
        ("f", b"hi", {"filename": "a.txt"}),
        ("x", "y"),
    ]


@pytest.fixture
def sample_multipart_body() -> bytes:
    """Expected encoding of sample_fields with boundary B123."""
    return (
        b"--B123\r\n"
        b'Content-Disposition: form-data; name="f"; filename="a.txt"\r\n'
        b"Content-Type: application/octet-stream\r\n"
        b"\r\n"
        b"hi\r\n"
        b"--B123\r\n"
        b'Content-Disposition: form-data; name="x"\r\n'
        b"\r\n"
        b"y\r\n"
        b"--B123--\r\n"
    )


@pytest.fixture
def sample_large_data() -> bytes:
    """Sample large body for testing."""
    return bytes(range(256)) * 400  # 100KB of data


@pytest.fixture
def upload_file(tmp_path):
    """Create a file on disk and open it for reading."""
    path = tmp_path / "report.csv"
    path.write_bytes(b"id,value\n1,42\n")
    handle = open(path, "rb")
    yield handle
    handle.close()


@pytest.fixture
def bytes_source():
    """Create a BytesIO body source."""
    def _create(data: bytes) -> io.BytesIO:
        return io.BytesIO(data)
    return _create
