"""
http_writer - HTTP/1.x request writer

Serializes outbound HTTP requests onto a byte sink, framing bodies as
fixed-length, chunked, URL-encoded or multipart/form-data while keeping
memory bounded.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .config import RequestDefaults
from .headers import Headers
from .request import Request, METHODS
from .writer import RequestWriter
from .body import BodyStrategy, EmptyBody, BufferBody, StreamBody, FormBody
from .multipart import (
    FormField,
    MultipartEncoder,
    ChunkedPartOutput,
    SpooledPartOutput,
    generate_boundary,
    quote_string,
)
from .exceptions import (
    HTTPWriterError,
    ConfigurationError,
    EncodingError,
    ProtocolError,
    StreamError,
)
from .network import Sink, SocketSink, MemorySink, as_sink
from . import chunked

__all__ = [
    "RequestDefaults",
    "Headers",
    "Request",
    "METHODS",
    "RequestWriter",
    "BodyStrategy",
    "EmptyBody",
    "BufferBody",
    "StreamBody",
    "FormBody",
    "FormField",
    "MultipartEncoder",
    "ChunkedPartOutput",
    "SpooledPartOutput",
    "generate_boundary",
    "quote_string",
    "HTTPWriterError",
    "ConfigurationError",
    "EncodingError",
    "ProtocolError",
    "StreamError",
    "Sink",
    "SocketSink",
    "MemorySink",
    "as_sink",
    "chunked",
]
