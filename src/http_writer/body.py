"""
Request bodies and their serialization strategies.

A request carries exactly one body variant. ``BodyStrategy`` decides
from the variant and the headers how the body is framed, fixes the
framing headers, asks for the header block to be written and then
writes the body itself.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Union
from urllib.parse import urlencode

from .chunked import ChunkedWriter
from .config import COPY_BLOCK_SIZE, RequestDefaults
from .exceptions import ConfigurationError, EncodingError, StreamError
from .headers import Headers
from .multipart import (
    ChunkedPartOutput,
    FormField,
    MultipartEncoder,
    SpooledPartOutput,
    generate_boundary,
)
from .streams import BodySource, is_readable, read_all, read_blocks

logger = logging.getLogger(__name__)


FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM_DATA = "multipart/form-data"

_MULTIPART_RE = re.compile(r"\Amultipart/form-data\Z", re.IGNORECASE)


@dataclass(frozen=True)
class EmptyBody:
    """No body; only the header block is sent."""
    
    kind = "none"


@dataclass(frozen=True)
class BufferBody:
    """A complete in-memory body, written verbatim."""
    
    data: bytes
    
    kind = "buffer"


@dataclass
class StreamBody:
    """A single-pass readable source."""
    
    source: BodySource
    consumed: bool = False
    
    kind = "stream"


@dataclass
class FormBody:
    """Structured form fields, URL-encoded or multipart."""
    
    fields: List[FormField] = field(default_factory=list)
    boundary: Optional[str] = None
    charset: Optional[str] = None
    consumed: bool = False
    
    kind = "form"
    
    @property
    def has_streams(self) -> bool:
        return any(f.is_stream for f in self.fields)


Body = Union[EmptyBody, BufferBody, StreamBody, FormBody]


def make_body(value: Any) -> Body:
    """
    Wrap a raw body value in its variant.
    
    Args:
        value: None, bytes-like, str (sent as UTF-8) or a readable source
    
    Returns:
        The matching body variant
    """
    if value is None:
        return EmptyBody()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BufferBody(bytes(value))
    if isinstance(value, str):
        return BufferBody(value.encode("utf-8"))
    if is_readable(value):
        return StreamBody(value)
    raise ConfigurationError(f"unsupported body type {type(value).__name__}")


def urlencode_fields(
    fields: List[FormField],
    charset: Optional[str] = None,
    block_size: int = COPY_BLOCK_SIZE,
) -> bytes:
    """
    Serialize fields as ``application/x-www-form-urlencoded``.
    
    Readable values are read to the end. Spaces become ``+``.
    """
    pairs = []
    for form_field in fields:
        value = form_field.value
        if form_field.is_stream:
            value = read_all(value, block_size)
        elif not isinstance(value, (str, bytes, bytearray)):
            value = str(value)
        pairs.append((form_field.name, bytes(value) if isinstance(value, bytearray) else value))
    try:
        query = urlencode(pairs, encoding=charset or "utf-8")
    except LookupError as e:
        raise EncodingError(f"unknown charset {charset!r}", cause=e) from e
    except UnicodeError as e:
        raise EncodingError(f"cannot encode form data: {e}", cause=e) from e
    return query.encode("ascii")


class BodyStrategy:
    """
    Frames a request body onto a sink.
    
    Dispatch order is buffer, stream, form, then no body.
    """
    
    def __init__(self, headers: Headers, defaults: Optional[RequestDefaults] = None) -> None:
        self._headers = headers
        self._defaults = defaults or RequestDefaults()
    
    def write(self, body: Body, sink, write_header: Callable[[], None]) -> None:
        """
        Write the body, calling ``write_header`` once the headers are final.
        
        Args:
            body: Body variant of the request
            sink: Destination with ``write(bytes)``
            write_header: Emits the status line and header block
        """
        if isinstance(body, BufferBody):
            self.write_buffer(body.data, sink, write_header)
        elif isinstance(body, StreamBody):
            self.write_stream(body, sink, write_header)
        elif isinstance(body, FormBody):
            self.write_form(body, sink, write_header)
        else:
            write_header()
    
    def supply_default_content_type(self) -> None:
        if self._headers.content_type:
            return
        logger.warning(f"Content-Type did not set; using {FORM_URLENCODED}")
        self._headers.content_type = FORM_URLENCODED
    
    def write_buffer(self, data: bytes, sink, write_header: Callable[[], None]) -> None:
        """Send a fixed-length body. Content-Length wins over chunking."""
        self._headers.content_length = len(data)
        self._headers.delete("Transfer-Encoding")
        
        self.supply_default_content_type()
        write_header()
        
        if data:
            sink.write(data)
    
    def write_stream(self, body: StreamBody, sink, write_header: Callable[[], None]) -> None:
        """
        Send a readable source, fixed-length or chunked.
        
        Raises:
            ConfigurationError: If neither or both of Content-Length and
                chunked Transfer-Encoding are set
            StreamError: If the source was consumed already, or does not
                deliver the declared Content-Length
        """
        length = self._headers.content_length
        chunked = self._headers.chunked
        if length is None and not chunked:
            raise ConfigurationError(
                "Content-Length not given and Transfer-Encoding is not `chunked'"
            )
        if length is not None and chunked:
            raise ConfigurationError(
                "Content-Length and chunked Transfer-Encoding are mutually exclusive"
            )
        if body.consumed:
            raise StreamError("request body stream was already consumed")
        
        self.supply_default_content_type()
        write_header()
        body.consumed = True
        
        block_size = self._defaults.stream_block_size
        if chunked:
            writer = ChunkedWriter(sink)
            for block in read_blocks(body.source, block_size):
                writer.write(block)
            writer.close()
            logger.debug(f"Streamed {writer.bytes_written} bytes chunked")
            return
        
        sent = 0
        for block in read_blocks(body.source, block_size):
            sink.write(block)
            sent += len(block)
        if sent != length:
            raise StreamError(
                f"body stream delivered {sent} bytes but Content-Length is {length}"
            )
        logger.debug(f"Streamed {sent} bytes")
    
    def write_form(self, body: FormBody, sink, write_header: Callable[[], None]) -> None:
        """
        Send form fields.
        
        Anything but ``multipart/form-data`` is URL-encoded and sent as a
        buffer body.
        """
        if body.consumed:
            raise StreamError("request form data streams were already consumed")
        
        content_type = self._headers.content_type
        if not content_type or not _MULTIPART_RE.match(content_type):
            self._headers.content_type = FORM_URLENCODED
            body.consumed = body.has_streams
            data = urlencode_fields(body.fields, body.charset, self._defaults.copy_block_size)
            self.write_buffer(data, sink, write_header)
            return
        
        params = self._headers.type_params
        boundary = body.boundary or params.get("boundary") or generate_boundary()
        params["boundary"] = boundary
        encoder = MultipartEncoder(
            body.fields,
            boundary,
            charset=body.charset,
            copy_block_size=self._defaults.copy_block_size,
        )
        self._headers.set_content_type(content_type, **params)
        
        if self._headers.chunked:
            self._headers.delete("Content-Length")
            write_header()
            body.consumed = encoder.has_streams
            encoder.encode(ChunkedPartOutput(sink))
            return
        
        with SpooledPartOutput(self._defaults.spool_max_size) as output:
            body.consumed = encoder.has_streams
            encoder.encode(output)
            self._headers.content_length = output.size
            write_header()
            copied = output.copy_to(sink, self._defaults.copy_block_size)
        logger.debug(f"Sent {copied} byte multipart body from spool")
