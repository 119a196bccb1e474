"""
multipart/form-data encoding for http_writer.

The encoder formats parts once and hands the bytes to an output
strategy. ``ChunkedPartOutput`` frames them straight onto the sink as
they are produced; ``SpooledPartOutput`` collects the whole body in a
temporary file so its length can be announced up front.
"""

import logging
import os
import secrets
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .chunked import CRLF, ChunkedWriter, chunk_header
from .config import COPY_BLOCK_SIZE, SPOOL_MAX_SIZE
from .exceptions import ConfigurationError, EncodingError
from .streams import BodySource, copy_exact, is_readable, read_blocks, source_path, source_size

logger = logging.getLogger(__name__)


DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"

# 40 random bytes, base64url-encoded without padding
BOUNDARY_ENTROPY = 40

FieldValue = Union[bytes, bytearray, str, BodySource]
FieldInput = Union[
    "FormField",
    Tuple[str, Any],
    Tuple[str, Any, Mapping[str, Any]],
]


def generate_boundary() -> str:
    """Return a fresh high-entropy, URL-safe boundary token."""
    return secrets.token_urlsafe(BOUNDARY_ENTROPY)


@dataclass(frozen=True)
class FormField:
    """
    A single form field.
    
    ``value`` is bytes, text, or a readable byte source. A field has file
    semantics when it carries a filename, when its value exposes a path
    through ``name``, or when ``is_file`` is set.
    """
    
    name: str
    value: Any
    filename: Optional[str] = None
    content_type: Optional[str] = None
    is_file: bool = False
    
    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise ConfigurationError(f"form field name must be str, got {type(self.name).__name__}")
        if self.value is None:
            raise ConfigurationError(f"form field {self.name!r} has no value")
    
    @classmethod
    def coerce(cls, entry: FieldInput) -> "FormField":
        """
        Build a FormField from the accepted entry shapes.
        
        Args:
            entry: A FormField, ``(name, value)`` or ``(name, value, options)``
                   where options may hold ``filename``, ``content_type``
                   and ``is_file``
        
        Returns:
            FormField instance
        """
        if isinstance(entry, FormField):
            return entry
        if not isinstance(entry, tuple) or len(entry) not in (2, 3):
            raise ConfigurationError(f"cannot use {entry!r} as a form field")
        name, value = entry[0], entry[1]
        options = dict(entry[2]) if len(entry) == 3 and entry[2] else {}
        unknown = set(options) - {"filename", "content_type", "is_file"}
        if unknown:
            raise ConfigurationError(f"unknown form field options: {sorted(unknown)}")
        return cls(name=name, value=value, **options)
    
    @property
    def is_stream(self) -> bool:
        return is_readable(self.value)
    
    def resolve_filename(self) -> Optional[str]:
        """Return the filename to announce, or None for a plain field."""
        if self.filename is not None:
            return self.filename
        if self.is_stream:
            path = source_path(self.value)
            if path is not None:
                return os.path.basename(path)
        if self.is_file:
            return self.name
        return None


def normalize_fields(
    fields: Union[Mapping[str, Any], Iterable[FieldInput]],
) -> List[FormField]:
    """Turn a mapping or a sequence of entries into a list of FormFields."""
    if isinstance(fields, Mapping):
        return [FormField(name=name, value=value) for name, value in fields.items()]
    return [FormField.coerce(entry) for entry in fields]


def encode_text(value: str, charset: Optional[str]) -> bytes:
    """
    Encode text for a multipart body.
    
    With a charset, characters it cannot represent become numeric
    character references (``&#<codepoint>;``). Without one, UTF-8 is used.
    
    Raises:
        EncodingError: If the charset is unknown or the text cannot be encoded
    """
    try:
        if charset:
            return value.encode(charset, errors="xmlcharrefreplace")
        return value.encode("utf-8")
    except LookupError as e:
        raise EncodingError(f"unknown charset {charset!r}", cause=e) from e
    except UnicodeError as e:
        raise EncodingError(f"cannot encode {value!r}: {e.reason}", cause=e) from e


def quote_string(value: str, charset: Optional[str] = None) -> bytes:
    """
    Quote a name or filename for a Content-Disposition parameter.
    
    Backslashes and double quotes are backslash-escaped, line breaks are
    percent-encoded so they cannot end the header line.
    """
    value = value.replace("\\", "\\\\").replace('"', '\\"')
    value = value.replace("\r", "%0D").replace("\n", "%0A")
    return encode_text(value, charset)


def _header_value(value: str) -> bytes:
    if "\r" in value or "\n" in value:
        raise ConfigurationError(f"part header value contains a line break: {value!r}")
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError as e:
        raise EncodingError(f"part header value is not latin-1: {value!r}", cause=e) from e


class PartOutput(ABC):
    """Destination for encoded multipart bytes."""
    
    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write formatted bytes."""
    
    @abstractmethod
    def write_source(self, source: BodySource, block_size: int) -> None:
        """Copy a readable part value incrementally."""
    
    @abstractmethod
    def finish(self) -> None:
        """Called once after the closing delimiter was written."""


class ChunkedPartOutput(PartOutput):
    """
    Writes parts straight to the sink as chunks.
    
    Values with a known size are sent as one chunk of exactly that size;
    other sources produce one chunk per block read.
    """
    
    def __init__(self, sink) -> None:
        self._sink = sink
        self._writer = ChunkedWriter(sink)
    
    def write(self, data: bytes) -> None:
        self._writer.write(data)
    
    def write_source(self, source: BodySource, block_size: int) -> None:
        size = source_size(source)
        if size is None:
            for block in read_blocks(source, block_size):
                self._writer.write(block)
            return
        if size == 0:
            return
        self._sink.write(chunk_header(size))
        copy_exact(source, self._sink, size, block_size)
        self._sink.write(CRLF)
    
    def finish(self) -> None:
        self._writer.close()


class SpooledPartOutput(PartOutput):
    """
    Collects parts in a temporary file that spills to disk.
    
    Use as a context manager so the spool is always released.
    """
    
    def __init__(self, max_size: int = SPOOL_MAX_SIZE) -> None:
        self._spool = tempfile.SpooledTemporaryFile(max_size=max_size, mode="w+b")
    
    def write(self, data: bytes) -> None:
        self._spool.write(data)
    
    def write_source(self, source: BodySource, block_size: int) -> None:
        for block in read_blocks(source, block_size):
            self._spool.write(block)
    
    def finish(self) -> None:
        self._spool.flush()
    
    @property
    def size(self) -> int:
        """Number of bytes collected so far."""
        return self._spool.tell()
    
    def copy_to(self, sink, block_size: int = COPY_BLOCK_SIZE) -> int:
        """
        Copy the collected body to a sink.
        
        Returns:
            Number of bytes copied
        """
        total = self.size
        self._spool.seek(0)
        for block in read_blocks(self._spool, block_size):
            sink.write(block)
        return total
    
    def read(self) -> bytes:
        """Return the collected body as bytes."""
        position = self.size
        self._spool.seek(0)
        data = self._spool.read()
        self._spool.seek(position)
        return data
    
    def close(self) -> None:
        self._spool.close()
    
    def __enter__(self) -> "SpooledPartOutput":
        return self
    
    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class MultipartEncoder:
    """
    Encodes form fields as a multipart/form-data body.
    
    Part headers are formatted when the encoder is created, so bad names,
    filenames or content types fail before anything is written.
    """
    
    def __init__(
        self,
        fields: Union[Mapping[str, Any], Iterable[FieldInput]],
        boundary: str,
        charset: Optional[str] = None,
        copy_block_size: int = COPY_BLOCK_SIZE,
    ) -> None:
        """
        Initialize the encoder.
        
        Args:
            fields: Form fields in output order
            boundary: Delimiter token, without the leading dashes
            charset: Optional charset for names, filenames and text values
            copy_block_size: Bytes read per call from readable values
        """
        if not boundary:
            raise ConfigurationError("multipart boundary is empty")
        try:
            self._boundary = boundary.encode("ascii")
        except UnicodeEncodeError as e:
            raise ConfigurationError(f"multipart boundary is not ASCII: {boundary!r}", cause=e) from e
        if any(ch in boundary for ch in "\r\n\"; "):
            raise ConfigurationError(f"invalid multipart boundary {boundary!r}")
        
        self._fields = normalize_fields(fields)
        self._charset = charset
        self._copy_block_size = copy_block_size
        self._part_headers = [self._format_part_header(field) for field in self._fields]
    
    @property
    def boundary(self) -> str:
        return self._boundary.decode("ascii")
    
    @property
    def fields(self) -> List[FormField]:
        return list(self._fields)
    
    @property
    def has_streams(self) -> bool:
        """True when any field value is a single-pass source."""
        return any(field.is_stream for field in self._fields)
    
    def _format_part_header(self, field: FormField) -> bytes:
        name = quote_string(field.name, self._charset)
        filename = field.resolve_filename()
        if filename is None:
            # Non-file fields must not have a Content-Type header
            return b'Content-Disposition: form-data; name="%s"\r\n\r\n' % name
        content_type = _header_value(field.content_type or DEFAULT_FILE_CONTENT_TYPE)
        return (
            b'Content-Disposition: form-data; name="%s"; filename="%s"\r\n'
            b"Content-Type: %s\r\n\r\n"
        ) % (name, quote_string(filename, self._charset), content_type)
    
    def _payload(self, value: Any) -> bytes:
        if isinstance(value, str):
            return encode_text(value, self._charset)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        return encode_text(str(value), self._charset)
    
    def encode(self, output: PartOutput) -> None:
        """
        Write the complete multipart body to an output.
        
        Formatted bytes are buffered and flushed only before a readable
        value is copied and after the closing delimiter.
        """
        buffer = bytearray()
        for field, part_header in zip(self._fields, self._part_headers):
            buffer += b"--" + self._boundary + CRLF
            buffer += part_header
            if field.is_stream:
                self._flush(output, buffer)
                output.write_source(field.value, self._copy_block_size)
            else:
                buffer += self._payload(field.value)
            buffer += CRLF
        buffer += b"--" + self._boundary + b"--" + CRLF
        self._flush(output, buffer)
        output.finish()
        logger.debug(f"Encoded {len(self._fields)} multipart fields")
    
    def _flush(self, output: PartOutput, buffer: bytearray) -> None:
        if buffer:
            output.write(bytes(buffer))
            del buffer[:]
    
    def to_bytes(self, spool_max_size: int = SPOOL_MAX_SIZE) -> bytes:
        """Encode the body without chunk framing and return it."""
        with SpooledPartOutput(spool_max_size) as output:
            self.encode(output)
            return output.read()
