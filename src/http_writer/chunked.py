"""
Chunked transfer-encoding for http_writer.

This module frames buffers as HTTP/1.1 chunks and parses a complete
chunked body back into its payload.
"""

import re
from typing import List

from .exceptions import ProtocolError


TERMINATOR = b"0\r\n\r\n"
CRLF = b"\r\n"

_HEX_RE = re.compile(rb"[0-9A-Fa-f]+")


def chunk_header(size: int) -> bytes:
    """Return the ``<hex-size>\\r\\n`` line that opens a chunk."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    return b"%x\r\n" % size


def frame(data: bytes) -> bytes:
    """
    Wrap a buffer as a single chunk.
    
    Args:
        data: Non-empty payload
        
    Returns:
        ``<hex length>\\r\\n<data>\\r\\n``
        
    Raises:
        ValueError: If data is empty; an empty chunk would end the body
    """
    return chunk_header(len(data)) + bytes(data) + CRLF


def decode(data: bytes) -> bytes:
    """
    Decode a complete chunked body.
    
    Chunk extensions are ignored and trailer fields are skipped.
    
    Args:
        data: Chunked body, terminator included
        
    Returns:
        The concatenated chunk payloads
        
    Raises:
        ProtocolError: If the framing is malformed or truncated
    """
    payload: List[bytes] = []
    position = 0
    while True:
        line_end = data.find(CRLF, position)
        if line_end == -1:
            raise ProtocolError("truncated chunk size line")
        size_field = data[position:line_end].split(b";", 1)[0].strip()
        if not _HEX_RE.fullmatch(size_field):
            raise ProtocolError(f"invalid chunk size {size_field!r}")
        size = int(size_field, 16)
        position = line_end + 2
        if size == 0:
            break
        chunk_end = position + size
        if data[chunk_end:chunk_end + 2] != CRLF:
            raise ProtocolError("chunk data is not followed by CRLF")
        payload.append(data[position:chunk_end])
        position = chunk_end + 2
    
    # Skip trailer fields up to the final empty line
    while True:
        line_end = data.find(CRLF, position)
        if line_end == -1:
            raise ProtocolError("missing final CRLF after last chunk")
        if line_end == position:
            break
        position = line_end + 2
    
    return b"".join(payload)


class ChunkedWriter:
    """
    Sink wrapper that frames every write as a chunk.
    
    Empty writes are skipped. ``close`` writes the terminator but leaves
    the wrapped sink open, since the sink is only borrowed.
    """
    
    def __init__(self, sink) -> None:
        self._sink = sink
        self._closed = False
        self.bytes_written = 0
    
    def write(self, data: bytes) -> int:
        if self._closed:
            raise ValueError("write to closed ChunkedWriter")
        if data:
            self._sink.write(frame(data))
            self.bytes_written += len(data)
        return len(data)
    
    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._sink.write(TERMINATOR)
    
    @property
    def closed(self) -> bool:
        return self._closed
