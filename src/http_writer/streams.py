"""
Body source helpers for http_writer.

A body source is any object with a bounded ``read(max_bytes)`` that
returns ``b""`` at end of stream: open files, ``io.BytesIO``, socket
files, or custom readers. Sources are single-pass.
"""

import io
import os
import stat
from typing import Iterator, Optional

from typing_extensions import Protocol, runtime_checkable

from .exceptions import StreamError


@runtime_checkable
class BodySource(Protocol):
    """Readable byte source used for stream bodies and file parts."""
    
    def read(self, size: int = -1) -> bytes:
        ...


def is_readable(value: object) -> bool:
    """Check whether a value can be used as a body source."""
    return not isinstance(value, (bytes, bytearray, str)) and isinstance(value, BodySource)


def read_blocks(source: BodySource, block_size: int) -> Iterator[bytes]:
    """
    Iterate over a source in blocks of at most ``block_size`` bytes.
    
    Args:
        source: Readable byte source
        block_size: Maximum bytes requested per read
        
    Yields:
        Non-empty blocks until the source reports end of stream
        
    Raises:
        StreamError: If the source returns something other than bytes
    """
    while True:
        block = source.read(block_size)
        if not block:
            return
        if isinstance(block, str):
            raise StreamError("body source returned str; open it in binary mode")
        yield bytes(block)


def read_all(source: BodySource, block_size: int) -> bytes:
    """Read a source to exhaustion and return its bytes."""
    return b"".join(read_blocks(source, block_size))


def copy_exact(source: BodySource, sink, size: int, block_size: int) -> None:
    """
    Copy exactly ``size`` bytes from a source to a sink.
    
    Raises:
        StreamError: If the source ends early or holds more data
    """
    remaining = size
    while remaining > 0:
        block = source.read(min(block_size, remaining))
        if not block:
            raise StreamError(
                f"body source ended {remaining} bytes short of its size ({size})"
            )
        if isinstance(block, str):
            raise StreamError("body source returned str; open it in binary mode")
        sink.write(block)
        remaining -= len(block)
    if source.read(1):
        raise StreamError(f"body source holds more than its size ({size})")


def source_path(source: object) -> Optional[str]:
    """Return the path identity of a source, if it exposes one."""
    name = getattr(source, "name", None)
    if isinstance(name, os.PathLike):
        name = os.fspath(name)
    if isinstance(name, bytes):
        name = os.fsdecode(name)
    if isinstance(name, str) and name:
        return name
    return None


def source_size(source: object) -> Optional[int]:
    """
    Return the number of bytes left in a source, when it can be known.
    
    In-memory buffers report their unread length. Regular files report
    their size minus the current position. Anything else returns None.
    """
    if isinstance(source, io.BytesIO):
        return max(len(source.getbuffer()) - source.tell(), 0)
    fileno = getattr(source, "fileno", None)
    tell = getattr(source, "tell", None)
    if fileno is None or tell is None:
        return None
    try:
        status = os.fstat(fileno())
        position = tell()
    except (OSError, ValueError, io.UnsupportedOperation):
        return None
    if not stat.S_ISREG(status.st_mode):
        return None
    return max(status.st_size - position, 0)
