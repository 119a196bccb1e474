"""
In-memory sinks and sources for testing.

This module provides sink and body source implementations that record
every operation, so tests can verify framing without actual I/O.
"""

from typing import List, Optional


class MemorySink:
    """
    Mock sink that records every write.
    
    Can be told to fail after a number of successful writes to simulate
    a broken connection.
    """
    
    def __init__(self, fail_after: Optional[int] = None):
        """
        Initialize the mock sink.
        
        Args:
            fail_after: Number of writes accepted before raising OSError.
        """
        self._writes: List[bytes] = []
        self._fail_after = fail_after
        self._closed = False
    
    def write(self, data: bytes) -> int:
        """
        Record data written to the sink.
        
        Raises:
            RuntimeError: If the sink is closed.
            OSError: If the configured write budget is exhausted.
        """
        if self._closed:
            raise RuntimeError("Sink is closed")
        
        if self._fail_after is not None and len(self._writes) >= self._fail_after:
            raise OSError(32, "Broken pipe")
        
        self._writes.append(bytes(data))
        return len(data)
    
    def close(self) -> None:
        """Close the mock sink."""
        self._closed = True
    
    @property
    def is_closed(self) -> bool:
        """Check if the mock sink is closed."""
        return self._closed
    
    @property
    def writes(self) -> List[bytes]:
        """Get each write in the order it happened."""
        return list(self._writes)
    
    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the sink."""
        return b"".join(self._writes)


class MockBodySource:
    """
    Mock readable body source.
    
    Serves data in reads no larger than requested and remembers the
    size of each request. Optionally exposes a path identity.
    """
    
    def __init__(
        self,
        data: bytes = b"",
        name: Optional[str] = None,
        fail_after: Optional[int] = None,
    ):
        """
        Initialize the mock source.
        
        Args:
            data: Bytes served by read().
            name: Path-like identity exposed as ``name``.
            fail_after: Number of reads served before raising OSError.
        """
        self._data = data
        self._position = 0
        self._fail_after = fail_after
        self.read_sizes: List[int] = []
        if name is not None:
            self.name = name
    
    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes; b"" at end of stream."""
        if self._fail_after is not None and len(self.read_sizes) >= self._fail_after:
            raise OSError(5, "Input/output error")
        
        self.read_sizes.append(size)
        if size is None or size < 0:
            end = len(self._data)
        else:
            end = min(self._position + size, len(self._data))
        result = self._data[self._position:end]
        self._position = end
        return result
    
    @property
    def exhausted(self) -> bool:
        """Check if every byte has been read."""
        return self._position >= len(self._data)
