"""
Request serialization for http_writer.

This module implements the RequestWriter that puts a Request on the
wire: status line, headers, blank line, then the body as framed by
the body strategy.
"""

import logging
import re
import time
from typing import Any, Dict, Optional

from .body import BodyStrategy
from .exceptions import ConfigurationError
from .network.stream import Sink, as_sink
from .request import Request, validate_path

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"\d+(\.\d+)?")


class _CountingSink:
    """Counts the bytes handed to the wrapped sink."""
    
    def __init__(self, sink: Sink) -> None:
        self._sink = sink
        self.bytes_written = 0
    
    def write(self, data: bytes) -> int:
        self._sink.write(data)
        self.bytes_written += len(data)
        return len(data)


class RequestWriter:
    """
    Writes a single request onto a sink.
    
    The writer is synchronous and blocking. Sink and source errors
    propagate unchanged; bytes already written are not rolled back.
    """
    
    # Default configuration
    DEFAULT_HTTP_VERSION = "1.1"
    
    def __init__(self, request: Request) -> None:
        self._request = request
        self._bytes_sent = 0
        self._header_bytes = 0
        self._duration = 0.0
    
    def format_header(self, http_version: str, path: str) -> bytes:
        """
        Build the status line and header block.
        
        Raises:
            ConfigurationError: If a header cannot be sent as latin-1
        """
        lines = [f"{self._request.method} {path} HTTP/{http_version}\r\n"]
        for key, value in self._request.headers.items():
            lines.append(f"{key}: {value}\r\n")
        lines.append("\r\n")
        try:
            return "".join(lines).encode("latin-1")
        except UnicodeEncodeError as e:
            raise ConfigurationError(f"request header is not latin-1: {e.object[e.start:e.end]!r}", cause=e) from e
    
    def execute(
        self,
        sink: Any,
        http_version: Optional[str] = None,
        path: Optional[str] = None,
    ) -> int:
        """
        Write the full request.
        
        Args:
            sink: Writable object or socket
            http_version: Version for the request line
            path: Request target; defaults to the request's path
        
        Returns:
            Number of bytes written
        
        Raises:
            ConfigurationError: Before any write, if the request cannot be framed
            EncodingError: If a form field cannot be transcoded
            StreamError: If a body source is reused or contradicts its framing
            OSError: If the sink or a body source fails
        """
        http_version = http_version or self.DEFAULT_HTTP_VERSION
        if not _VERSION_RE.fullmatch(http_version):
            raise ConfigurationError(f"invalid HTTP version {http_version!r}")
        path = validate_path(self._request.path if path is None else path)
        
        counting = _CountingSink(as_sink(sink))
        strategy = BodyStrategy(self._request.headers, self._request.defaults)
        
        def write_header() -> None:
            header = self.format_header(http_version, path)
            counting.write(header)
            self._header_bytes = len(header)
        
        start_time = time.time()
        logger.debug(
            f"Writing {self._request.method} {path} HTTP/{http_version} "
            f"({self._request.body_kind} body)"
        )
        try:
            strategy.write(self._request.payload, counting, write_header)
        finally:
            self._bytes_sent = counting.bytes_written
            self._duration = time.time() - start_time
        
        logger.debug(
            f"Wrote {self._bytes_sent} bytes for {self._request.method} {path} "
            f"({self._duration:.3f}s)"
        )
        return self._bytes_sent
    
    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get writer metrics.
        
        Returns:
            Dictionary with byte counts and duration of the last execute
        """
        return {
            "bytes_sent": self._bytes_sent,
            "header_bytes": self._header_bytes,
            "body_bytes": max(self._bytes_sent - self._header_bytes, 0),
            "duration": self._duration,
        }
