"""
Sink interface for http_writer.

A sink is the byte-accepting destination a request is written to. It is
borrowed for the duration of one ``execute`` call and never closed by
the library.
"""

import socket
from typing import Any

from typing_extensions import Protocol, runtime_checkable


@runtime_checkable
class Sink(Protocol):
    """Destination that accepts sequential writes of bytes."""
    
    def write(self, data: bytes) -> Any:
        ...


class SocketSink:
    """
    Sink adapter for blocking sockets.
    
    Every write is delivered completely with ``sendall``.
    """
    
    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self.bytes_sent = 0
    
    def write(self, data: bytes) -> int:
        """
        Write data to the socket.
        
        Raises:
            OSError: If a network error occurs.
        """
        self._sock.sendall(data)
        self.bytes_sent += len(data)
        return len(data)
    
    @property
    def socket(self) -> socket.socket:
        """The wrapped socket."""
        return self._sock


def as_sink(target: Any) -> Sink:
    """
    Adapt a target into a Sink.
    
    Args:
        target: An object with ``write`` or a socket-like object with ``sendall``
        
    Returns:
        A Sink writing to target
        
    Raises:
        TypeError: If target cannot accept bytes
    """
    if isinstance(target, Sink):
        return target
    if callable(getattr(target, "sendall", None)):
        return SocketSink(target)
    raise TypeError(f"cannot write a request to {type(target).__name__}")
