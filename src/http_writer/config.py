"""
Request defaults for http_writer.

The values a request falls back to when the caller does not set them.
They are grouped in one immutable object that is handed to each Request,
so tests and applications can swap them without touching module state.
"""

import platform
from dataclasses import dataclass, field


DEFAULT_ACCEPT = "*/*"
DEFAULT_ACCEPT_ENCODING = "gzip;q=1.0,deflate;q=0.6,identity;q=0.3"

# Block sizes used when copying body sources
STREAM_BLOCK_SIZE = 1024
COPY_BLOCK_SIZE = 4096

# Multipart bodies above this size spill from memory to a temporary file
SPOOL_MAX_SIZE = 64 * 1024


def default_user_agent() -> str:
    """Build the User-Agent string sent when the caller sets none."""
    from . import __version__
    
    return (
        f"Python/{platform.python_version()} "
        f"({platform.python_implementation()}) http_writer/{__version__}"
    )


@dataclass(frozen=True)
class RequestDefaults:
    """
    Immutable set of defaults injected into a Request.
    
    Use ``dataclasses.replace`` to derive a variant, e.g. a fixed
    user agent for deterministic tests.
    """
    
    accept: str = DEFAULT_ACCEPT
    accept_encoding: str = DEFAULT_ACCEPT_ENCODING
    user_agent: str = field(default_factory=default_user_agent)
    stream_block_size: int = STREAM_BLOCK_SIZE
    copy_block_size: int = COPY_BLOCK_SIZE
    spool_max_size: int = SPOOL_MAX_SIZE
    
    def __post_init__(self) -> None:
        """Validate block sizes after initialization."""
        if self.stream_block_size <= 0:
            raise ValueError("stream_block_size must be positive")
        if self.copy_block_size <= 0:
            raise ValueError("copy_block_size must be positive")
        if self.spool_max_size < 0:
            raise ValueError("spool_max_size must be non-negative")
    
    def default_headers(self):
        """Return the (name, value) pairs applied to new requests."""
        return [
            ("Accept-Encoding", self.accept_encoding),
            ("Accept", self.accept),
            ("User-Agent", self.user_agent),
        ]
