"""
Custom exceptions for http_writer.

This module defines the exception hierarchy used throughout
the library for error handling and debugging.
"""

from typing import Optional


class HTTPWriterError(Exception):
    """Base exception for all http_writer errors."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationError(HTTPWriterError):
    """Raised when a request cannot be framed as configured.
    
    Always raised before any byte reaches the sink.
    """
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Configuration error: {message}", cause)


class EncodingError(HTTPWriterError):
    """Raised when a form field cannot be transcoded."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Encoding error: {message}", cause)


class ProtocolError(HTTPWriterError):
    """Raised when there's an error with HTTP wire framing."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class StreamError(HTTPWriterError):
    """Raised when there's an error with a request body source."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Stream error: {message}", cause)
