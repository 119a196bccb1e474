"""
HTTP request value for http_writer.

A Request holds the method, path, headers and one body variant. It is
built once, may be adjusted before sending, and is transmitted once
with ``execute``.
"""

import re
import warnings
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import urlencode

from .body import (
    FORM_URLENCODED,
    MULTIPART_FORM_DATA,
    Body,
    BufferBody,
    EmptyBody,
    FormBody,
    StreamBody,
    make_body,
)
from .config import RequestDefaults
from .exceptions import ConfigurationError
from .headers import HeaderInput, Headers
from .multipart import FieldInput, normalize_fields
from .streams import BodySource, is_readable


# (request_body_permitted, response_body_permitted)
METHODS: Dict[str, Tuple[bool, bool]] = {
    "GET": (False, True),
    "HEAD": (False, False),
    "POST": (True, True),
    "PUT": (True, True),
    "PATCH": (True, True),
    "DELETE": (False, True),
    "OPTIONS": (False, True),
    "TRACE": (False, True),
    "PROPFIND": (True, True),
    "PROPPATCH": (True, True),
    "MKCOL": (True, True),
    "COPY": (False, True),
    "MOVE": (False, True),
    "LOCK": (True, True),
    "UNLOCK": (True, True),
}

_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

FormInput = Union[Mapping[str, Any], Iterable[FieldInput]]


def validate_path(path: Optional[str]) -> str:
    """
    Check a request target.
    
    Raises:
        ConfigurationError: If the path is missing, empty or contains whitespace
    """
    if path is None:
        raise ConfigurationError("no HTTP request path given")
    if not isinstance(path, str):
        raise ConfigurationError(f"HTTP request path must be str, got {type(path).__name__}")
    if not path:
        raise ConfigurationError("HTTP request path is empty")
    if any(ch in path for ch in " \t\r\n"):
        raise ConfigurationError(f"HTTP request path contains whitespace: {path!r}")
    return path


class Request:
    """
    Outbound HTTP request.
    
    The body is a single variant: assigning ``body``, ``body_stream`` or
    form data replaces whatever was set before.
    """
    
    def __init__(
        self,
        method: str,
        path: str,
        headers: HeaderInput = None,
        body: Any = None,
        defaults: Optional[RequestDefaults] = None,
        request_body_permitted: Optional[bool] = None,
        response_body_permitted: Optional[bool] = None,
    ) -> None:
        """
        Initialize a request.
        
        Args:
            method: HTTP method token
            path: Request target, non-empty
            headers: Initial headers as a mapping or (name, value) pairs
            body: Optional body (bytes, str or readable source)
            defaults: Defaults for Accept, User-Agent and block sizes
            request_body_permitted: Override for the method table
            response_body_permitted: Override for the method table
        
        Raises:
            ConfigurationError: If the method or path is invalid
        """
        if not isinstance(method, str) or not _METHOD_RE.fullmatch(method):
            raise ConfigurationError(f"invalid HTTP method {method!r}")
        self._method = method
        self._path = validate_path(path)
        self._defaults = defaults or RequestDefaults()
        
        permitted = METHODS.get(method.upper(), (True, True))
        self._request_has_body = (
            permitted[0] if request_body_permitted is None else request_body_permitted
        )
        self._response_has_body = (
            permitted[1] if response_body_permitted is None else response_body_permitted
        )
        
        self._headers = Headers(headers)
        for name, value in self._defaults.default_headers():
            if value and name not in self._headers:
                self._headers[name] = value
        
        self._body: Body = EmptyBody()
        self.attach_body(body)
    
    @classmethod
    def create(
        cls,
        method: Union[str, bytes],
        path: Union[str, bytes],
        headers: HeaderInput = None,
        body: Any = None,
        defaults: Optional[RequestDefaults] = None,
    ) -> "Request":
        """
        Create a Request with proper type conversion.
        
        Args:
            method: HTTP method (GET, POST, etc.)
            path: Request target
            headers: Optional headers
            body: Optional body
            defaults: Optional request defaults
        
        Returns:
            New Request instance
        """
        if isinstance(method, bytes):
            method = method.decode("ascii")
        if isinstance(path, bytes):
            path = path.decode("ascii")
        return cls(method.upper(), path, headers=headers, body=body, defaults=defaults)
    
    def __repr__(self) -> str:
        return f"<Request {self._method} {self._path}>"
    
    @property
    def method(self) -> str:
        return self._method
    
    @property
    def path(self) -> str:
        return self._path
    
    @property
    def headers(self) -> Headers:
        return self._headers
    
    @property
    def defaults(self) -> RequestDefaults:
        return self._defaults
    
    @property
    def request_body_permitted(self) -> bool:
        return self._request_has_body
    
    @property
    def response_body_permitted(self) -> bool:
        return self._response_has_body
    
    @property
    def body_exist(self) -> bool:
        """Deprecated alias of ``response_body_permitted``."""
        warnings.warn(
            "Request.body_exist is obsolete; use response_body_permitted",
            DeprecationWarning,
            stacklevel=2,
        )
        return self._response_has_body
    
    # Header shortcuts
    
    def __getitem__(self, name: str) -> Optional[str]:
        return self._headers.get(name)
    
    def __setitem__(self, name: str, value: Optional[Union[str, int]]) -> None:
        self._headers.set(name, value)
    
    def __delitem__(self, name: str) -> None:
        self._headers.delete(name)
    
    # Body
    
    @property
    def payload(self) -> Body:
        """The active body variant."""
        return self._body
    
    @property
    def body_kind(self) -> str:
        """One of ``none``, ``buffer``, ``stream`` or ``form``."""
        return self._body.kind
    
    @property
    def body(self) -> Optional[bytes]:
        if isinstance(self._body, BufferBody):
            return self._body.data
        return None
    
    @body.setter
    def body(self, value: Any) -> None:
        self._body = make_body(value)
    
    @property
    def body_stream(self) -> Optional[BodySource]:
        if isinstance(self._body, StreamBody):
            return self._body.source
        return None
    
    @body_stream.setter
    def body_stream(self, source: Optional[BodySource]) -> None:
        if source is not None and not is_readable(source):
            raise ConfigurationError(f"body stream must be readable, got {type(source).__name__}")
        self._body = StreamBody(source) if source is not None else EmptyBody()
    
    @property
    def form_data(self):
        """The form fields, or None when the body is not a form."""
        if isinstance(self._body, FormBody):
            return list(self._body.fields)
        return None
    
    def attach_body(self, value: Any) -> None:
        """
        Set the body only when none is present.
        
        Raises:
            ConfigurationError: If the request already carries a body
        """
        if value is None:
            return
        if not isinstance(self._body, EmptyBody):
            raise ConfigurationError("both of body argument and Request.body set")
        self.body = value
    
    def set_form(
        self,
        fields: FormInput,
        enctype: str = FORM_URLENCODED,
        boundary: Optional[str] = None,
        charset: Optional[str] = None,
    ) -> None:
        """
        Use form fields as the body.
        
        Args:
            fields: Mapping or sequence of fields; see ``FormField.coerce``
            enctype: ``application/x-www-form-urlencoded`` or ``multipart/form-data``
            boundary: Multipart boundary; generated when omitted
            charset: Charset for names, filenames and text values
        
        Raises:
            ConfigurationError: If enctype is not a form encoding
        """
        if enctype.lower() not in (FORM_URLENCODED, MULTIPART_FORM_DATA):
            raise ConfigurationError(f"invalid enctype: {enctype}")
        self._body = FormBody(
            fields=normalize_fields(fields),
            boundary=boundary,
            charset=charset,
        )
        self._headers.content_type = enctype
    
    def set_form_data(self, fields: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]], sep: str = "&") -> None:
        """URL-encode fields right away and use them as a buffer body."""
        pairs = fields.items() if isinstance(fields, Mapping) else fields
        query = urlencode(list(pairs))
        if sep != "&":
            query = query.replace("&", sep)
        self.body = query
        self._headers.content_type = FORM_URLENCODED
    
    def execute(self, sink: Any, http_version: str = "1.1", path: Optional[str] = None) -> int:
        """
        Write the request to a sink.
        
        Args:
            sink: Writable object or socket
            http_version: Version for the request line, e.g. ``1.1``
            path: Request target to send; defaults to ``self.path``
        
        Returns:
            Number of bytes written
        """
        from .writer import RequestWriter
        
        return RequestWriter(self).execute(sink, http_version, path)
