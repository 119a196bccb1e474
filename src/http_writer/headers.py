"""
Header collection for http_writer.

Headers are stored case-insensitively and keep their insertion order
for serialization. Names are emitted in canonical capitalization
(``content-type`` becomes ``Content-Type``) and repeated fields are
joined with ``", "`` on output.
"""

import base64
import re
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .exceptions import ConfigurationError


HeaderInput = Union[Mapping[str, str], Iterable[Tuple[str, str]], None]

_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_CHUNKED_RE = re.compile(r"(?:\A|[^\-\w])chunked(?![\-\w])", re.IGNORECASE)
_CONTENT_LENGTH_RE = re.compile(r"\d+")


def capitalize(name: str) -> str:
    """Return the canonical capitalization of a header name."""
    return "-".join(part.capitalize() for part in name.split("-"))


class Headers:
    """
    Case-insensitive, order-preserving HTTP header collection.
    
    Each key maps to a list of values. ``set`` replaces every value of a
    field while ``add`` appends one more.
    """
    
    def __init__(self, initial: HeaderInput = None) -> None:
        self._fields: Dict[str, List[str]] = {}
        if initial is None:
            return
        if isinstance(initial, (Headers, Mapping)):
            items = initial.items()
        else:
            items = initial
        for name, value in items:
            self.add(name, value)
    
    @staticmethod
    def _key(name: str) -> str:
        if not isinstance(name, str) or not _TOKEN_RE.fullmatch(name):
            raise ConfigurationError(f"invalid header name {name!r}")
        return name.lower()
    
    @staticmethod
    def _value(value: Union[str, int]) -> str:
        value = str(value).strip()
        if "\r" in value or "\n" in value:
            raise ConfigurationError(f"header value contains a line break: {value!r}")
        return value
    
    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a header value by name (case-insensitive).
        
        Args:
            name: Header name
            default: Returned when the header is absent
            
        Returns:
            All values of the field joined with ", ", or default
        """
        values = self._fields.get(name.lower())
        if not values:
            return default
        return ", ".join(values)
    
    def set(self, name: str, value: Optional[Union[str, int]]) -> None:
        """Replace a header. A value of None deletes it."""
        if value is None:
            self.delete(name)
            return
        self._fields[self._key(name)] = [self._value(value)]
    
    def add(self, name: str, value: Union[str, int]) -> None:
        """Append a value to a header, keeping existing values."""
        self._fields.setdefault(self._key(name), []).append(self._value(value))
    
    def delete(self, name: str) -> Optional[List[str]]:
        """Remove a header and return its previous values, if any."""
        return self._fields.pop(name.lower(), None)
    
    def __getitem__(self, name: str) -> Optional[str]:
        return self.get(name)
    
    def __setitem__(self, name: str, value: Optional[Union[str, int]]) -> None:
        self.set(name, value)
    
    def __delitem__(self, name: str) -> None:
        self.delete(name)
    
    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._fields
    
    def __len__(self) -> int:
        return len(self._fields)
    
    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)
    
    def items(self) -> Iterator[Tuple[str, str]]:
        """Yield (canonical-name, value) pairs in insertion order."""
        for key, values in self._fields.items():
            yield capitalize(key), ", ".join(values)
    
    def __repr__(self) -> str:
        return f"Headers({list(self.items())!r})"
    
    # Content-Type
    
    @property
    def content_type(self) -> Optional[str]:
        """The media type without parameters, e.g. ``multipart/form-data``."""
        value = self.get("Content-Type")
        if value is None:
            return None
        media_type = value.split(";", 1)[0].strip()
        return media_type or None
    
    @content_type.setter
    def content_type(self, value: Optional[str]) -> None:
        self.set("Content-Type", value)
    
    @property
    def type_params(self) -> Dict[str, str]:
        """Parameters of the Content-Type header, keys lower-cased."""
        value = self.get("Content-Type")
        params: Dict[str, str] = {}
        if value is None:
            return params
        for param in value.split(";")[1:]:
            key, sep, val = param.partition("=")
            if not sep:
                continue
            val = val.strip()
            if len(val) >= 2 and val[0] == val[-1] == '"':
                val = val[1:-1]
            params[key.strip().lower()] = val
        return params
    
    def set_content_type(self, media_type: str, **params: str) -> None:
        """
        Set the Content-Type header with optional parameters.
        
        Args:
            media_type: Media type such as ``multipart/form-data``
            **params: Parameters appended as ``; key=value``
        """
        value = media_type + "".join(f"; {key}={val}" for key, val in params.items())
        self.set("Content-Type", value)
    
    # Framing
    
    @property
    def content_length(self) -> Optional[int]:
        """The declared Content-Length, or None when absent."""
        value = self.get("Content-Length")
        if value is None:
            return None
        match = _CONTENT_LENGTH_RE.search(value)
        if match is None:
            raise ConfigurationError(f"wrong Content-Length format: {value!r}")
        return int(match.group(0))
    
    @content_length.setter
    def content_length(self, length: Optional[int]) -> None:
        if length is None:
            self.delete("Content-Length")
            return
        if length < 0:
            raise ConfigurationError("Content-Length must be non-negative")
        self.set("Content-Length", int(length))
    
    @property
    def chunked(self) -> bool:
        """True when Transfer-Encoding selects chunked framing."""
        value = self.get("Transfer-Encoding")
        return bool(value and _CHUNKED_RE.search(value))
    
    # Credentials
    
    def basic_auth(self, user: str, password: str) -> None:
        """Set an ``Authorization: Basic`` header."""
        self.set("Authorization", _basic_credentials(user, password))
    
    def proxy_basic_auth(self, user: str, password: str) -> None:
        """Set a ``Proxy-Authorization: Basic`` header."""
        self.set("Proxy-Authorization", _basic_credentials(user, password))


def _basic_credentials(user: str, password: str) -> str:
    token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"
