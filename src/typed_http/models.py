"""
Request and response types exchanged with a transport.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace

from multidict import CIMultiDict
from multidict import CIMultiDictProxy

from .methods import HTTPMethod


def _freeze_headers(headers: Mapping[str, str] | None) -> CIMultiDictProxy[str]:
    return CIMultiDictProxy(CIMultiDict(headers or {}))


@dataclass(frozen=True)
class HTTPRequest:
    """
    An outgoing HTTP request.

    Header names are case-insensitive. Use `build()` to create one from
    plain mappings and `with_header()` to derive a copy with one more header.
    """

    method: HTTPMethod
    url: str
    headers: CIMultiDictProxy[str] = field(default_factory=lambda: _freeze_headers(None))
    body: bytes | None = None

    @classmethod
    def build(
        cls,
        method: HTTPMethod,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> "HTTPRequest":
        """Create a request, copying `headers` into a case-insensitive view."""
        return cls(method=method, url=url, headers=_freeze_headers(headers), body=body)

    def with_header(self, name: str, value: str) -> "HTTPRequest":
        """Return a copy with `name` set to `value`, replacing any existing value."""
        headers = CIMultiDict(self.headers)
        headers[name] = value
        return replace(self, headers=CIMultiDictProxy(headers))

    def with_headers(self, headers: Mapping[str, str] | None) -> "HTTPRequest":
        """Return a copy with every entry of `headers` set."""
        request = self
        for name, value in (headers or {}).items():
            request = request.with_header(name, value)
        return request


@dataclass(frozen=True)
class HTTPResponse:
    """An HTTP response as produced by a transport."""

    status: int
    headers: CIMultiDictProxy[str] = field(default_factory=lambda: _freeze_headers(None))
    url: str = ""

    @classmethod
    def build(cls, status: int, headers: Mapping[str, str] | None = None, url: str = "") -> "HTTPResponse":
        """Create a response, copying `headers` into a case-insensitive view."""
        return cls(status=status, headers=_freeze_headers(headers), url=url)

    @property
    def ok(self) -> bool:
        """True if the status is in 200-299."""
        return 200 <= self.status <= 299
