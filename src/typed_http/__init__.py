"""
typed_http - a small async HTTP client with typed JSON helpers.

Key features:
- Typed JSON decoding of responses (via pydantic)
- Form-encoded and JSON request bodies
- Structured multi-line request/response logging to an injectable sink
- Optional acceptance of server certificates for one trusted host

Example:
    from typed_http import HTTPClient

    async with HTTPClient(timeout=5) as client:
        user = await client.get("https://api.example.com/user", User)
        created = await client.post_json("https://api.example.com/items", {"name": "x"}, Item)
"""

from .client import HTTPClient
from .config import ClientSettings
from .encoding import FormValue
from .encoding import url_encoded_data
from .encoding import url_encoded_string
from .exceptions import DecodingFailedError
from .exceptions import HTTPClientError
from .exceptions import HTTPStatusError
from .exceptions import InvalidResponseError
from .executor import execute
from .logger import FileLogSink
from .logger import LogSink
from .logger import MemoryLogSink
from .logger import NetworkLogRecord
from .logger import Severity
from .logger import StdlibLogSink
from .methods import HTTPMethod
from .models import HTTPRequest
from .models import HTTPResponse
from .session import AiohttpTransport
from .session import AuthenticationMethod
from .session import ChallengeDisposition
from .session import SSLTrustPolicy
from .session import Transport
from .session import TrustChallenge
from .session import create_session

__all__ = [
    "AiohttpTransport",
    "AuthenticationMethod",
    "ChallengeDisposition",
    "ClientSettings",
    "DecodingFailedError",
    "FileLogSink",
    "FormValue",
    "HTTPClient",
    "HTTPClientError",
    "HTTPMethod",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPStatusError",
    "InvalidResponseError",
    "LogSink",
    "MemoryLogSink",
    "NetworkLogRecord",
    "SSLTrustPolicy",
    "Severity",
    "StdlibLogSink",
    "Transport",
    "TrustChallenge",
    "create_session",
    "execute",
    "url_encoded_data",
    "url_encoded_string",
]
