"""
Async HTTP client with typed JSON decoding.
"""

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from aiohttp import hdrs
from pydantic import TypeAdapter
from pydantic import ValidationError

from .config import ClientSettings
from .encoding import FormValue
from .encoding import url_encoded_data
from .exceptions import DecodingFailedError
from .exceptions import HTTPStatusError
from .exceptions import InvalidResponseError
from .executor import execute
from .logger import LogSink
from .methods import HTTPMethod
from .models import HTTPRequest
from .models import HTTPResponse
from .session import Transport
from .session import create_session

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


@lru_cache(maxsize=128)
def _cached_adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def _adapter(response_type: Any) -> TypeAdapter[Any]:
    try:
        return _cached_adapter(response_type)
    except TypeError:
        # Unhashable annotations skip the cache
        return TypeAdapter(response_type)


def _serialize_json(body: Any) -> bytes:
    # Serialization errors propagate unwrapped
    return TypeAdapter(type(body)).dump_json(body)


class HTTPClient:
    """
    Async HTTP client for JSON APIs.

    Example:
        async with HTTPClient(timeout=5) as client:
            user = await client.get("https://api.example.com/user", User)
            ok = await client.check("https://api.example.com/health")
    """

    def __init__(
        self,
        timeout: float = 10.0,
        trusted_ssl_domain: str | None = None,
        *,
        transport: Transport | None = None,
        logger: LogSink | None = None,
        resource_timeout: float = 10.0,
    ):
        """
        Initialize the client.

        Args:
            timeout: Timeout for each request in seconds
            trusted_ssl_domain: Host whose server certificate is accepted
                                without validation
            transport: Pre-built transport. When given, `timeout`,
                       `resource_timeout` and `trusted_ssl_domain` are ignored.
            logger: Sink for request logs. Defaults to the
                    `typed_http.network` stdlib logger.
            resource_timeout: Timeout for a whole request in seconds
        """
        self._owns_transport = transport is None
        if transport is None:
            transport = create_session(
                request_timeout=timeout,
                resource_timeout=resource_timeout,
                trusted_domain=trusted_ssl_domain,
            )
        self._transport = transport
        self._logger = logger

    @classmethod
    def from_settings(cls, settings: ClientSettings, logger: LogSink | None = None) -> "HTTPClient":
        """Create a client from ClientSettings."""
        return cls(
            timeout=settings.timeout,
            trusted_ssl_domain=settings.trusted_ssl_domain,
            logger=logger,
            resource_timeout=settings.resource_timeout,
        )

    @property
    def transport(self) -> Transport:
        return self._transport

    def set_logger(self, logger: LogSink | None) -> None:
        """Set the request log sink."""
        self._logger = logger

    async def send(self, request: HTTPRequest) -> tuple[bytes, HTTPResponse]:
        """
        Send a raw request.

        Returns:
            Unprocessed body and response

        Raises:
            Exception: Transport errors, unchanged
        """
        return await execute(request, self._transport, self._logger)

    async def get(self, url: str, response_type: Any = Any, headers: Mapping[str, str] | None = None) -> Any:
        """
        GET request with a JSON response.

        Args:
            url: The URL to GET
            response_type: Type to decode the JSON body into
            headers: Optional HTTP headers

        Returns:
            The decoded body

        Raises:
            InvalidResponseError: If the transport did not return an HTTP response
            HTTPStatusError: If the status is not 2xx
            DecodingFailedError: If the body does not decode into `response_type`
        """
        request = HTTPRequest.build(HTTPMethod.GET, url).with_headers(headers)
        return await self._send_and_decode(request, response_type)

    async def post(
        self,
        url: str,
        parameters: Mapping[str, FormValue],
        response_type: Any = Any,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        POST request with a form-encoded body and a JSON response.

        Args:
            url: The URL to POST to
            parameters: Form fields
            response_type: Type to decode the JSON body into
            headers: Optional HTTP headers, applied after Content-Type

        Returns:
            The decoded body
        """
        request = HTTPRequest.build(
            HTTPMethod.POST,
            url,
            headers={hdrs.CONTENT_TYPE: FORM_CONTENT_TYPE},
            body=url_encoded_data(parameters),
        ).with_headers(headers)
        return await self._send_and_decode(request, response_type)

    async def post_json(
        self,
        url: str,
        body: Any,
        response_type: Any = Any,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        POST request with a JSON body and a JSON response.

        Args:
            url: The URL to POST to
            body: Value to serialize as JSON (dicts, lists, dataclasses,
                  pydantic models, ...)
            response_type: Type to decode the JSON body into
            headers: Optional HTTP headers, applied after Content-Type

        Returns:
            The decoded body

        Raises:
            pydantic_core.PydanticSerializationError: If `body` cannot be serialized
        """
        return await self._send_json(HTTPMethod.POST, url, body, response_type, headers)

    async def put_json(
        self,
        url: str,
        body: Any,
        response_type: Any = Any,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """PUT request with a JSON body and a JSON response."""
        return await self._send_json(HTTPMethod.PUT, url, body, response_type, headers)

    async def delete(self, url: str, response_type: Any = Any, headers: Mapping[str, str] | None = None) -> Any:
        """DELETE request with a JSON response."""
        request = HTTPRequest.build(HTTPMethod.DELETE, url).with_headers(headers)
        return await self._send_and_decode(request, response_type)

    async def check(self, url: str) -> bool:
        """
        Check whether a URL answers a GET with a 2xx status.

        Never raises; any failure yields False.
        """
        request = HTTPRequest.build(HTTPMethod.GET, url)
        try:
            _, response = await self.send(request)
        except Exception as e:
            logger.debug(f"check({url}) failed: {e!r}")
            return False
        return isinstance(response, HTTPResponse) and response.ok

    async def _send_json(
        self,
        method: HTTPMethod,
        url: str,
        body: Any,
        response_type: Any,
        headers: Mapping[str, str] | None,
    ) -> Any:
        request = HTTPRequest.build(
            method,
            url,
            headers={hdrs.CONTENT_TYPE: JSON_CONTENT_TYPE},
            body=_serialize_json(body),
        ).with_headers(headers)
        return await self._send_and_decode(request, response_type)

    async def _send_and_decode(self, request: HTTPRequest, response_type: Any) -> Any:
        """Shared decode path for the high-level helpers."""
        data, response = await self.send(request)

        if not isinstance(response, HTTPResponse):
            raise InvalidResponseError()

        if not response.ok:
            raise HTTPStatusError(response.status)

        try:
            return _adapter(response_type).validate_json(data, strict=True)
        except ValidationError as e:
            raise DecodingFailedError(str(e)) from e

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> "HTTPClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
