"""
Transport sessions backed by aiohttp.

`create_session()` builds the transport used by HTTPClient. It can accept
server certificates for exactly one trusted host (for example a staging
server with a self-signed certificate); every other host keeps default
certificate validation.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol
from urllib.parse import urljoin
from urllib.parse import urlsplit

import aiohttp
from aiohttp import hdrs
from multidict import CIMultiDict

from .methods import HTTPMethod
from .models import HTTPRequest
from .models import HTTPResponse

logger = logging.getLogger(__name__)

_REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


class Transport(Protocol):
    """Protocol for objects that exchange requests for responses."""

    async def send(self, request: HTTPRequest) -> tuple[bytes, HTTPResponse]:
        """Send a request and return the raw body and the response."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


class AuthenticationMethod(Enum):
    """Kinds of authentication challenge a connection can raise."""

    SERVER_TRUST = "server_trust"
    HTTP_BASIC = "http_basic"
    CLIENT_CERTIFICATE = "client_certificate"
    DEFAULT = "default"


class ChallengeDisposition(Enum):
    """How an authentication challenge is answered."""

    USE_CREDENTIAL = "use_credential"  # Accept the server certificate as-is
    PERFORM_DEFAULT_HANDLING = "perform_default_handling"


@dataclass(frozen=True)
class TrustChallenge:
    """An authentication challenge raised while connecting to `host`."""

    host: str
    authentication_method: AuthenticationMethod = AuthenticationMethod.SERVER_TRUST


class SSLTrustPolicy:
    """
    Accepts server trust challenges for a single host.

    The host must match exactly. There is no wildcard or subdomain matching
    and only one domain can be trusted.
    """

    def __init__(self, trusted_domain: str):
        if not trusted_domain:
            raise ValueError("trusted_domain must be a non-empty host name")
        self.trusted_domain = trusted_domain

    def evaluate(self, challenge: TrustChallenge) -> ChallengeDisposition:
        """
        Decide how to answer a challenge.

        Args:
            challenge: The challenge raised by the connection

        Returns:
            USE_CREDENTIAL for a server trust challenge from the trusted host,
            PERFORM_DEFAULT_HANDLING for anything else
        """
        if (
            challenge.authentication_method is AuthenticationMethod.SERVER_TRUST
            and challenge.host.lower() == self.trusted_domain.lower()
        ):
            return ChallengeDisposition.USE_CREDENTIAL
        return ChallengeDisposition.PERFORM_DEFAULT_HANDLING


class AiohttpTransport:
    """
    Transport backed by a shared aiohttp.ClientSession.

    The session is created on first use and reused by every request, so one
    transport can serve many concurrent calls.
    """

    max_redirects = 10

    def __init__(
        self,
        request_timeout: float,
        resource_timeout: float = 10.0,
        trust_policy: SSLTrustPolicy | None = None,
    ):
        self._timeout = aiohttp.ClientTimeout(total=resource_timeout, sock_read=request_timeout)
        self._trust_policy = trust_policy
        self._session: aiohttp.ClientSession | None = None

    @property
    def trust_policy(self) -> SSLTrustPolicy | None:
        return self._trust_policy

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    def verify_ssl(self, url: str) -> bool:
        """Whether certificate verification applies to a request for `url`."""
        parts = urlsplit(url)
        if self._trust_policy is None or parts.scheme != "https" or not parts.hostname:
            return True
        disposition = self._trust_policy.evaluate(TrustChallenge(host=parts.hostname))
        if disposition is ChallengeDisposition.USE_CREDENTIAL:
            logger.debug(f"Accepting server certificate for trusted host {parts.hostname}")
            return False
        return True

    async def send(self, request: HTTPRequest) -> tuple[bytes, HTTPResponse]:
        """
        Send a request through the shared session.

        Args:
            request: The request to send

        Returns:
            Raw response body and the response

        Raises:
            aiohttp.ClientError: On connection, TLS or protocol failures
            asyncio.TimeoutError: When a timeout expires
        """
        session = await self._get_session()
        if self._trust_policy is None:
            async with session.request(
                request.method.value,
                request.url,
                headers=request.headers,
                data=request.body,
            ) as resp:
                body = await resp.read()
                return body, _to_response(resp)
        return await self._send_following_redirects(session, request)

    async def _send_following_redirects(
        self,
        session: aiohttp.ClientSession,
        request: HTTPRequest,
    ) -> tuple[bytes, HTTPResponse]:
        """Follow redirects by hand so every hop gets its own trust decision."""
        method = request.method
        url = request.url
        headers = CIMultiDict(request.headers)
        data = request.body
        history: list[aiohttp.ClientResponse] = []

        for _ in range(self.max_redirects + 1):
            async with session.request(
                method.value,
                url,
                headers=headers,
                data=data,
                ssl=self.verify_ssl(url),
                allow_redirects=False,
            ) as resp:
                body = await resp.read()
                location = resp.headers.get(hdrs.LOCATION)
                if resp.status not in _REDIRECT_STATUSES or location is None:
                    return body, _to_response(resp)
                history.append(resp)

            next_url = urljoin(str(resp.url), location)
            if urlsplit(next_url).hostname != urlsplit(url).hostname:
                headers.popall(hdrs.AUTHORIZATION, None)
            if resp.status == 303 or (resp.status in (301, 302) and method is HTTPMethod.POST):
                method = HTTPMethod.GET
                data = None
                headers.popall(hdrs.CONTENT_TYPE, None)
            url = next_url

        raise aiohttp.TooManyRedirects(history[-1].request_info, tuple(history))

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


def _to_response(resp: aiohttp.ClientResponse) -> HTTPResponse:
    return HTTPResponse(status=resp.status, headers=resp.headers, url=str(resp.url))


def create_session(
    request_timeout: float,
    resource_timeout: float = 10.0,
    trusted_domain: str | None = None,
) -> AiohttpTransport:
    """
    Create a transport with timeouts and an optional trusted SSL domain.

    Args:
        request_timeout: Timeout for reading each response, in seconds
        resource_timeout: Timeout for a whole request, in seconds
        trusted_domain: When provided, server certificates for this host
                        are accepted without validation

    Returns:
        A configured transport
    """
    if trusted_domain:
        logger.info(f"create_session, trust ssl cert: {trusted_domain}")
        return AiohttpTransport(request_timeout, resource_timeout, SSLTrustPolicy(trusted_domain))
    return AiohttpTransport(request_timeout, resource_timeout)
