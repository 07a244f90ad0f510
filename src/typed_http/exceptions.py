"""
Custom exceptions for typed_http.

Only the typed decode path of HTTPClient raises these. Transport failures
(timeouts, refused connections, TLS and DNS errors) propagate as whatever
aiohttp raised.
"""


class HTTPClientError(Exception):
    """Base exception for all typed_http errors."""

    pass


class InvalidResponseError(HTTPClientError):
    """Raised when the transport result is not an HTTP response."""

    def __init__(self) -> None:
        super().__init__("Invalid response type")


class HTTPStatusError(HTTPClientError):
    """
    Raised when the response status is outside 200-299.

    Attributes:
        code: The HTTP status code returned by the server.
    """

    def __init__(self, code: int):
        self.code = code
        super().__init__(f"Invalid http status code: {code}")


class DecodingFailedError(HTTPClientError):
    """
    Raised when the response body does not decode into the requested type.

    Attributes:
        message: The underlying decoder's error message.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Failed to decode response: {message}")
