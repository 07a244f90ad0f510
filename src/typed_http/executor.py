"""
Request execution with timing and structured logging.
"""

import logging
import time

from .logger import LogSink
from .logger import NetworkLogRecord
from .logger import StdlibLogSink
from .models import HTTPRequest
from .models import HTTPResponse
from .session import Transport

logger = logging.getLogger(__name__)

_default_sink = StdlibLogSink()


def _emit(sink: LogSink, record: NetworkLogRecord) -> None:
    """Render and record, never letting a logging failure reach the caller."""
    try:
        sink.record(record.severity, record.render())
    except Exception:
        logger.exception(f"Failed to record HTTP log for {record.method} {record.url}")


async def execute(
    request: HTTPRequest,
    transport: Transport,
    sink: LogSink | None = None,
) -> tuple[bytes, HTTPResponse]:
    """
    Send a request, log a summary of it and return the transport's result.

    Args:
        request: The request to send
        transport: Transport that performs the network exchange
        sink: Where the log record goes. Defaults to the
              `typed_http.network` stdlib logger.

    Returns:
        Raw response body and the response, unchanged

    Raises:
        Exception: Whatever the transport raised, unchanged
    """
    if sink is None:
        sink = _default_sink
    start = time.perf_counter()

    try:
        body, response = await transport.send(request)
    except Exception as e:
        record = NetworkLogRecord(
            method=request.method.value,
            url=request.url,
            request_headers=request.headers,
            request_body=request.body,
            duration=time.perf_counter() - start,
            error=e,
        )
        _emit(sink, record)
        raise

    if isinstance(response, HTTPResponse):
        record = NetworkLogRecord(
            method=request.method.value,
            url=request.url,
            request_headers=request.headers,
            request_body=request.body,
            duration=time.perf_counter() - start,
            status=response.status,
            response_headers=response.headers,
            response_body=body,
        )
        _emit(sink, record)

    return body, response
