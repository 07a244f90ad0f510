"""
Structured HTTP traffic logging.

Each request produces one multi-line record summarizing method, URL,
headers, bodies, status and duration. Records go to an injected LogSink so
applications choose where they end up and tests can capture them.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Protocol


class Severity(Enum):
    """Log severities, mapped onto stdlib logging levels."""

    INFO = logging.INFO
    DEBUG = logging.DEBUG
    WARN = logging.WARNING
    ERROR = logging.ERROR


class LogSink(Protocol):
    """Protocol for receiving formatted log records."""

    def record(self, severity: Severity, message: str) -> None:
        """Record a message at the given severity."""
        ...


class StdlibLogSink:
    """Forwards records to a stdlib logger."""

    def __init__(self, name: str = "typed_http.network"):
        self._logger = logging.getLogger(name)

    def record(self, severity: Severity, message: str) -> None:
        self._logger.log(severity.value, message)


class MemoryLogSink:
    """Keeps records in memory, oldest first."""

    def __init__(self) -> None:
        self.records: list[tuple[Severity, str]] = []

    def record(self, severity: Severity, message: str) -> None:
        self.records.append((severity, message))


class FileLogSink:
    """
    Appends records to a file.

    Format:
        [timestamp] [severity] message

    Where:
        - timestamp: ISO 8601 format in UTC with millisecond precision
        - severity: INFO, DEBUG, WARN or ERROR
    """

    def __init__(self, log_file: Path):
        """
        Initialize the file sink.

        Args:
            log_file: Path to the log file. Parent directories will be created
                      if they don't exist.
        """
        self.log_file = log_file
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.log_file.touch(exist_ok=True)

    def record(self, severity: Severity, message: str) -> None:
        timestamp = datetime.now(UTC).isoformat(timespec="milliseconds")
        with self.log_file.open("a", encoding="utf-8") as f:
            f.write(f"[{timestamp}] [{severity.name}] {message}\n")


def _decode_text(data: bytes | None) -> str | None:
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def pretty_json(data: bytes) -> str | None:
    """Pretty-print a JSON payload, or None if it is not JSON."""
    try:
        return json.dumps(json.loads(data), indent=2, ensure_ascii=False)
    except (ValueError, TypeError, RecursionError):
        return None


@dataclass
class NetworkLogRecord:
    """Summary of one request, rendered into a multi-line log message."""

    method: str
    url: str
    request_headers: Mapping[str, str]
    request_body: bytes | None
    duration: float
    status: int | None = None
    response_headers: Mapping[str, str] | None = None
    response_body: bytes | None = None
    error: BaseException | None = None

    @property
    def tag(self) -> str:
        if self.error is not None:
            return "FAIL"
        if self.status is None:
            return "UNKNOWN"
        return "OK" if 200 <= self.status <= 299 else "FAIL"

    @property
    def status_text(self) -> str:
        if self.error is not None:
            return "ERROR"
        if self.status is None:
            return "?"
        return str(self.status)

    @property
    def severity(self) -> Severity:
        return Severity.ERROR if self.error is not None else Severity.DEBUG

    def render(self) -> str:
        """Render the record as a multi-line message."""
        lines = [
            "",
            f"[HTTP] [{self.method}] [{self.tag}] [{self.status_text}] [{self.duration:.3f}s]",
            f"URL: {self.url}",
        ]
        lines.extend(_header_lines("Request Headers:", self.request_headers))

        request_text = _decode_text(self.request_body)
        if request_text is not None:
            lines.append(f"Request Body: {request_text}")

        if self.error is not None:
            lines.append(f"Error: {self.error}")
            lines.append(f"Details: {self.error!r}")
            return "\n".join(lines)

        lines.extend(_header_lines("Response Headers:", self.response_headers))

        if self.response_body is not None:
            pretty = pretty_json(self.response_body)
            if pretty is not None:
                lines.append(f"Response Body:\n{pretty}")
            else:
                response_text = _decode_text(self.response_body)
                if response_text is not None:
                    lines.append(f"Response Body: {response_text}")

        return "\n".join(lines)


def _header_lines(title: str, headers: Mapping[str, str] | None) -> list[str]:
    if not headers:
        return []
    items = sorted(headers.items(), key=lambda item: item[0].lower())
    return [title] + [f"  {key}: {value}" for key, value in items]
