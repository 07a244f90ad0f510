"""Tests for the typed HTTPClient facade."""

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from tempfile import TemporaryDirectory
from urllib.parse import parse_qsl

import aiohttp
import pytest
from pydantic_core import PydanticSerializationError

from typed_http import ClientSettings
from typed_http import DecodingFailedError
from typed_http import FileLogSink
from typed_http import HTTPClient
from typed_http import HTTPClientError
from typed_http import HTTPMethod
from typed_http import HTTPRequest
from typed_http import HTTPResponse
from typed_http import HTTPStatusError
from typed_http import InvalidResponseError
from typed_http import MemoryLogSink
from typed_http import Severity


@dataclass
class Item:
    name: str
    count: int


class TestDecodePath:
    """Test status validation and typed decoding."""

    @pytest.mark.parametrize("status", [200, 201, 202, 204, 250, 299])
    def test_2xx_never_raises_status_error(self, make_transport, status: int) -> None:
        client = HTTPClient(transport=make_transport(status=status, body=b'{"ok": true}'))
        assert asyncio.run(client.get("https://api.example.com/", dict[str, bool])) == {"ok": True}

    @pytest.mark.parametrize("status", [100, 199, 300, 301, 304, 400, 401, 404, 418, 500, 503, 599])
    def test_non_2xx_raises_exact_code(self, make_transport, status: int) -> None:
        client = HTTPClient(transport=make_transport(status=status, body=b'{"ok": true}'))
        with pytest.raises(HTTPStatusError) as exc_info:
            asyncio.run(client.get("https://api.example.com/"))
        assert exc_info.value.code == status
        assert str(exc_info.value) == f"Invalid http status code: {status}"

    def test_decodes_into_dataclass(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(body=b'{"name": "widget", "count": 3}'))
        item = asyncio.run(client.get("https://api.example.com/item", Item))
        assert item == Item(name="widget", count=3)

    def test_decodes_list_of_dataclasses(self, make_transport) -> None:
        body = b'[{"name": "a", "count": 1}, {"name": "b", "count": 2}]'
        client = HTTPClient(transport=make_transport(body=body))
        items = asyncio.run(client.get("https://api.example.com/items", list[Item]))
        assert items == [Item("a", 1), Item("b", 2)]

    def test_default_type_returns_plain_json(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(body=b'{"a": [1, 2]}'))
        assert asyncio.run(client.get("https://api.example.com/")) == {"a": [1, 2]}

    @pytest.mark.parametrize(
        ("body", "response_type"),
        [
            (b'{"name": "widget"}', Item),
            (b'{"name": "widget", "count": "many"}', Item),
            (b"[1, 2]", dict[str, int]),
            (b'{"a": 1}', list[int]),
            (b"not json", dict[str, int]),
            (b"", dict[str, int]),
            (b'"1"', int),
            (b'"true"', bool),
            (b'{"name": "widget", "count": "3"}', Item),
        ],
    )
    def test_wrong_shape_raises_decoding_failed(self, make_transport, body: bytes, response_type: object) -> None:
        client = HTTPClient(transport=make_transport(body=body))
        with pytest.raises(DecodingFailedError) as exc_info:
            asyncio.run(client.get("https://api.example.com/", response_type))
        assert exc_info.value.message
        assert str(exc_info.value).startswith("Failed to decode response: ")

    def test_non_http_response_raises_invalid_response(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(response=object()))
        with pytest.raises(InvalidResponseError):
            asyncio.run(client.get("https://api.example.com/"))

    def test_errors_share_base_class(self) -> None:
        assert issubclass(InvalidResponseError, HTTPClientError)
        assert issubclass(HTTPStatusError, HTTPClientError)
        assert issubclass(DecodingFailedError, HTTPClientError)

    def test_transport_errors_are_not_wrapped(self, make_transport) -> None:
        error = aiohttp.ClientConnectionError("refused")
        client = HTTPClient(transport=make_transport(error=error))
        with pytest.raises(aiohttp.ClientConnectionError) as exc_info:
            asyncio.run(client.get("https://api.example.com/"))
        assert exc_info.value is error


class TestRequestBuilding:
    """Test the requests produced by each helper."""

    def test_get_applies_headers(self, make_transport) -> None:
        transport = make_transport()
        client = HTTPClient(transport=transport)
        asyncio.run(client.get("https://api.example.com/", headers={"Authorization": "Bearer t"}))

        request = transport.requests[0]
        assert request.method is HTTPMethod.GET
        assert request.body is None
        assert request.headers["authorization"] == "Bearer t"

    def test_post_sends_form_body(self, make_transport) -> None:
        transport = make_transport()
        client = HTTPClient(transport=transport)
        asyncio.run(client.post("https://api.example.com/login", {"user": "ana maria", "remember": True}))

        request = transport.requests[0]
        assert request.method is HTTPMethod.POST
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert parse_qsl(request.body.decode()) == [("user", "ana maria"), ("remember", "true")]

    def test_post_json_sends_json_body(self, make_transport) -> None:
        transport = make_transport()
        client = HTTPClient(transport=transport)
        asyncio.run(client.post_json("https://api.example.com/items", Item(name="w", count=2)))

        request = transport.requests[0]
        assert request.headers["content-type"] == "application/json"
        assert request.body == b'{"name":"w","count":2}'

    def test_caller_headers_override_content_type(self, make_transport) -> None:
        transport = make_transport()
        client = HTTPClient(transport=transport)
        asyncio.run(
            client.post_json(
                "https://api.example.com/items",
                {"a": 1},
                headers={"content-type": "application/vnd.api+json"},
            )
        )
        assert transport.requests[0].headers.getall("Content-Type") == ["application/vnd.api+json"]

    def test_post_json_serialization_error_propagates(self, make_transport) -> None:
        transport = make_transport()
        client = HTTPClient(transport=transport)
        with pytest.raises(PydanticSerializationError):
            asyncio.run(client.post_json("https://api.example.com/items", {"a": object()}))
        assert transport.requests == []

    def test_put_json_and_delete(self, make_transport) -> None:
        transport = make_transport(body=b'{"deleted": true}')
        client = HTTPClient(transport=transport)

        asyncio.run(client.put_json("https://api.example.com/items/1", {"count": 5}))
        result = asyncio.run(client.delete("https://api.example.com/items/1", dict[str, bool]))

        assert [r.method for r in transport.requests] == [HTTPMethod.PUT, HTTPMethod.DELETE]
        assert transport.requests[0].body == b'{"count":5}'
        assert result == {"deleted": True}

    def test_send_returns_raw_result(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(status=404, body=b"missing"))
        request = HTTPRequest.build(HTTPMethod.GET, "https://api.example.com/")
        body, response = asyncio.run(client.send(request))
        assert body == b"missing"
        assert isinstance(response, HTTPResponse)
        assert response.status == 404


class TestCheck:
    """Test the reachability probe."""

    def test_200_is_reachable(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(status=200, body=b"<html>"))
        assert asyncio.run(client.check("https://example.test/")) is True

    def test_404_is_not_reachable(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(status=404))
        assert asyncio.run(client.check("https://example.test/")) is False

    def test_connection_failure_is_not_reachable(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(error=aiohttp.ClientConnectionError("refused")))
        assert asyncio.run(client.check("https://example.test/")) is False

    def test_malformed_response_is_not_reachable(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(response=object()))
        assert asyncio.run(client.check("https://example.test/")) is False


class TestClientLifecycle:
    """Test construction, logging and closing."""

    def test_requests_are_logged_to_injected_sink(self, make_transport) -> None:
        sink = MemoryLogSink()
        client = HTTPClient(transport=make_transport(), logger=sink)
        asyncio.run(client.get("https://api.example.com/"))
        assert len(sink.records) == 1
        assert sink.records[0][0] is Severity.DEBUG

    def test_set_logger(self, make_transport) -> None:
        sink = MemoryLogSink()
        client = HTTPClient(transport=make_transport())
        client.set_logger(sink)
        asyncio.run(client.check("https://api.example.com/"))
        assert len(sink.records) == 1

    def test_injected_transport_is_not_closed(self, make_transport) -> None:
        transport = make_transport()

        async def run() -> None:
            async with HTTPClient(transport=transport) as client:
                await client.get("https://api.example.com/")

        asyncio.run(run())
        assert transport.closed is False

    def test_from_settings(self) -> None:
        client = HTTPClient.from_settings(ClientSettings(timeout=3, trusted_ssl_domain="example.test"))
        assert client.transport.trust_policy is not None
        assert client.transport.trust_policy.trusted_domain == "example.test"
        asyncio.run(client.close())


class TestLoggingNeverAltersResults:
    """Test that log formatting and sink failures do not change call outcomes."""

    def test_deeply_nested_body_still_reaches_decoder(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(body=b"[" * 100000), logger=MemoryLogSink())
        with pytest.raises(DecodingFailedError):
            asyncio.run(client.get("https://api.example.com/", list[int]))

    def test_check_succeeds_with_deeply_nested_body(self, make_transport) -> None:
        client = HTTPClient(transport=make_transport(body=b"[" * 100000), logger=MemoryLogSink())
        assert asyncio.run(client.check("https://api.example.com/")) is True

    def test_missing_log_file_does_not_fail_request(self, make_transport) -> None:
        """Test that a FileLogSink whose directory vanished is ignored."""
        with TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "logs"
            sink = FileLogSink(log_dir / "http.log")
            shutil.rmtree(log_dir)

            client = HTTPClient(transport=make_transport(body=b'{"a": 1}'), logger=sink)
            assert asyncio.run(client.get("https://api.example.com/")) == {"a": 1}
