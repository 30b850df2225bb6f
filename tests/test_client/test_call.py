"""Tests for one remote call: wire format, headers, envelope handling, hooks."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest
from pydantic import ValidationError

from conftest import RecordingTransport, envelope
from apiwire.client.call import CallSession, build_request, encode_arguments
from apiwire.exceptions import ProtocolError, ServerReportedError, TransportError
from apiwire.generator import connect
from apiwire.models import CredentialsMode, HostEnvironment
from apiwire.output import OutputManager, set_output
from apiwire.schema import ApiSchema, api_schema, bigint, json_value, string, timestamp


SAFARI_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Safari/605.1.15"
)
CHROME_UA = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@pytest.fixture(autouse=True)
def _clean_output():
    """Trace requests so the debug path runs; pytest captures stderr."""
    set_output(OutputManager(no_color=True, quiet=True, verbose=True))
    yield


def _connect(schema: ApiSchema, transport: httpx.MockTransport, **kwargs: Any):
    options = kwargs.pop("options", {"url": "http://glap"})
    return connect(schema, options, transport=transport, **kwargs)


# ---------------------------------------------------------------------------
# Request encoding
# ---------------------------------------------------------------------------


class TestEncodeArguments:
    def test_compact_array(self) -> None:
        assert encode_arguments(["Test"], [string]) == '["Test"]'

    def test_no_arguments(self) -> None:
        assert encode_arguments([], []) == "[]"

    def test_big_integer_is_exact(self) -> None:
        body = encode_arguments([12345678901234567890], [bigint])
        assert body == "[12345678901234567890]"

    def test_datetime_is_iso(self) -> None:
        when = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert encode_arguments([when], [timestamp]) == '["2024-01-01T12:00:00Z"]'

    def test_surplus_arguments_encoded_generically(self) -> None:
        assert encode_arguments(["a", {"k": 1}], [string]) == '["a",{"k":1}]'

    def test_non_ascii_kept(self) -> None:
        assert encode_arguments(["héllo"], [json_value]) == '["héllo"]'


class TestBuildRequest:
    def test_headers(self) -> None:
        request = build_request(
            "http://glap/hello-world", "[]", "tok", CredentialsMode.INCLUDE, HostEnvironment()
        )
        assert request.method == "POST"
        assert request.headers["accept"] == "application/json"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["x-security-token"] == "tok"
        assert request.headers["x-requested-with"] == "XMLHttpRequest"
        assert "origin" not in request.headers
        assert "cookie" not in request.headers

    def test_origin_header(self) -> None:
        host = HostEnvironment(origin="http://app.local")
        request = build_request("http://glap/x", "[]", "", CredentialsMode.INCLUDE, host)
        assert request.headers["origin"] == "http://app.local"


class TestCallSession:
    def test_no_supplier_gives_empty_token(self) -> None:
        assert CallSession().current_token() == ""

    def test_supplier_none_gives_empty_token(self) -> None:
        assert CallSession(security_token=lambda: None).current_token() == ""

    def test_supplier_value(self) -> None:
        assert CallSession(security_token=lambda: "abc").current_token() == "abc"


# ---------------------------------------------------------------------------
# Successful calls
# ---------------------------------------------------------------------------


class TestSuccessfulCalls:
    @pytest.mark.asyncio
    async def test_hello_world(self, sample_schema, transport: RecordingTransport) -> None:
        api = _connect(sample_schema, transport)
        assert await api.helloWorld("Test") == "Return"

        request = transport.last
        assert str(request.url) == "http://glap/hello-world"
        assert request.method == "POST"
        assert request.content == b'["Test"]'
        assert request.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_token_read_on_every_call(self, sample_schema, transport) -> None:
        tokens = iter(["first", "second"])
        api = _connect(sample_schema, transport, security_token=lambda: next(tokens))
        await api.helloWorld("a")
        await api.helloWorld("b")
        assert [r.headers["x-security-token"] for r in transport.requests] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_quoted_string_is_unwrapped(self, sample_schema) -> None:
        transport = RecordingTransport(envelope({"data": '"Return"'}))
        api = _connect(sample_schema, transport)
        assert await api.helloWorld("Test") == "Return"

    @pytest.mark.asyncio
    async def test_void_function_ignores_envelope(self, sample_schema) -> None:
        transport = RecordingTransport(envelope({}))
        api = _connect(sample_schema, transport)
        assert await api.voidFunc() is None
        assert transport.last.content == b"[]"

    @pytest.mark.asyncio
    async def test_nested_path(self, sample_schema) -> None:
        transport = RecordingTransport(envelope({}))
        api = _connect(sample_schema, transport)
        await api.group.secondLevel.foo()
        assert str(transport.last.url) == "http://glap/group/second-level/foo"

    @pytest.mark.asyncio
    async def test_record_with_big_integer(self, sample_schema) -> None:
        payload = '{"id": 12345678901234567890, "name": "Hello"}'
        transport = RecordingTransport(envelope({"data": payload}))
        api = _connect(sample_schema, transport)

        result = await api.group.called({"id": 12345678901234567890, "name": "Hello"})

        assert result == {"id": 12345678901234567890, "name": "Hello"}
        assert transport.last.content == b'[{"id":12345678901234567890,"name":"Hello"}]'

    @pytest.mark.asyncio
    async def test_record_as_object(self, sample_schema) -> None:
        transport = RecordingTransport(envelope({"data": {"id": 7, "name": "x"}}))
        api = _connect(sample_schema, transport)
        assert await api.group.called({"id": 7, "name": "x"}) == {"id": 7, "name": "x"}

    @pytest.mark.asyncio
    async def test_datetime_round_trip(self, sample_schema) -> None:
        transport = RecordingTransport(envelope({"data": "2024-01-01T12:00:00Z"}))
        api = _connect(sample_schema, transport)
        when = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

        result = await api.dateFunc(when)

        assert result == when
        assert json.loads(transport.last.content) == ["2024-01-01T12:00:00Z"]

    @pytest.mark.asyncio
    async def test_shared_http_client(self, sample_schema, transport) -> None:
        async with httpx.AsyncClient(transport=transport) as client:
            api = connect(sample_schema, {"url": "http://glap"}, http_client=client)
            assert await api.helloWorld("Test") == "Return"
            assert await api.helloWorld("Again") == "Return"
        assert len(transport.requests) == 2


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestCredentials:
    COOKIES = {"session": "s1"}

    @pytest.mark.asyncio
    async def test_chrome_sends_cookies_cross_origin(self, sample_schema, transport) -> None:
        host = HostEnvironment(origin="http://app.local", user_agent=CHROME_UA, cookies=self.COOKIES)
        api = _connect(sample_schema, transport, host=host)
        await api.helloWorld("Test")
        assert transport.last.headers["cookie"] == "session=s1"

    @pytest.mark.asyncio
    async def test_safari_withholds_cookies_cross_origin(self, sample_schema, transport) -> None:
        host = HostEnvironment(origin="http://app.local", user_agent=SAFARI_UA, cookies=self.COOKIES)
        api = _connect(sample_schema, transport, host=host)
        await api.helloWorld("Test")
        assert "cookie" not in transport.last.headers

    @pytest.mark.asyncio
    async def test_safari_sends_cookies_same_origin(self, sample_schema, transport) -> None:
        host = HostEnvironment(origin="http://glap", user_agent=SAFARI_UA, cookies=self.COOKIES)
        api = _connect(sample_schema, transport, host=host)
        await api.helloWorld("Test")
        assert transport.last.headers["cookie"] == "session=s1"

    @pytest.mark.asyncio
    async def test_wildcard_cors_sends_no_cookies(self, sample_schema, transport) -> None:
        host = HostEnvironment(user_agent=CHROME_UA, cookies=self.COOKIES)
        api = _connect(
            sample_schema,
            transport,
            host=host,
            options={"url": "http://glap", "wildcardCors": True},
        )
        await api.helloWorld("Test")
        assert "cookie" not in transport.last.headers

    @pytest.mark.asyncio
    async def test_injected_policy(self, sample_schema, transport) -> None:
        seen: list[Any] = []

        def policy(user_agent):
            seen.append(user_agent)
            return CredentialsMode.SAME_ORIGIN

        host = HostEnvironment(user_agent="custom-agent", cookies=self.COOKIES)
        api = _connect(sample_schema, transport, host=host, credentials_policy=policy)
        await api.helloWorld("Test")
        assert seen == ["custom-agent"]
        assert "cookie" not in transport.last.headers


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    @pytest.mark.asyncio
    async def test_transport_failure(self, sample_schema) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Alert", request=request)

        api = _connect(sample_schema, RecordingTransport(fail))
        with pytest.raises(TransportError, match="^Error in fetch: Alert$") as exc_info:
            await api.helloWorld("Test")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_body_not_json(self, sample_schema) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, text="<html>"))
        api = _connect(sample_schema, transport)
        with pytest.raises(TransportError, match="^Error in fetch: "):
            await api.helloWorld("Test")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["errorMessage", "message"])
    async def test_server_reported_error(self, sample_schema, field: str) -> None:
        transport = RecordingTransport(envelope({field: "Report"}))
        api = _connect(sample_schema, transport)
        with pytest.raises(ServerReportedError, match="^Server error: Report$"):
            await api.helloWorld("Test")

    @pytest.mark.asyncio
    async def test_error_reported_even_for_void_function(self, sample_schema) -> None:
        transport = RecordingTransport(envelope({"errorMessage": "Report"}))
        api = _connect(sample_schema, transport)
        with pytest.raises(ServerReportedError):
            await api.voidFunc()

    @pytest.mark.asyncio
    async def test_unauthorized(self, sample_schema) -> None:
        transport = RecordingTransport(envelope({"data": "ignored"}, status_code=401))
        api = _connect(sample_schema, transport)
        with pytest.raises(ServerReportedError, match="^Server error: Unauthorized$"):
            await api.helloWorld("Test")

    @pytest.mark.asyncio
    async def test_missing_data(self, sample_schema) -> None:
        transport = RecordingTransport(envelope({"wrong": "Report"}))
        api = _connect(sample_schema, transport)
        with pytest.raises(ProtocolError) as exc_info:
            await api.helloWorld("Test")
        assert str(exc_info.value) == (
            'There must be a data field in the received JSON: {"wrong":"Report"}'
        )

    @pytest.mark.asyncio
    async def test_decode_error_propagates_unwrapped(self, sample_schema) -> None:
        transport = RecordingTransport(envelope({"data": "not a date"}))
        api = _connect(sample_schema, transport)
        with pytest.raises(ValidationError):
            await api.dateFunc(datetime(2024, 1, 1, tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Freeze / unfreeze hooks
# ---------------------------------------------------------------------------


class TestHooks:
    def _hooks(self, calls: list[str]) -> dict[str, Any]:
        return {
            "url": "http://glap",
            "freeze": lambda: calls.append("freeze"),
            "unfreeze": lambda: calls.append("unfreeze"),
        }

    @pytest.mark.asyncio
    async def test_called_once_on_success(self, sample_schema, transport) -> None:
        calls: list[str] = []
        api = _connect(sample_schema, transport, options=self._hooks(calls))
        await api.helloWorld("Test")
        assert calls == ["freeze", "unfreeze"]

    @pytest.mark.asyncio
    async def test_freeze_precedes_request(self, sample_schema) -> None:
        calls: list[str] = []

        def reply(request: httpx.Request) -> httpx.Response:
            calls.append("request")
            return httpx.Response(200, json={"data": "Return"})

        api = _connect(sample_schema, RecordingTransport(reply), options=self._hooks(calls))
        await api.helloWorld("Test")
        assert calls == ["freeze", "request", "unfreeze"]

    @pytest.mark.asyncio
    async def test_called_once_on_transport_failure(self, sample_schema) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Alert", request=request)

        calls: list[str] = []
        api = _connect(sample_schema, RecordingTransport(fail), options=self._hooks(calls))
        with pytest.raises(TransportError):
            await api.helloWorld("Test")
        assert calls == ["freeze", "unfreeze"]

    @pytest.mark.asyncio
    async def test_called_once_on_server_error(self, sample_schema) -> None:
        calls: list[str] = []
        transport = RecordingTransport(envelope({"errorMessage": "Report"}))
        api = _connect(sample_schema, transport, options=self._hooks(calls))
        with pytest.raises(ServerReportedError):
            await api.helloWorld("Test")
        assert calls == ["freeze", "unfreeze"]

    @pytest.mark.asyncio
    async def test_hooks_inherited_by_nested_functions(self, sample_schema) -> None:
        calls: list[str] = []
        transport = RecordingTransport(envelope({}))
        api = _connect(sample_schema, transport, options=self._hooks(calls))
        await api.group.secondLevel.foo()
        assert calls == ["freeze", "unfreeze"]

    @pytest.mark.asyncio
    async def test_child_override_replaces_hooks(self, sample_schema) -> None:
        root_calls: list[str] = []
        group_calls: list[str] = []
        options = self._hooks(root_calls)
        options["children"] = {"group": {"freeze": lambda: group_calls.append("freeze")}}
        transport = RecordingTransport(envelope({}))
        api = _connect(sample_schema, transport, options=options)

        await api.group.secondLevel.foo()

        assert group_calls == ["freeze"]
        assert root_calls == ["unfreeze"]

    @pytest.mark.asyncio
    async def test_no_hooks_configured(self, sample_schema, transport) -> None:
        api = _connect(sample_schema, transport)
        assert await api.helloWorld("Test") == "Return"


class TestTypedDescriptorsFromSchema:
    @pytest.mark.asyncio
    async def test_big_integer_return(self) -> None:
        schema = api_schema({"count": {"args": [], "retVal": bigint}})
        transport = RecordingTransport(envelope({"data": 12345678901234567890}))
        api = _connect(schema, transport)
        assert await api.count() == 12345678901234567890
