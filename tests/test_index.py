from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from pkgsearch.exceptions import DecodeError, TransportError
from pkgsearch.index import decode_line, fetch_index

INDEX_URL = "https://index.golang.org/index"


def _line(path: str, version: str = "v1.0.0", ts: str = "2019-04-10T19:08:52.997264Z") -> str:
    return json.dumps({"Path": path, "Version": version, "Timestamp": ts})


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestDecodeLine:
    def test_full_record(self):
        entry = decode_line(_line("golang.org/x/text", "v0.3.0"))
        assert entry.id == "golang.org/x/text"
        assert entry.label == "v0.3.0"
        assert entry.observed_at == datetime(2019, 4, 10, 19, 8, 52, 997264, tzinfo=timezone.utc)

    def test_optional_fields(self):
        entry = decode_line('{"Path": "example.com/mod"}')
        assert entry.id == "example.com/mod"
        assert entry.label == ""
        assert entry.observed_at is None

    def test_null_version(self):
        assert decode_line('{"Path": "a", "Version": null}').label == ""

    def test_extra_fields_ignored(self):
        assert decode_line('{"Path": "a", "Origin": "x"}').id == "a"

    @pytest.mark.parametrize(
        "line",
        [
            "not json",
            '{"Path": "a"',
            "[1, 2]",
            '{"Version": "v1.0.0"}',
            '{"Path": ""}',
            '{"Path": "a", "Timestamp": "yesterday"}',
        ],
    )
    def test_malformed(self, line):
        with pytest.raises(DecodeError) as exc_info:
            decode_line(line)
        assert exc_info.value.line == line


class TestFetchIndex:
    @pytest.mark.asyncio
    async def test_parses_lines_in_order(self):
        body = "\n".join([_line("foo/bar"), _line("foo/baz"), _line("qux")]) + "\n"

        async with _client(lambda request: httpx.Response(200, text=body)) as client:
            entries = await fetch_index(INDEX_URL, client=client)

        assert [e.id for e in entries] == ["foo/bar", "foo/baz", "qux"]

    @pytest.mark.asyncio
    async def test_skips_malformed_lines(self, caplog):
        body = "\n".join([_line("foo/bar"), "{broken", "", '{"Version": "v1"}', _line("qux")])

        with caplog.at_level("WARNING", logger="pkgsearch.index"):
            async with _client(lambda request: httpx.Response(200, text=body)) as client:
                entries = await fetch_index(INDEX_URL, client=client)

        assert [e.id for e in entries] == ["foo/bar", "qux"]
        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert len(warnings) == 2

    @pytest.mark.asyncio
    async def test_empty_body(self):
        async with _client(lambda request: httpx.Response(200, text="")) as client:
            assert await fetch_index(INDEX_URL, client=client) == []

    @pytest.mark.asyncio
    async def test_non_ok_status(self):
        async with _client(lambda request: httpx.Response(503)) as client:
            with pytest.raises(TransportError) as exc_info:
                await fetch_index(INDEX_URL, client=client)

        assert exc_info.value.status_code == 503
        assert "non-OK status" in exc_info.value.message
        assert "503" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                await fetch_index(INDEX_URL, client=client)

        assert exc_info.value.message.startswith("failed to fetch Go index")
        assert exc_info.value.url == INDEX_URL

    @pytest.mark.asyncio
    async def test_passes_query_params(self):
        seen: list[httpx.URL] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url)
            return httpx.Response(200, text=_line("a"))

        async with _client(handler) as client:
            await fetch_index(
                INDEX_URL,
                client=client,
                params={"since": "2024-01-01T00:00:00Z", "limit": "10"},
            )

        assert seen[0].params["since"] == "2024-01-01T00:00:00Z"
        assert seen[0].params["limit"] == "10"
