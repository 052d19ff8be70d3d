"""Unit tests for the Tavily search client."""

import asyncio
import json

import pytest

from pantry_service.search.tavily import RAW_BODY_LIMIT, build_payload, decode_body, tavily_search


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._body = body

    async def text(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession; records each POST."""

    def __init__(self, status=200, body="{}", error=None):
        self.status = status
        self.body = body
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.error:
            raise self.error
        return FakeResponse(self.status, self.body)


class TestBuildPayload:
    def test_payload_fields(self):
        payload = build_payload("recipe egg", "tvly-key")

        assert payload == {
            "api_key": "tvly-key",
            "query": "recipe egg",
            "max_results": 5,
            "include_images": True,
            "search_depth": "basic",
        }


class TestDecodeBody:
    def test_json_object(self):
        assert decode_body('{"results": []}') == {"results": []}

    def test_not_json(self):
        decoded = decode_body("<html>Bad Gateway</html>")
        assert decoded == {"parseError": True, "raw": "<html>Bad Gateway</html>"}

    def test_non_object_json(self):
        assert decode_body("[1, 2]")["parseError"] is True

    def test_raw_truncated(self):
        decoded = decode_body("x" * 2000)
        assert len(decoded["raw"]) == RAW_BODY_LIMIT


class TestTavilySearch:
    """Test tavily_search against a fake aiohttp session."""

    @pytest.mark.asyncio
    async def test_successful_search(self):
        body = json.dumps({"results": [{"url": "https://a.com", "title": "A"}]})
        session = FakeSession(body=body)

        response = await tavily_search("recipe egg", api_key="tvly-key", session=session)

        assert response.ok is True
        assert response.status == 200
        assert response.results == [{"url": "https://a.com", "title": "A"}]
        assert session.calls[0]["json"]["query"] == "recipe egg"
        assert session.calls[0]["json"]["api_key"] == "tvly-key"
        assert session.calls[0]["timeout"].total == 15

    @pytest.mark.asyncio
    async def test_http_error_is_not_ok(self):
        session = FakeSession(status=401, body='{"detail": "Unauthorized"}')

        response = await tavily_search("q", api_key="bad", session=session)

        assert response.ok is False
        assert response.status == 401
        assert response.results == []

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        session = FakeSession(status=200, body="not json")

        response = await tavily_search("q", api_key="k", session=session)

        assert response.ok is True
        assert response.json_body["parseError"] is True
        assert response.results == []

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        session = FakeSession(error=asyncio.TimeoutError())

        with pytest.raises(asyncio.TimeoutError):
            await tavily_search("q", api_key="k", session=session)

    @pytest.mark.asyncio
    async def test_results_ignores_non_dict_entries(self):
        session = FakeSession(body=json.dumps({"results": ["junk", {"url": "https://a.com"}]}))

        response = await tavily_search("q", api_key="k", session=session)

        assert response.results == [{"url": "https://a.com"}]
