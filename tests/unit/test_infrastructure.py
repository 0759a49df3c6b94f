"""Unit tests for the collaborator adapters: HTTP client, mail, directory."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from config import EmailSettings
from errors import DependencyError
from infrastructure.directory.http_directory import (
    HttpIdentityResolver,
    HttpTokenSink,
    bearer_headers,
)
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    async def test_post_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "post", return_value=fake_resp)
        resp = await client.post("http://example.com")
        assert resp.status_code == 200
        await client.aclose()

    async def test_get_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "get", return_value=fake_resp)
        resp = await client.get("http://example.com")
        assert resp.status_code == 200
        await client.aclose()

    async def test_post_propagates_exception(self, mocker):
        client = HttpClient()
        mocker.patch.object(client._client, "post", side_effect=Exception("timeout"))
        with pytest.raises(Exception, match="timeout"):
            await client.post("http://example.com")
        await client.aclose()

    async def test_context_manager(self):
        async with HttpClient() as client:
            assert client is not None

    async def test_default_headers_sent_on_every_request(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200)

        client = HttpClient(headers={"Authorization": "Bearer abc"})
        client._client = httpx.AsyncClient(
            headers=client._client.headers, transport=httpx.MockTransport(handler)
        )
        await client.get("http://example.com/a")
        await client.post("http://example.com/b", json={})
        await client.aclose()
        assert [r.headers["Authorization"] for r in requests] == ["Bearer abc"] * 2

    async def test_headers_configured_on_client(self):
        async with HttpClient(headers=bearer_headers("abc")) as client:
            assert client._client.headers["Authorization"] == "Bearer abc"

    def test_bearer_headers_empty_without_key(self):
        assert bearer_headers("") == {}


# ── ZeptoMailProvider ─────────────────────────────────────────────────────────


class TestZeptoMailProvider:
    def _make(self, token="test-token"):
        settings = EmailSettings(
            zepto_api_token=token,
            zepto_from_email="noreply@example.com",
            zepto_from_name="Password Reset",
        )
        http = MagicMock()
        provider = ZeptoMailProvider(settings=settings, http_client=http, app_name="Acme")
        return provider, http

    async def test_send_reset_code_makes_post(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        assert await provider.send_reset_code("user@example.com", "123456", 5) is True
        http.post.assert_awaited_once()

    async def test_renders_code_into_both_bodies(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=202))
        await provider.send_reset_code("user@example.com", "482913", 5)
        _, kwargs = http.post.call_args
        payload = kwargs["json"]
        assert "482913" in payload["htmlbody"]
        assert "482913" in payload["textbody"]
        assert "5 minutes" in payload["textbody"]
        assert payload["to"][0]["email_address"]["address"] == "user@example.com"
        assert "Acme" in payload["subject"]

    async def test_returns_false_when_token_empty(self):
        provider, http = self._make(token="")
        http.post = AsyncMock()
        assert await provider.send_reset_code("u@e.com", "000000", 5) is False
        http.post.assert_not_awaited()

    async def test_returns_false_on_non_2xx(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=422, text="Unprocessable"))
        assert await provider.send_reset_code("u@e.com", "000000", 5) is False

    async def test_returns_false_on_exception(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=Exception("timeout"))
        assert await provider.send_reset_code("u@e.com", "000000", 5) is False

    async def test_auth_header_prepends_prefix(self):
        provider, http = self._make(token="rawtoken")
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        await provider.send_reset_code("u@e.com", "000000", 5)
        _, kwargs = http.post.call_args
        assert kwargs["headers"]["Authorization"] == "Zoho-enczapikey rawtoken"

    async def test_auth_header_not_double_prefixed(self):
        provider, http = self._make(token="Zoho-enczapikey alreadyprefixed")
        http.post = AsyncMock(return_value=MagicMock(status_code=201))
        await provider.send_reset_code("u@e.com", "654321", 5)
        _, kwargs = http.post.call_args
        assert kwargs["headers"]["Authorization"].count("Zoho-enczapikey") == 1


# ── HttpIdentityResolver ──────────────────────────────────────────────────────


class TestHttpIdentityResolver:
    def _make(self, url="https://directory.internal/identities"):
        http = MagicMock()
        return HttpIdentityResolver(url, http), http

    @pytest.mark.parametrize("status_code, expected", [(200, True), (404, False)])
    async def test_status_mapping(self, status_code, expected):
        resolver, http = self._make()
        http.get = AsyncMock(return_value=MagicMock(status_code=status_code))
        assert await resolver.exists("a@x.com") is expected

    async def test_sends_email(self):
        resolver, http = self._make()
        http.get = AsyncMock(return_value=MagicMock(status_code=200))
        await resolver.exists("a@x.com")
        args, kwargs = http.get.call_args
        assert args[0] == "https://directory.internal/identities"
        assert kwargs["params"] == {"email": "a@x.com"}
        assert "headers" not in kwargs

    async def test_unexpected_status_is_dependency_error(self):
        resolver, http = self._make()
        http.get = AsyncMock(return_value=MagicMock(status_code=500, text="oops"))
        with pytest.raises(DependencyError):
            await resolver.exists("a@x.com")

    async def test_transport_error_is_dependency_error(self):
        resolver, http = self._make()
        http.get = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(DependencyError):
            await resolver.exists("a@x.com")

    async def test_unconfigured_url(self):
        resolver, _ = self._make(url="")
        with pytest.raises(DependencyError):
            await resolver.exists("a@x.com")


# ── HttpTokenSink ─────────────────────────────────────────────────────────────


class TestHttpTokenSink:
    def _make(self, url="https://directory.internal/reset-tokens"):
        http = MagicMock()
        return HttpTokenSink(url, http), http

    async def test_posts_token(self):
        sink, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(is_success=True))
        await sink.store("a@x.com", "tok", "j1")
        _, kwargs = http.post.call_args
        assert kwargs["json"] == {"email": "a@x.com", "token": "tok", "jti": "j1"}
        assert "headers" not in kwargs

    async def test_rejection_is_dependency_error(self):
        sink, http = self._make()
        http.post = AsyncMock(
            return_value=MagicMock(is_success=False, status_code=400, text="bad")
        )
        with pytest.raises(DependencyError):
            await sink.store("a@x.com", "tok", "j1")

    async def test_transport_error_is_dependency_error(self):
        sink, http = self._make()
        http.post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(DependencyError):
            await sink.store("a@x.com", "tok", "j1")

    async def test_unconfigured_url(self):
        sink, _ = self._make(url="")
        with pytest.raises(DependencyError):
            await sink.store("a@x.com", "tok", "j1")
