"""
Unit tests for the HTTP remote sign-in client.
"""

import json

import httpx
import pytest

from staly.core.exceptions import RemoteSignInError
from staly.services.remote_sign_in import HttpRemoteSignIn

SIGN_IN_URL = "https://auth.test/v1/apple"


def client_with(handler) -> HttpRemoteSignIn:
    return HttpRemoteSignIn(SIGN_IN_URL, timeout=1.0, transport=httpx.MockTransport(handler))


class TestHttpRemoteSignIn:
    """Tests for HttpRemoteSignIn."""

    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"uid": "r1", "email": "k@test.com", "displayName": "Kei"})

        result = await client_with(handler).sign_in("id-token", "raw-nonce", "Kei Sato")

        assert seen["url"] == SIGN_IN_URL
        assert seen["body"] == {"idToken": "id-token", "nonce": "raw-nonce", "fullName": "Kei Sato"}
        assert result.uid == "r1"
        assert result.email == "k@test.com"
        assert result.display_name == "Kei"

    @pytest.mark.asyncio
    async def test_optional_fields_missing(self):
        def handler(request):
            return httpx.Response(200, json={"uid": "r1"})

        result = await client_with(handler).sign_in("t", "n", None)

        assert result.email is None
        assert result.display_name is None

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request):
            return httpx.Response(401, json={"error": "bad token"})

        with pytest.raises(RemoteSignInError) as exc_info:
            await client_with(handler).sign_in("t", "n", None)

        assert "401" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteSignInError):
            await client_with(handler).sign_in("t", "n", None)

    @pytest.mark.asyncio
    async def test_invalid_body(self):
        def handler(request):
            return httpx.Response(200, json={"email": "no-uid@test.com"})

        with pytest.raises(RemoteSignInError):
            await client_with(handler).sign_in("t", "n", None)

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(RemoteSignInError):
            await client_with(handler).sign_in("t", "n", None)
