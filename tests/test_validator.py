"""
Tests for the session validator.
"""

import httpx
import pytest

from vet_session.auth import CLIENT_VALIDATE_PATH, SYSTEM_VALIDATE_PATH, SessionValidator
from vet_session.exceptions import TransportFailure


def answer(status_code=200, **kwargs):
    """Handler that always returns the same response."""
    return lambda request: httpx.Response(status_code, **kwargs)


class TestSessionValidator:
    """Test cases for SessionValidator.validate."""

    @pytest.mark.asyncio
    async def test_sends_token_as_query_parameter(self, make_api_client):
        """Test the token travels as ?token= without an Authorization header."""
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["token"] = request.url.params.get("token")
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=True)

        async with make_api_client(handler, token_provider=lambda: "other") as client:
            assert await SessionValidator(client).validate("abc") is True

        assert seen == {"path": "/api/auth/validate", "token": "abc", "auth": None}

    @pytest.mark.asyncio
    async def test_client_path(self, make_api_client):
        """Test the client-portal validator uses its own endpoint."""
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json=True)

        async with make_api_client(handler) as client:
            await SessionValidator(client, CLIENT_VALIDATE_PATH).validate("abc")

        assert seen["path"] == "/api/public/clientes/auth/validate"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body, expected",
        [
            (True, True),
            (False, False),
            ({"valid": True}, True),
            ({"valid": False}, False),
            ("true", False),
            (None, False),
        ],
    )
    async def test_json_answers(self, make_api_client, body, expected):
        """Test only an explicit true counts as valid."""
        async with make_api_client(answer(json=body)) as client:
            assert await SessionValidator(client).validate("abc") is expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 401, 403, 404])
    async def test_client_errors_mean_invalid(self, make_api_client, status_code):
        """Test 4xx answers are a definite 'no', not a failure."""
        async with make_api_client(answer(status_code)) as client:
            assert await SessionValidator(client).validate("abc") is False

    @pytest.mark.asyncio
    async def test_non_json_means_invalid(self, make_api_client):
        async with make_api_client(answer(text="ok")) as client:
            assert await SessionValidator(client).validate("abc") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [500, 502, 503])
    async def test_server_errors_raise(self, make_api_client, status_code):
        """Test 5xx answers are a transport failure, not an invalid token."""
        async with make_api_client(answer(status_code)) as client:
            with pytest.raises(TransportFailure) as exc_info:
                await SessionValidator(client).validate("abc")

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_network_error_raises(self, make_api_client):
        """Test an unreachable backend raises TransportFailure."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with make_api_client(handler) as client:
            with pytest.raises(TransportFailure):
                await SessionValidator(client, SYSTEM_VALIDATE_PATH).validate("abc")
