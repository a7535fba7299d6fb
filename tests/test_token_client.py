from __future__ import annotations

import aiohttp
import pytest

from codecore_bot.auth_token.client import FORM_CONTENT_TYPE, TokenExchangeClient
from codecore_bot.auth_token.types import Credential
from codecore_bot.errors.internal import TokenExchangeError, TransportError
from tests.fixtures.api_responses import (
    TOKEN_BAD_REQUEST,
    TOKEN_MISSING_ACCESS_TOKEN,
    TOKEN_SUCCESS,
)
from tests.fixtures.chat_fakes import FakeHttpSession, FakeResponse

TOKEN_URL = "https://id.example.test/oauth2/token"


def _client(session: FakeHttpSession) -> TokenExchangeClient:
    return TokenExchangeClient(
        "cid",
        "secret",
        session,  # type: ignore[arg-type]
        token_url=TOKEN_URL,
        validate_url="https://id.example.test/oauth2/validate",
    )


@pytest.mark.asyncio()
async def test_client_credentials_exchange_success():
    session = FakeHttpSession([FakeResponse(200, TOKEN_SUCCESS)])
    credential = await _client(session).exchange_client_credentials()
    assert credential == Credential(access_token="abc", token_type="bearer", expires_in_seconds=3600)
    post = session.posts[0]
    assert post["url"] == TOKEN_URL
    assert post["data"] == {
        "client_id": "cid",
        "client_secret": "secret",
        "grant_type": "client_credentials",
    }
    assert post["headers"] == {"Content-Type": FORM_CONTENT_TYPE}


@pytest.mark.asyncio()
async def test_custom_grant_type_and_scope_are_sent():
    session = FakeHttpSession([FakeResponse(200, TOKEN_SUCCESS)])
    await _client(session).exchange_client_credentials("password", scope="chat:read")
    assert session.posts[0]["data"]["grant_type"] == "password"
    assert session.posts[0]["data"]["scope"] == "chat:read"


@pytest.mark.asyncio()
async def test_authorization_code_exchange_form():
    session = FakeHttpSession([FakeResponse(200, TOKEN_SUCCESS)])
    credential = await _client(session).exchange_authorization_code(
        "thecode", "http://localhost:3000/"
    )
    assert credential.access_token == "abc"
    data = session.posts[0]["data"]
    assert data["grant_type"] == "authorization_code"
    assert data["code"] == "thecode"
    assert data["redirect_uri"] == "http://localhost:3000/"
    assert data["client_id"] == "cid"


@pytest.mark.asyncio()
async def test_http_error_raises_with_status_and_body():
    session = FakeHttpSession([FakeResponse(400, TOKEN_BAD_REQUEST)])
    with pytest.raises(TokenExchangeError) as exc_info:
        await _client(session).exchange_client_credentials()
    assert exc_info.value.status == 400
    assert "invalid client secret" in exc_info.value.body


@pytest.mark.asyncio()
async def test_missing_access_token_is_decode_failure():
    session = FakeHttpSession([FakeResponse(200, TOKEN_MISSING_ACCESS_TOKEN)])
    with pytest.raises(TokenExchangeError) as exc_info:
        await _client(session).exchange_client_credentials()
    assert exc_info.value.status == 200


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "body",
    [
        "not json",
        "[1, 2]",
        '{"access_token": "abc", "expires_in": "soon"}',
        '{"access_token": "abc", "token_type": "bearer", "expires_in": 1e400}',
        '{"access_token": "abc", "expires_in": Infinity}',
        '{"access_token": "abc", "expires_in": NaN}',
    ],
)
async def test_malformed_body_raises(body):
    session = FakeHttpSession([FakeResponse(200, text=body)])
    with pytest.raises(TokenExchangeError):
        await _client(session).exchange_client_credentials()


@pytest.mark.asyncio()
async def test_network_error_raises_token_exchange_error():
    session = FakeHttpSession(post_error=aiohttp.ClientConnectionError("down"))
    with pytest.raises(TokenExchangeError) as exc_info:
        await _client(session).exchange_client_credentials()
    assert exc_info.value.status is None


@pytest.mark.asyncio()
async def test_validate_true_only_on_200(credential):
    session = FakeHttpSession(validate_status=200)
    assert await _client(session).validate(credential) is True
    assert session.gets[0]["headers"] == {"Authorization": "OAuth abc"}

    for status in (401, 500):
        session = FakeHttpSession(validate_status=status)
        assert await _client(session).validate(credential) is False


@pytest.mark.asyncio()
async def test_validate_network_error(credential):
    session = FakeHttpSession(get_error=TimeoutError())
    with pytest.raises(TransportError):
        await _client(session).validate(credential)


def test_credential_from_response_and_password():
    cred = Credential.from_response({"access_token": "xyz", "expires_in": "60"})
    assert cred.expires_in_seconds == 60
    assert cred.token_type == ""
    assert cred.irc_password == "oauth:xyz"
    assert Credential("oauth:xyz", "bearer", 1).irc_password == "oauth:xyz"


def test_credential_repr_hides_token():
    assert "abc" not in repr(Credential("abc", "bearer", 3600))
