from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlsplit

import aiohttp
import pytest

from codecore_bot.auth_token.strategies import (
    AuthorizationCodeStrategy,
    ClientCredentialsStrategy,
    build_strategy,
    new_state,
)
from codecore_bot.config.model import BotConfig
from codecore_bot.errors.internal import StateMismatchError
from tests.fixtures.sample_configs import AUTH_CODE_CONFIG


def _client() -> MagicMock:
    client = MagicMock()
    client.exchange_authorization_code = AsyncMock(return_value="credential")
    client.exchange_client_credentials = AsyncMock(return_value="credential")
    return client


def _browser(state_override: str | None = None):
    """Follow the authorization URL the way the provider would: redirect with a code."""
    seen: list[str] = []

    async def handler(url: str) -> None:
        seen.append(url)
        query = parse_qs(urlsplit(url).query)
        params = {"code": "thecode", "state": state_override or query["state"][0]}
        async with aiohttp.ClientSession() as http:
            async with http.get(query["redirect_uri"][0], params=params) as resp:
                await resp.read()

    return handler, seen


def test_new_state_is_random():
    states = {new_state() for _ in range(10)}
    assert len(states) == 10
    assert all(len(s) >= 16 for s in states)


def test_build_strategy_defaults_to_client_credentials(bot_config):
    strategy = build_strategy(bot_config)
    assert isinstance(strategy, ClientCredentialsStrategy)
    assert strategy.grant_type == "client_credentials"


def test_build_strategy_authorization_code():
    config = BotConfig.model_validate(AUTH_CODE_CONFIG)
    strategy = build_strategy(config)
    assert isinstance(strategy, AuthorizationCodeStrategy)
    assert strategy.host == "localhost"
    assert strategy.port == 3000
    assert strategy.scope == "chat:read chat:edit"


def test_authorize_url_parameters():
    strategy = AuthorizationCodeStrategy("cid", scope="chat:read chat:edit")
    url = strategy.build_authorize_url("st4te", "http://localhost:3000/")
    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://id.twitch.tv/oauth2/authorize"
    query = parse_qs(parts.query)
    assert query == {
        "response_type": ["code"],
        "client_id": ["cid"],
        "redirect_uri": ["http://localhost:3000/"],
        "scope": ["chat:read chat:edit"],
        "state": ["st4te"],
    }


@pytest.mark.asyncio()
async def test_client_credentials_acquire():
    client = _client()
    strategy = ClientCredentialsStrategy("client_credentials", scope=None)
    assert await strategy.acquire(client) == "credential"
    client.exchange_client_credentials.assert_awaited_once_with("client_credentials", None)


@pytest.mark.asyncio()
async def test_authorization_code_flow_end_to_end():
    client = _client()
    handler, seen = _browser()
    strategy = AuthorizationCodeStrategy(
        "cid", host="127.0.0.1", port=0, url_handler=handler, timeout=5
    )
    assert await strategy.acquire(client) == "credential"
    assert len(seen) == 1
    redirect_uri = parse_qs(urlsplit(seen[0]).query)["redirect_uri"][0]
    client.exchange_authorization_code.assert_awaited_once_with("thecode", redirect_uri)


@pytest.mark.asyncio()
async def test_state_mismatch_never_reaches_exchange():
    client = _client()
    handler, _ = _browser(state_override="forged")
    strategy = AuthorizationCodeStrategy(
        "cid", host="127.0.0.1", port=0, url_handler=handler, timeout=5
    )
    with pytest.raises(StateMismatchError):
        await strategy.acquire(client)
    client.exchange_authorization_code.assert_not_awaited()


@pytest.mark.asyncio()
async def test_each_attempt_uses_fresh_state():
    client = _client()
    states: list[str] = []

    def state_factory() -> str:
        states.append(f"state-{len(states)}")
        return states[-1]

    handler, seen = _browser()
    strategy = AuthorizationCodeStrategy(
        "cid", host="127.0.0.1", port=0, url_handler=handler, timeout=5, state_factory=state_factory
    )
    await strategy.acquire(client)
    await strategy.acquire(client)
    assert states == ["state-0", "state-1"]
    assert [parse_qs(urlsplit(u).query)["state"][0] for u in seen] == states
