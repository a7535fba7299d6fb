from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants import (
    DEFAULT_MESSAGE_INTERVAL_SECONDS,
    IRC_DEFAULT_PORT,
    IRC_DEFAULT_SERVER,
    TWITCH_AUTHORIZE_URL,
    TWITCH_TOKEN_URL,
    TWITCH_VALIDATE_URL,
)

AUTHORIZATION_CODE_GRANT = "authorization_code"
CLIENT_CREDENTIALS_GRANT = "client_credentials"


def _normalize_channel(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("channel must be a string")
    channel = value.strip().lstrip("#").lower()
    if not channel:
        raise ValueError("channel must not be empty")
    return channel


class BotConfig(BaseModel):
    """Bot settings and application credentials.

    Field aliases match the keys of the JSON credential file, so a file such as
    ``{"ClientID": "...", "Secret": "...", "ChannelName": "mychannel"}`` loads
    directly. Python attribute names are accepted as well.

    Attributes:
        client_id: Twitch application client ID.
        client_secret: Twitch application client secret.
        token_url: Token endpoint used for every exchange.
        permissions: Grant type; ``authorization_code`` selects the browser
            callback flow, anything else is sent as a client-credentials style
            ``grant_type``.
        scope: Space separated scopes requested during authorization.
        listen_url: Host the local callback listener binds to.
        listen_port: Port the local callback listener binds to.
        channel_name: Channel to join (no leading ``#``).
        bot_name: Nickname announced on the chat server.
        channel_owner: Identity allowed to issue lifecycle commands.
        server_addr: Chat server host.
        port: Chat server port.
        message_interval: Minimum seconds between outbound chat messages.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    client_id: str = Field(alias="ClientID", min_length=1)
    client_secret: str = Field(default="", alias="Secret")
    token_url: str = Field(default=TWITCH_TOKEN_URL, alias="TokenURL")
    permissions: str = Field(default=CLIENT_CREDENTIALS_GRANT, alias="Permissions")
    scope: str = Field(default="chat:read chat:edit", alias="Scope")
    listen_url: str = Field(default="localhost", alias="ListenURL")
    listen_port: int = Field(default=3000, alias="ListenPort", ge=0, le=65535)
    authorize_url: str = Field(default=TWITCH_AUTHORIZE_URL, alias="AuthorizeURL")
    validate_url: str = Field(default=TWITCH_VALIDATE_URL, alias="ValidateURL")

    channel_name: str = Field(alias="ChannelName")
    bot_name: str = Field(alias="BotName", min_length=1)
    channel_owner: str | None = Field(default=None, alias="ChannelOwner")
    server_addr: str = Field(default=IRC_DEFAULT_SERVER, alias="ServerAddr")
    port: int = Field(default=IRC_DEFAULT_PORT, alias="Port", gt=0, le=65535)
    message_interval: float = Field(
        default=DEFAULT_MESSAGE_INTERVAL_SECONDS, alias="MsgRate", gt=0
    )

    @field_validator("channel_name", mode="before")
    @classmethod
    def validate_channel(cls, v: Any) -> str:
        """Strip whitespace and a leading '#', lower-case the name."""
        return _normalize_channel(v)

    @field_validator("listen_url", mode="before")
    @classmethod
    def validate_listen_url(cls, v: Any) -> str:
        """Accept either a bare host or a full URL such as http://localhost:3000."""
        host = str(v or "").strip()
        if "://" in host:
            host = urlparse(host).hostname or ""
        return host or "localhost"

    @field_validator("permissions", mode="before")
    @classmethod
    def validate_permissions(cls, v: Any) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            return CLIENT_CREDENTIALS_GRANT
        return str(v).strip()

    @model_validator(mode="after")
    def default_owner(self) -> BotConfig:
        """The channel owner defaults to the channel name itself."""
        if not self.channel_owner:
            self.channel_owner = self.channel_name
        return self

    @property
    def uses_authorization_code(self) -> bool:
        return self.permissions == AUTHORIZATION_CODE_GRANT

    def redacted(self) -> dict[str, Any]:
        """Return a dict safe to log (secret masked)."""
        data = self.model_dump()
        if data.get("client_secret"):
            data["client_secret"] = "***"
        return data
