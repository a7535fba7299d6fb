"""OAuth token acquisition: exchange client, callback listener, strategies."""

from .callback_listener import OAuthCallbackListener
from .client import TokenExchangeClient
from .strategies import (
    AuthorizationCodeStrategy,
    ClientCredentialsStrategy,
    TokenAcquisitionStrategy,
    build_strategy,
    new_state,
)
from .types import Credential

__all__ = [
    "Credential",
    "TokenExchangeClient",
    "OAuthCallbackListener",
    "TokenAcquisitionStrategy",
    "ClientCredentialsStrategy",
    "AuthorizationCodeStrategy",
    "build_strategy",
    "new_state",
]
