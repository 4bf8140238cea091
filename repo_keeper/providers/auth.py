"""Credential selection for OneDev clients."""

from dataclasses import dataclass

from repo_keeper.config.settings import OneDevConnectionConfig
from repo_keeper.enums import AuthMode


@dataclass(frozen=True)
class Credentials:
    """Resolved authentication material for exactly one AuthMode."""

    mode: AuthMode
    token: str = ""
    username: str = ""
    password: str = ""

    def __repr__(self) -> str:
        return f"Credentials(mode={self.mode.value!r}, username={self.username!r})"


def effective_password(config: OneDevConnectionConfig) -> str:
    """Return the configured password, falling back to the token.

    Raises:
        ConfigurationError: If a configured token file cannot be read
    """
    if config.password is not None and config.password.get_secret_value():
        return config.password.get_secret_value()
    return config.get_token()


def select_credentials(config: OneDevConnectionConfig) -> Credentials:
    """Pick the authentication mode for a source or destination.

    Token (or token file) wins over username/password, which wins over
    anonymous access.

    Raises:
        ConfigurationError: If a configured token file cannot be read
    """
    token = config.get_token()
    if token:
        return Credentials(mode=AuthMode.TOKEN, token=token, username=config.username)

    password = effective_password(config)
    if password:
        return Credentials(mode=AuthMode.BASIC, username=config.username, password=password)

    return Credentials(mode=AuthMode.ANONYMOUS)
