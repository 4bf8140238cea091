"""Enumerations for repo-keeper."""

from enum import Enum


class AuthMode(str, Enum):
    """How a client authenticates against a hosting backend.

    Selection order when building a client:
    - token: explicit bearer token or token file
    - basic: username and password
    - anonymous: no credentials at all
    """

    TOKEN = "token"
    BASIC = "basic"
    ANONYMOUS = "anonymous"

    def __str__(self) -> str:
        return self.value
