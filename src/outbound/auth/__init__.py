"""
Authenticators for outbound requests.
"""

from .authenticators import (
    Authenticator,
    TokenAuthenticator,
    BasicAuthenticator,
    QueryAuthenticator,
    HeaderAuthenticator,
    MultiAuthenticator,
)

__all__ = [
    "Authenticator",
    "TokenAuthenticator",
    "BasicAuthenticator",
    "QueryAuthenticator",
    "HeaderAuthenticator",
    "MultiAuthenticator",
]
