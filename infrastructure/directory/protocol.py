"""Protocols for the user directory and the downstream token store.

IdentityResolver: consulted before a code is issued.
TokenSink:        receives every minted reset token.

Both raise DependencyError when the collaborator cannot answer; "does not
exist" is a normal ``False``, not an error.
"""

from typing import Protocol


class IdentityResolver(Protocol):
    async def exists(self, email: str) -> bool: ...


class TokenSink(Protocol):
    async def store(self, email: str, token: str, jti: str) -> None: ...
