from __future__ import annotations

from typing import Protocol

from lending_chat.application.dto.identity import TokenClaims


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> TokenClaims:
        """Return the token's claims or raise InvalidCredentialError."""
        ...


class TokenIssuer(Protocol):
    def issue(self, subject_email: str, subject_id: int) -> str: ...
