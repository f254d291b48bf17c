from __future__ import annotations

from datetime import timedelta

import jwt

from lending_chat.application.ports.clock import Clock, SystemClock


class HS256TokenIssuer:
    """Issue HS256 bearer tokens: ``sub`` is the email, ``userId`` the numeric subject."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        *,
        issuer: str | None = None,
        expires_in: int = 86400,
        clock: Clock | None = None,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._expires_in = timedelta(seconds=expires_in)
        self._clock = clock or SystemClock()

    def issue(self, subject_email: str, subject_id: int) -> str:
        now = self._clock.now()
        claims = {
            "sub": subject_email,
            "userId": subject_id,
            "iat": now,
            "exp": now + self._expires_in,
        }
        if self._issuer:
            claims["iss"] = self._issuer
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)
