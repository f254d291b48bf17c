from __future__ import annotations

import logging
from datetime import datetime, timezone

import jwt

from lending_chat.application.dto.identity import TokenClaims
from lending_chat.application.exceptions import InvalidCredentialError

logger = logging.getLogger(__name__)


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        *,
        issuer: str | None = None,
        leeway: int = 0,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._leeway = leeway

    async def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                leeway=self._leeway,
                options={"require": ["exp", "sub", "userId"]},
            )
            subject_id = int(payload["userId"])
        except jwt.PyJWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise InvalidCredentialError(str(exc)) from exc
        except (TypeError, ValueError) as exc:
            raise InvalidCredentialError("userId claim must be numeric") from exc

        return TokenClaims(
            subject_id=subject_id,
            subject_email=str(payload["sub"]),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
