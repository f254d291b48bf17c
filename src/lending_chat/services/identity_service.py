from __future__ import annotations

import logging

from lending_chat.application.dto.identity import Identity
from lending_chat.application.exceptions import UnknownSubjectError
from lending_chat.application.ports.auth import TokenVerifier
from lending_chat.application.repositories.user import UserReader

logger = logging.getLogger(__name__)


async def authenticate(token: str, verifier: TokenVerifier, users: UserReader) -> Identity:
    """Verify a bearer credential and resolve its subject.

    Raises InvalidCredentialError for malformed, expired or badly signed
    tokens and UnknownSubjectError when the subject is not a known user, or
    the token's subject email no longer matches the stored one.
    """
    claims = await verifier.verify(token)
    user = await users.get_by_id(claims.subject_id)
    if user is None or user.email != claims.subject_email:
        logger.info("Token subject %s does not resolve to a user", claims.subject_id)
        raise UnknownSubjectError(f"Unknown subject {claims.subject_id}")
    return Identity(subject_id=user.id, display_name=user.name)
