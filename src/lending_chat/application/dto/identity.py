from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Identity:
    """Authenticated caller, issued once by the authentication step."""

    subject_id: int
    display_name: str


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Claims extracted from a verified bearer credential."""

    subject_id: int
    subject_email: str
    expires_at: datetime
