"""Per-connection identity store.

A ``ConnectionSession`` is owned by exactly one connection handler and is
only mutated from that handler's read loop (single writer). Frame handlers
get the identity through ``restamp()``; nothing is ever read from the frame
itself or from ambient state.

When connections sit behind infrastructure without frame-to-connection
affinity, the identity is also mirrored into the connection's attribute bag
so a handler that lost the live association can recover it.
"""
from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from lending_chat.application.dto.identity import Identity
from lending_chat.application.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)

IDENTITY_ATTRIBUTE = "lending_chat.identity"


class ConnectionState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"
    REJECTED = "rejected"


_TERMINAL = frozenset({ConnectionState.CLOSED, ConnectionState.REJECTED})


class ConnectionSession:
    def __init__(
        self,
        connection_id: str,
        attributes: MutableMapping[str, Any] | None = None,
        *,
        mirror_identity: bool = True,
    ) -> None:
        self.connection_id = connection_id
        self.attributes: MutableMapping[str, Any] = attributes if attributes is not None else {}
        self._mirror_identity = mirror_identity
        self._identity: Identity | None = None
        self._state = ConnectionState.UNAUTHENTICATED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in _TERMINAL

    def authenticate(self, identity: Identity) -> Identity:
        """Bind the identity once. Repeating it on a live session keeps the first one."""
        if self.is_terminal:
            raise UnauthenticatedError("Connection is closed")
        if self._state == ConnectionState.AUTHENTICATED:
            return self.restamp()
        self._identity = identity
        if self._mirror_identity:
            self.attributes[IDENTITY_ATTRIBUTE] = identity
        self._state = ConnectionState.AUTHENTICATED
        logger.debug("Connection %s authenticated as %s", self.connection_id, identity.subject_id)
        return identity

    def restamp(self) -> Identity:
        """Return the identity every non-terminal frame is processed under."""
        if self.is_terminal:
            raise UnauthenticatedError("Connection is closed")

        identity = self._identity
        if identity is None:
            mirrored = self.attributes.get(IDENTITY_ATTRIBUTE)
            if isinstance(mirrored, Identity):
                logger.info(
                    "Connection %s: identity recovered from attribute bag",
                    self.connection_id,
                )
                identity = mirrored
                self._identity = mirrored
                self._state = ConnectionState.AUTHENTICATED

        if identity is None:
            raise UnauthenticatedError("Connection is not authenticated")
        return identity

    def reject(self) -> None:
        self._drop(ConnectionState.REJECTED)

    def close(self) -> None:
        self._drop(ConnectionState.CLOSED)

    def _drop(self, state: ConnectionState) -> None:
        self._identity = None
        self.attributes.pop(IDENTITY_ATTRIBUTE, None)
        self._state = state


@dataclass(frozen=True, slots=True)
class FrameContext:
    """Processing context for one inbound frame, stamped server-side."""

    connection_id: str
    identity: Identity
