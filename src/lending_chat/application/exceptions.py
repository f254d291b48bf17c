from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    code = "app_error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class UnauthenticatedError(AppError):
    code = "unauthenticated"


class InvalidCredentialError(UnauthenticatedError):
    """Malformed, expired or badly signed credential."""

    code = "invalid_credential"


class UnknownSubjectError(UnauthenticatedError):
    """Credential is valid but its subject does not resolve to a known identity."""

    code = "unknown_subject"


class NotFoundError(AppError):
    code = "not_found"


class ForbiddenError(AppError):
    code = "forbidden"


class ConflictError(AppError):
    code = "conflict"


class InvalidTransitionError(ConflictError):
    code = "invalid_transition"


class TargetUnavailableError(ConflictError):
    code = "target_unavailable"


class DuplicateOpenRequestError(ConflictError):
    code = "duplicate_open_request"


class SelfRequestError(ConflictError):
    code = "self_reference"


class ChatNotActiveError(ConflictError):
    code = "chat_not_active"


class ValidationError(AppError):
    code = "validation_error"


class EmptyMessageError(ValidationError):
    code = "empty_message"
