"""Errors raised by jukebox operations.

Every error carries a user-facing ``message`` that the transport layer can
hand straight to the requesting client (for example as ``banVoteError``) and
a stable ``code`` for logs. Provider failures extend ``DomainError`` in the
provider port and are the only retryable ones.
"""

from __future__ import annotations


class DomainError(Exception):
    """A request the jukebox refused or could not carry out."""

    retryable = False

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Malformed client input, such as a track URI that is not a Spotify track."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class EntityNotFoundError(DomainError):
    """A metadata row or ban vote that the request refers to is gone."""

    def __init__(self, entity_type: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"No {entity_type} found for '{identifier}'"
        super().__init__(msg, code="ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class BusinessRuleViolationError(DomainError):
    """A classroom rule refused the request.

    ``rule`` names the rule in snake_case (``explicit_track``, ``track_banned``,
    ``vote_already_active``, ``already_voted`` ...) so callers can branch on it
    without parsing the message.
    """

    def __init__(self, rule: str, message: str | None = None) -> None:
        msg = message or f"Request refused by the {rule.replace('_', ' ')} rule"
        super().__init__(msg, code="BUSINESS_RULE_VIOLATION")
        self.rule = rule


class InvalidOperationError(DomainError):
    """The playback state does not allow the request, e.g. a skip while nothing plays."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot {operation} while the player is {current_state}"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state
