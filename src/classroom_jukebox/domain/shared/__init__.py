"""
Shared Domain Kernel

Contains exceptions and helpers shared across all bounded contexts.
"""

from classroom_jukebox.domain.shared.exceptions import (
    BusinessRuleViolationError,
    DomainError,
    EntityNotFoundError,
    InvalidOperationError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "EntityNotFoundError",
    "BusinessRuleViolationError",
    "InvalidOperationError",
]
