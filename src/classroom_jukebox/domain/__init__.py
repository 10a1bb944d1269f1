"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, exceptions, messages and client events
- queue/: Track metadata and provider queue matching rules
- voting/: Ban vote state and voting rules
"""

from classroom_jukebox.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
