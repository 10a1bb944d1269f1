"""Port interface for the streaming provider that owns the playback queue."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from classroom_jukebox.domain.shared.exceptions import DomainError
from classroom_jukebox.domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from ...domain.queue.entities import NowPlaying, Track


class ProviderError(DomainError):
    """Base class for provider failures. All of them are worth retrying."""

    retryable = True

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message, code=code or "PROVIDER_ERROR")


class ProviderAuthError(ProviderError):
    def __init__(self, message: str = ErrorMessages.PROVIDER_AUTH_FAILED) -> None:
        super().__init__(message, code="PROVIDER_AUTH")


class ProviderRateLimitedError(ProviderError):
    def __init__(
        self, retry_after: float | None = None, message: str = ErrorMessages.PROVIDER_RATE_LIMITED
    ) -> None:
        super().__init__(message, code="PROVIDER_RATE_LIMITED")
        self.retry_after = retry_after


class NoActiveDeviceError(ProviderError):
    def __init__(self, message: str = ErrorMessages.PROVIDER_NO_ACTIVE_DEVICE) -> None:
        super().__init__(message, code="NO_ACTIVE_DEVICE")


class ProviderUnavailableError(ProviderError):
    """Network failure, timeout, or a 5xx from the provider."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            ErrorMessages.PROVIDER_UNAVAILABLE.format(detail=detail), code="PROVIDER_UNAVAILABLE"
        )
        self.detail = detail


class MalformedPayloadError(ProviderError):
    def __init__(self, detail: str) -> None:
        super().__init__(
            ErrorMessages.PROVIDER_MALFORMED_PAYLOAD.format(detail=detail),
            code="PROVIDER_MALFORMED_PAYLOAD",
        )
        self.detail = detail


class ProviderClient(ABC):
    """Interface to the provider's player: read snapshots, enqueue, skip."""

    @abstractmethod
    async def get_current_track(self) -> NowPlaying | None:
        """Return the playing item, or None when nothing is playing."""
        ...

    @abstractmethod
    async def get_queue_snapshot(self) -> list[Track]:
        """Return the upcoming queue in provider order. URIs may repeat."""
        ...

    @abstractmethod
    async def enqueue(self, track_uri: str) -> None:
        """Append a track to the end of the provider queue."""
        ...

    @abstractmethod
    async def skip_to_next(self) -> None:
        """Advance playback to the next queued item."""
        ...

    @abstractmethod
    async def aclose(self) -> None:
        """Release network resources."""
        ...
