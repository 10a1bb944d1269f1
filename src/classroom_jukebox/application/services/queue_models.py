"""DTOs for the queue application service."""

from __future__ import annotations

from pydantic import BaseModel

from ...domain.queue.entities import QueueState, Track
from ...domain.shared.types import NonNegativeInt


class SkipResult(BaseModel):
    skipped: bool
    track: Track
    shields_remaining: NonNegativeInt = 0
    state: QueueState | None = None

    @property
    def blocked(self) -> bool:
        return not self.skipped
