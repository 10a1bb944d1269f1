"""
Queue Bounded Context

Domain logic for merging provider queue snapshots with local enqueue metadata.
"""

from classroom_jukebox.domain.queue.entities import (
    CurrentTrackView,
    MetadataEntry,
    NowPlaying,
    QueueItem,
    QueueState,
    Track,
)
from classroom_jukebox.domain.queue.repository import MetadataRepository
from classroom_jukebox.domain.queue.services import MetadataMatcher, QueueDomainService

__all__ = [
    # Entities
    "Track",
    "MetadataEntry",
    "NowPlaying",
    "QueueItem",
    "CurrentTrackView",
    "QueueState",
    # Repository
    "MetadataRepository",
    # Services
    "MetadataMatcher",
    "QueueDomainService",
]
