"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite repositories)
- Spotify (provider client over httpx)
"""

from classroom_jukebox.infrastructure.persistence.database import Database
from classroom_jukebox.infrastructure.spotify.client import SpotifyProviderClient

__all__ = [
    "Database",
    "SpotifyProviderClient",
]
