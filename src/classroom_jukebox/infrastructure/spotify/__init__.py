"""Spotify Web API adapter for the provider client port."""

from classroom_jukebox.infrastructure.spotify.client import SpotifyProviderClient

__all__ = [
    "SpotifyProviderClient",
]
