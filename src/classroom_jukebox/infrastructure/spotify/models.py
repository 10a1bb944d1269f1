"""Pydantic models for Spotify Web API payloads.

These are infrastructure-specific models for parsing player responses and
converting them to queue domain entities.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from classroom_jukebox.domain.queue.entities import NowPlaying, Track
from classroom_jukebox.domain.shared.types import NonEmptyStr, NonNegativeInt, PositiveInt


class SpotifyImage(BaseModel):
    url: NonEmptyStr


class SpotifyArtist(BaseModel):
    name: str = ""


class SpotifyAlbum(BaseModel):
    images: list[SpotifyImage] = Field(default_factory=list)


class SpotifyShow(BaseModel):
    name: str = ""
    images: list[SpotifyImage] = Field(default_factory=list)


class SpotifyItem(BaseModel):
    """A track or podcast episode object."""

    uri: NonEmptyStr
    name: str = ""
    artists: list[SpotifyArtist] = Field(default_factory=list)
    duration_ms: NonNegativeInt = 0
    explicit: bool = False
    album: SpotifyAlbum | None = None
    show: SpotifyShow | None = None
    images: list[SpotifyImage] = Field(default_factory=list)

    @property
    def image_url(self) -> str | None:
        for images in (
            self.album.images if self.album else [],
            self.images,
            self.show.images if self.show else [],
        ):
            if images:
                return images[0].url
        return None

    def to_domain(self) -> Track:
        artists = tuple(a.name for a in self.artists if a.name)
        if not artists and self.show and self.show.name:
            artists = (self.show.name,)
        return Track(
            uri=self.uri,
            name=self.name or self.uri,
            artists=artists,
            duration_ms=self.duration_ms,
            image_url=self.image_url,
            explicit=self.explicit,
        )


class SpotifyCurrentlyPlaying(BaseModel):
    """Body of ``GET /me/player/currently-playing``."""

    is_playing: bool = False
    progress_ms: NonNegativeInt | None = None
    item: SpotifyItem | None = None

    def to_domain(self) -> NowPlaying | None:
        if self.item is None:
            return None
        return NowPlaying(
            track=self.item.to_domain(),
            is_playing=self.is_playing,
            progress_ms=self.progress_ms or 0,
        )


class SpotifyQueueResponse(BaseModel):
    """Body of ``GET /me/player/queue``."""

    currently_playing: SpotifyItem | None = None
    queue: list[SpotifyItem] = Field(default_factory=list)

    def to_domain_list(self) -> list[Track]:
        return [item.to_domain() for item in self.queue]


class SpotifyTokenResponse(BaseModel):
    """Body of the accounts service token endpoint."""

    access_token: NonEmptyStr
    token_type: str = "Bearer"
    expires_in: PositiveInt = 3600
    refresh_token: str | None = None
