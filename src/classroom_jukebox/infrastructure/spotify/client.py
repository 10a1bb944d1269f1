"""Spotify Web API provider client with refresh-token auth and singleflight refresh."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from classroom_jukebox.application.interfaces.provider_client import (
    MalformedPayloadError,
    NoActiveDeviceError,
    ProviderAuthError,
    ProviderClient,
    ProviderRateLimitedError,
    ProviderUnavailableError,
)
from classroom_jukebox.config.settings import ProviderSettings
from classroom_jukebox.domain.queue.entities import NowPlaying, Track
from classroom_jukebox.domain.shared.constants import HTTPHeaders, ProviderEndpoints
from classroom_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from classroom_jukebox.infrastructure.spotify.models import (
    SpotifyCurrentlyPlaying,
    SpotifyQueueResponse,
    SpotifyTokenResponse,
)

logger = logging.getLogger(__name__)


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


def _raise_for_status(response: httpx.Response) -> None:
    status = response.status_code
    if status < 400:
        return
    # The token endpoint answers 400 invalid_grant for a revoked refresh token.
    if status == 400 and response.request.url.path.endswith(ProviderEndpoints.TOKEN):
        raise ProviderAuthError()
    if status in (401, 403):
        raise ProviderAuthError()
    if status == 404:
        raise NoActiveDeviceError()
    if status == 429:
        raise ProviderRateLimitedError(
            retry_after=_parse_retry_after(response.headers.get(HTTPHeaders.RETRY_AFTER))
        )
    raise ProviderUnavailableError(f"HTTP {status}")


def _parse(model: type[BaseModel], response: httpx.Response) -> Any:
    try:
        return model.model_validate(response.json())
    except (ValueError, PydanticValidationError) as e:
        raise MalformedPayloadError(str(e)) from e


class SpotifyProviderClient(ProviderClient):
    def __init__(
        self,
        settings: ProviderSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or ProviderSettings()
        self._transport = transport
        self._clock = clock
        self._client: httpx.AsyncClient | None = None

        self._access_token: str | None = None
        self._token_expires_at: float = 0.0
        self._refresh_token = self._settings.refresh_token.get_secret_value()
        self._inflight_refresh: asyncio.Future[str] | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client

        if not self._settings.has_credentials:
            raise ProviderAuthError(ErrorMessages.PROVIDER_CREDENTIALS_REQUIRED)

        self._client = httpx.AsyncClient(
            base_url=self._settings.api_base_url,
            timeout=self._settings.request_timeout_s,
            transport=self._transport,
        )
        return self._client

    # === Auth ===

    async def _get_access_token(self) -> str:
        if self._access_token is not None and self._clock() < self._token_expires_at:
            return self._access_token

        if self._inflight_refresh is not None:
            return await self._inflight_refresh

        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._inflight_refresh = future
        try:
            token = await self._refresh_access_token()
            future.set_result(token)
            return token
        except Exception as e:
            future.set_exception(e)
            # Nobody may be waiting on the future; mark it retrieved.
            future.exception()
            raise
        finally:
            self._inflight_refresh = None

    async def _refresh_access_token(self) -> str:
        client = self._get_client()
        try:
            response = await client.post(
                self._settings.accounts_url.rstrip("/") + ProviderEndpoints.TOKEN,
                data={"grant_type": "refresh_token", "refresh_token": self._refresh_token},
                auth=(self._settings.client_id, self._settings.client_secret.get_secret_value()),
            )
        except httpx.RequestError as e:
            logger.warning(LogTemplates.PROVIDER_TOKEN_REFRESH_FAILED, e)
            raise ProviderUnavailableError(str(e) or type(e).__name__) from e

        if response.is_error:
            logger.warning(
                LogTemplates.PROVIDER_TOKEN_REFRESH_FAILED, f"HTTP {response.status_code}"
            )
            _raise_for_status(response)

        token: SpotifyTokenResponse = _parse(SpotifyTokenResponse, response)
        self._access_token = token.access_token
        self._token_expires_at = (
            self._clock() + token.expires_in - self._settings.token_refresh_margin_s
        )
        if token.refresh_token:
            self._refresh_token = token.refresh_token

        logger.info(LogTemplates.PROVIDER_TOKEN_REFRESHED, token.expires_in)
        return token.access_token

    # === Requests ===

    async def _request(
        self, method: str, path: str, params: dict[str, str] | None = None
    ) -> httpx.Response:
        access_token = await self._get_access_token()
        client = self._get_client()
        try:
            response = await client.request(
                method,
                path,
                params=params,
                headers={HTTPHeaders.AUTHORIZATION: f"Bearer {access_token}"},
            )
        except httpx.RequestError as e:
            raise ProviderUnavailableError(str(e) or type(e).__name__) from e

        logger.debug(LogTemplates.PROVIDER_REQUEST, method, path, response.status_code)

        if response.status_code == 401:
            # Token revoked or expired early; force a refresh on the next call.
            self._access_token = None
        _raise_for_status(response)
        return response

    async def get_current_track(self) -> NowPlaying | None:
        response = await self._request("GET", ProviderEndpoints.CURRENTLY_PLAYING)
        if response.status_code == 204 or not response.content:
            return None
        payload: SpotifyCurrentlyPlaying = _parse(SpotifyCurrentlyPlaying, response)
        try:
            return payload.to_domain()
        except PydanticValidationError as e:
            raise MalformedPayloadError(str(e)) from e

    async def get_queue_snapshot(self) -> list[Track]:
        response = await self._request("GET", ProviderEndpoints.QUEUE)
        if response.status_code == 204 or not response.content:
            return []
        payload: SpotifyQueueResponse = _parse(SpotifyQueueResponse, response)
        try:
            return payload.to_domain_list()
        except PydanticValidationError as e:
            raise MalformedPayloadError(str(e)) from e

    async def enqueue(self, track_uri: str) -> None:
        await self._request("POST", ProviderEndpoints.QUEUE, params={"uri": track_uri})

    async def skip_to_next(self) -> None:
        await self._request("POST", ProviderEndpoints.SKIP_NEXT)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
