"""Fixed-interval queue reconciliation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import SyncSettings
    from .queue_reconciler import QueueReconciler

logger = logging.getLogger(__name__)


class SyncJob:
    def __init__(self, *, reconciler: QueueReconciler, settings: SyncSettings) -> None:
        self._reconciler = reconciler
        self._settings = settings
        self._running = False
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._running:
            logger.warning(LogTemplates.SYNC_ALREADY_RUNNING)
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(LogTemplates.SYNC_STARTED, self._settings.interval_seconds)

    async def stop(self) -> None:
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info(LogTemplates.SYNC_STOPPED)

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self._reconciler.reconcile()
            except Exception:
                logger.exception(LogTemplates.SYNC_LOOP_ERROR)

            try:
                await asyncio.sleep(self._settings.interval_seconds)
            except asyncio.CancelledError:
                break

    @property
    def is_running(self) -> bool:
        return self._running
