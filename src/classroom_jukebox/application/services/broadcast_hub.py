"""Fan-out of client events to every connected browser and display."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...domain.shared.events import ClientEvent, QueueUpdate, UserCount
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.queue.entities import QueueState
    from ..interfaces.client_connection import ClientConnection

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _ConnectedClient:
    user_id: str
    connection: ClientConnection


class BroadcastHub:
    """Registry of connected clients plus the last broadcast queue state.

    Sends are concurrent. A client whose send raises is logged and dropped;
    it never blocks delivery to the others.
    """

    def __init__(self) -> None:
        self._clients: dict[str, _ConnectedClient] = {}
        self._last_state: QueueState | None = None

    @property
    def last_state(self) -> QueueState | None:
        return self._last_state

    @property
    def client_count(self) -> int:
        return len(self._clients)

    @property
    def online_count(self) -> int:
        """Distinct users with at least one open connection."""
        return len({client.user_id for client in self._clients.values()})

    def is_connected(self, client_id: str) -> bool:
        return client_id in self._clients

    async def connect(self, client_id: str, user_id: str, connection: ClientConnection) -> None:
        self._clients[client_id] = _ConnectedClient(user_id=user_id, connection=connection)
        logger.info(
            LogTemplates.BROADCAST_CLIENT_CONNECTED, client_id, user_id, self.online_count
        )

        initial = (
            QueueUpdate.from_state(self._last_state)
            if self._last_state is not None
            else QueueUpdate(queue=[])
        )
        await self.send_to(client_id, initial)
        await self.publish(UserCount(count=self.online_count))

    async def disconnect(self, client_id: str) -> None:
        if self._clients.pop(client_id, None) is None:
            return
        logger.info(LogTemplates.BROADCAST_CLIENT_DISCONNECTED, client_id, self.online_count)
        await self.publish(UserCount(count=self.online_count))

    async def publish_state(self, state: QueueState) -> None:
        """Cache ``state`` and broadcast it as one ``queueUpdate``."""
        self._last_state = state
        await self.publish(QueueUpdate.from_state(state))

    async def publish(self, event: ClientEvent) -> int:
        """Send ``event`` to every connected client.

        Returns:
            The number of clients that received it.
        """
        if not self._clients:
            return 0

        payload = event.payload()
        targets = list(self._clients.items())
        failed: list[str] = []

        async def safe_send(client_id: str, client: _ConnectedClient) -> None:
            try:
                await client.connection.send(event.event_name, payload)
            except Exception as e:
                logger.warning(LogTemplates.BROADCAST_SEND_FAILED, event.event_name, client_id, e)
                failed.append(client_id)

        async with asyncio.TaskGroup() as tg:
            for client_id, client in targets:
                tg.create_task(safe_send(client_id, client))

        logger.debug(LogTemplates.BROADCAST_PUBLISHED, event.event_name, len(targets), len(failed))

        if failed:
            before = self.online_count
            for client_id in failed:
                self._clients.pop(client_id, None)
            if self.online_count != before:
                await self.publish(UserCount(count=self.online_count))

        return len(targets) - len(failed)

    async def send_to(self, client_id: str, event: ClientEvent) -> bool:
        """Send ``event`` to a single client. Unknown ids are ignored.

        Returns:
            True if the client received it.
        """
        client = self._clients.get(client_id)
        if client is None:
            return False
        try:
            await client.connection.send(event.event_name, event.payload())
        except Exception as e:
            logger.warning(LogTemplates.BROADCAST_SEND_FAILED, event.event_name, client_id, e)
            self._clients.pop(client_id, None)
            return False
        return True
