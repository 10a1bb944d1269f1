"""Port interface for a connected display or browser client."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ClientConnection(Protocol):
    """Anything that can push a named event with a JSON payload to one client."""

    async def send(self, event: str, payload: Any) -> None: ...
