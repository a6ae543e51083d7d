"""Handler for ``GET /rate-limit``: quota diagnostics for every bucket."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from newsgate.state import GatewayState


async def handle(state: GatewayState) -> dict:
    snapshots = state.coordinator.diagnostics()
    return {name: snapshot.model_dump(mode="json") for name, snapshot in snapshots.items()}
