"""Integration test fixtures.

Provides a fully wired GatewayState (real cache, quota tracker and cipher on a
fake clock) and an httpx client talking to the Starlette app in-process.
Upstream HTTP is mocked per test with respx.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from newsgate.server import build_state, create_app

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from newsgate.config import Settings
    from newsgate.state import GatewayState
    from tests.conftest import FakeClock


@pytest.fixture()
async def app_state(settings: Settings, clock: FakeClock) -> AsyncGenerator[GatewayState, None]:
    state = build_state(settings, clock=clock)
    yield state
    assert state.http_client is not None
    await state.http_client.aclose()


@pytest.fixture()
async def client(app_state: GatewayState) -> AsyncGenerator[httpx.AsyncClient, None]:
    app = create_app(app_state)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as http:
        yield http
