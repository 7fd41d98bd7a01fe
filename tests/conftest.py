import os
from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("ENV", "test")
os.environ.setdefault("CORS_ORIGINS", "*")

UPSTREAM_URL = "https://backend.saweria.test"


class FakeSaweria:
    """Stands in for the platform: one canned handler per test, every request recorded."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(500)

    def reply(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler

    def reply_json(self, payload, status_code: int = 200) -> None:
        self.reply(lambda request: httpx.Response(status_code, json=payload))

    def reply_html(self, body: str, status_code: int = 403, headers: dict | None = None) -> None:
        self.reply(
            lambda request: httpx.Response(
                status_code,
                text=body,
                headers={"content-type": "text/html; charset=UTF-8", **(headers or {})},
            )
        )

    def transport(self) -> httpx.MockTransport:
        def handle(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.handler(request)

        return httpx.MockTransport(handle)

    def client(self):
        from qris_relay.services.saweria import SaweriaClient
        return SaweriaClient(UPSTREAM_URL, transport=self.transport())


@pytest.fixture
def upstream() -> FakeSaweria:
    return FakeSaweria()


@pytest_asyncio.fixture
async def client(upstream: FakeSaweria) -> AsyncGenerator[AsyncClient, None]:
    from qris_relay.deps import get_saweria_client
    from qris_relay.main import app
    app.dependency_overrides[get_saweria_client] = upstream.client
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
