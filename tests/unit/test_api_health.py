from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.api.routes import health


async def test_health_endpoint_returns_service_metadata(
    async_client: AsyncClient,
    session_factory: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(health, "get_session_factory", lambda: session_factory)

    response = await async_client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["service"]
    assert payload["status"] == "ok"
    assert payload["datastores"]["database"] == {"status": "ok"}
    assert response.headers["X-Request-ID"]


async def test_request_id_is_echoed(async_client: AsyncClient) -> None:
    response = await async_client.get(
        "/courses/c/modules/m/reviews/me", headers={"X-Request-ID": "trace-123"}
    )

    assert response.status_code == 401
    assert response.headers["X-Request-ID"] == "trace-123"
