import pytest
from httpx import AsyncClient

from conductor.server.core import constant

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


async def test_health_check(client: AsyncClient):
    response = await client.get("http://localhost/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_version(client: AsyncClient):
    response = await client.get("http://localhost/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == constant.VERSION
    assert data["schema_version"] == "v1"


async def test_responses_carry_process_time_header(client: AsyncClient):
    response = await client.get("/health")
    assert "x-process-time" in response.headers
