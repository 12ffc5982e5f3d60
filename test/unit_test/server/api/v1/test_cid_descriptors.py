from datetime import datetime

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities import CIDDescriptor
from conductor.server.services.deps import get_cid_client
from conductor.server.services.libretexts_client import CIDClient

pytestmark = pytest.mark.asyncio

SUPERADMIN = "libretexts:superadmin"

CSV_EXPORT = (
    "cid,title,approved,expires,description\n"
    "MATH 210,Calculus I,01/15/2020,01/15/2025,Limits and derivatives\n"
    "CHEM 110,General Chemistry,,,\n"
)


@pytest.fixture
def cid_client_override(libretexts_config):
    from conductor.server.main import app

    def _install(handler):
        async def override():
            client = CIDClient(libretexts_config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
            yield client
            await client.aclose()

        app.dependency_overrides[get_cid_client] = override

    return _install


async def test_list_descriptors_filtered(client: AsyncClient, session: AsyncSession):
    session.add_all(
        [
            CIDDescriptor(descriptor="MATH 210", title="Calculus I"),
            CIDDescriptor(descriptor="CHEM 110", title="General Chemistry"),
        ]
    )
    await session.commit()

    response = await client.get("/api/v1/c-ids")
    assert [d["descriptor"] for d in response.json()["descriptors"]] == ["CHEM 110", "MATH 210"]

    response = await client.get("/api/v1/c-ids", params={"query": "calc"})
    assert [d["descriptor"] for d in response.json()["descriptors"]] == ["MATH 210"]


async def test_sync_descriptors(client: AsyncClient, session: AsyncSession, auth_headers, cid_client_override):
    cid_client_override(lambda request: httpx.Response(200, text=CSV_EXPORT))

    response = await client.put("/api/v1/c-ids/sync/automated", headers=auth_headers("a", SUPERADMIN))

    assert response.status_code == 200
    assert response.json()["msg"] == "Successfully synced C-ID Descriptors!"
    math = await session.get(CIDDescriptor, "MATH 210")
    assert math.approved == datetime(2020, 1, 15)
    assert math.description == "Limits and derivatives"


async def test_sync_descriptors_download_failure(
    client: AsyncClient, session: AsyncSession, auth_headers, cid_client_override
):
    cid_client_override(lambda request: httpx.Response(502))

    response = await client.put("/api/v1/c-ids/sync/automated", headers=auth_headers("a", SUPERADMIN))

    assert response.status_code == 500
    assert response.json()["errCode"] == "err72"


async def test_sync_requires_superadmin(client: AsyncClient, auth_headers):
    response = await client.put("/api/v1/c-ids/sync/automated", headers=auth_headers("a"))

    assert response.status_code == 403
