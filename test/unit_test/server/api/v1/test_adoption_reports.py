import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities import AdoptionReport

pytestmark = pytest.mark.asyncio

SUPERADMIN = "libretexts:superadmin"


def _report(**kwargs) -> dict:
    payload = {
        "email": "prof@example.edu",
        "name": "Pat Professor",
        "role": "instructor",
        "resource": {"id": "chem-100", "title": "Chemistry", "library": "chem"},
        "instructor": {"institution": "Example College", "students": "45", "printCost": ""},
        "student": {"use": "primary"},
    }
    payload.update(kwargs)
    return payload


async def test_submit_report_keeps_role_details(client: AsyncClient, session: AsyncSession):
    response = await client.post("/api/v1/adoptionreport", json=_report())

    assert response.status_code == 201
    assert response.json()["msg"] == "Adoption report succesfully submitted."

    reports = await client.get("/api/v1/adoptionreports", headers={"X-User-ID": "a", "X-User-Roles": SUPERADMIN})
    stored = reports.json()["reports"]
    assert len(stored) == 1
    assert stored[0]["instructor"] == {"institution": "Example College", "students": 45}
    assert stored[0]["student"] is None


async def test_submit_report_invalid_number(client: AsyncClient):
    response = await client.post("/api/v1/adoptionreport", json=_report(instructor={"students": "many"}))

    assert response.status_code == 400
    assert response.json()["errCode"] == "err1"


async def test_submit_report_invalid_email(client: AsyncClient):
    response = await client.post("/api/v1/adoptionreport", json=_report(email="not-an-email"))

    assert response.status_code == 400


async def test_list_reports_requires_superadmin(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/adoptionreports", headers=auth_headers("u1", "libretexts:campusadmin"))

    assert response.status_code == 403


async def test_delete_report(client: AsyncClient, session: AsyncSession, auth_headers):
    session.add(
        AdoptionReport(
            report_id="r1",
            email="s@example.edu",
            name="Sam",
            role="student",
            resource={"id": "chem-100", "title": "Chemistry", "library": "chem"},
        )
    )
    await session.commit()

    response = await client.delete("/api/v1/adoptionreport/r1", headers=auth_headers("a", SUPERADMIN))
    assert response.json()["msg"] == "Adoption report successfully deleted."

    response = await client.delete("/api/v1/adoptionreport/r1", headers=auth_headers("a", SUPERADMIN))
    assert response.status_code == 404
