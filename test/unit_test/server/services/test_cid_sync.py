"""Unit tests for C-ID descriptor parsing and sync."""

from datetime import datetime

import httpx
import pytest

from conductor.core.database.entities import CIDDescriptor
from conductor.core.errors import ConductorError
from conductor.server.services.cid_sync import (
    CIDDescriptorService,
    InvalidDateError,
    parse_cid_date,
    parse_descriptors_csv,
)
from conductor.server.services.libretexts_client import CIDClient

CSV_EXPORT = (
    "cid,title,approved,expires,description\n"
    "MATH 210,Calculus I,1/5/2020,,  Limits  \n"
    "MATH 211,,1/5/2020,,\n"
    ",Untitled,,,\n"
    "CHEM 110,General Chemistry,13/45/2020,,\n"
    "BIOL 100,Biology,,,\n"
)


class TestParseCidDate:
    def test_parses_month_day_year(self):
        assert parse_cid_date("1/5/2020") == datetime(2020, 1, 5)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_is_none(self, value):
        assert parse_cid_date(value) is None

    def test_invalid_date(self):
        with pytest.raises(InvalidDateError):
            parse_cid_date("2020-01-05")


class TestParseDescriptorsCsv:
    def test_skips_incomplete_and_undated_rows(self):
        descriptors = parse_descriptors_csv(CSV_EXPORT)

        assert [d.descriptor for d in descriptors] == ["MATH 210", "BIOL 100"]
        assert descriptors[0].description == "Limits"
        assert descriptors[0].approved == datetime(2020, 1, 5)
        assert descriptors[0].expires is None


class TestCIDDescriptorService:
    async def test_sync_upserts(self, session, libretexts_config, mock_http_client):
        session.add(CIDDescriptor(descriptor="MATH 210", title="Old Title"))
        await session.commit()
        client = CIDClient(libretexts_config, client=mock_http_client(lambda r: httpx.Response(200, text=CSV_EXPORT)))

        message = await CIDDescriptorService(session).sync(client)

        assert message == "Successfully synced C-ID Descriptors!"
        descriptors = await CIDDescriptorService(session).search()
        assert {d.descriptor: d.title for d in descriptors} == {"MATH 210": "Calculus I", "BIOL 100": "Biology"}

    async def test_sync_empty_export_fails(self, session, libretexts_config, mock_http_client):
        client = CIDClient(
            libretexts_config, client=mock_http_client(lambda r: httpx.Response(200, text="cid,title\n"))
        )

        with pytest.raises(ConductorError) as exc_info:
            await CIDDescriptorService(session).sync(client)

        assert exc_info.value.code == "err72"
