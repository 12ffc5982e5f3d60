"""Unit tests for analytics course helpers."""

from datetime import datetime

import httpx
import pytest

from conductor.core.errors import ConductorError
from conductor.server.services.analytics import AnalyticsService, parse_course_dates
from conductor.server.services.libretexts_client import LibreTextsClient


class TestParseCourseDates:
    def test_end_covers_whole_day(self):
        start, end = parse_course_dates("01-10-2026", "05-20-2026")

        assert start == datetime(2026, 1, 10)
        assert end == datetime(2026, 5, 20, 23, 59, 59, 999000)

    def test_same_day_course(self):
        start, end = parse_course_dates("01-10-2026", "01-10-2026")

        assert start < end

    def test_end_before_start(self):
        with pytest.raises(ConductorError) as exc_info:
            parse_course_dates("05-20-2026", "01-10-2026")
        assert exc_info.value.code == "err78"

    def test_invalid_date(self):
        with pytest.raises(ConductorError) as exc_info:
            parse_course_dates("13-40-2026", "01-10-2026")
        assert exc_info.value.code == "err1"


class TestVerifyTextbook:
    @pytest.fixture
    def build(self, libretexts_config, mock_http_client):
        def _build(tags):
            def handler(request: httpx.Request) -> httpx.Response:
                if request.url.path.endswith("/info"):
                    return httpx.Response(200, json={"@id": "42"})
                return httpx.Response(200, json={"tag": [{"@value": t} for t in tags]})

            return LibreTextsClient(libretexts_config, client=mock_http_client(handler))

        return _build

    async def test_cover_page(self, build):
        book_id = await AnalyticsService.verify_textbook(build(["coverpage:toc"]), "https://bio.libretexts.org/Book")

        assert book_id == "bio-42"

    async def test_not_a_cover_page(self, build):
        with pytest.raises(ConductorError) as exc_info:
            await AnalyticsService.verify_textbook(build(["article:topic"]), "https://bio.libretexts.org/Book")
        assert exc_info.value.code == "err76"

    async def test_foreign_host(self, build):
        with pytest.raises(ConductorError) as exc_info:
            await AnalyticsService.verify_textbook(build(["coverpage:yes"]), "https://example.com/Book")
        assert exc_info.value.code == "err76"
