"""Unit tests for the LibreTexts API clients.

Requests are answered in-process through ``httpx.MockTransport``.
"""

import json

import httpx
import pytest
from lxml import etree

from conductor.server.services.libretexts_client import (
    AdaptClient,
    CIDClient,
    LibreTextsApiError,
    LibreTextsClient,
    html_to_text,
    is_system_tag,
)


class TestHelpers:
    def test_html_to_text(self):
        assert html_to_text("<p>Atoms <b>bond</b>.</p>") == "Atoms bond."

    def test_html_to_text_empty(self):
        assert html_to_text("   ") == ""

    @pytest.mark.parametrize("tag", ["license:ccby", "coverpage:yes", "source@https://example.org", "article:topic"])
    def test_system_tags(self, tag):
        assert is_system_tag(tag) is True

    def test_content_tag_is_not_system(self):
        assert is_system_tag("thermodynamics") is False

    def test_parse_page_url(self):
        parts = LibreTextsClient.parse_page_url("https://chem.libretexts.org/Bookshelves/General")

        assert parts == {"subdomain": "chem", "path": "Bookshelves/General"}

    @pytest.mark.parametrize("url", ["https://example.com/Bookshelves/General", "https://chem.libretexts.org/"])
    def test_parse_page_url_rejects(self, url):
        assert LibreTextsClient.parse_page_url(url) is None


class TestLibreTextsClient:
    @pytest.fixture
    def build(self, libretexts_config, mock_http_client):
        def _build(handler):
            return LibreTextsClient(libretexts_config, client=mock_http_client(handler))

        return _build

    async def test_listing_uses_home_for_espanol(self, build):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"items": [{"id": 1}]})

        client = build(handler)
        items = await client.get_library_listing("espanol", "Bookshelves")

        assert items == [{"id": 1}]
        assert seen == ["/DownloadsCenter/espanol/home.json"]

    async def test_error_status_raises(self, build):
        client = build(lambda request: httpx.Response(503))

        with pytest.raises(LibreTextsApiError) as exc_info:
            await client.get_library_listing("chem", "Courses")

        assert exc_info.value.status_code == 503

    async def test_subpage_ids_depth_first(self, build):
        tree = {
            "page": {
                "@id": "1",
                "subpages": {
                    "page": [
                        {"@id": "2", "subpages": {"page": {"@id": "3"}}},
                        {"@id": "4", "subpages": ""},
                    ]
                },
            }
        }
        client = build(lambda request: httpx.Response(200, json=tree))

        assert await client.get_subpage_ids("chem", "1") == ["2", "3", "4"]

    async def test_page_text(self, build):
        client = build(lambda request: httpx.Response(200, json={"body": ["<p>Hello <i>world</i></p>", {}]}))

        assert await client.get_page_text("chem", "2") == "Hello world"

    async def test_page_overview(self, build):
        properties = {
            "property": {
                "@name": "mindtouch.page#overview",
                "@etag": "etag-1",
                "contents": {"#text": "Existing summary"},
            }
        }
        client = build(lambda request: httpx.Response(200, json=properties))

        assert await client.get_page_overview("chem", "2") == {"overview": "Existing summary", "etag": "etag-1"}

    async def test_update_page_tags_keeps_system_tags(self, build):
        sent = {}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"tag": [{"@value": "license:ccby"}, {"@value": "old-topic"}]})
            sent["body"] = request.content
            sent["content_type"] = request.headers["Content-Type"]
            return httpx.Response(200)

        client = build(handler)
        await client.update_page_tags("chem", "2", ["atoms", "bonds", "atoms"])

        root = etree.fromstring(sent["body"])
        assert [tag.get("value") for tag in root] == ["license:ccby", "atoms", "bonds"]
        assert sent["content_type"].startswith("application/xml")

    async def test_update_overview_sends_etag(self, build):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.method == "GET":
                return httpx.Response(
                    200, json={"property": [{"@name": "mindtouch.page#overview", "@etag": "e1", "contents": {}}]}
                )
            return httpx.Response(200)

        client = build(handler)
        await client.update_page_overview("chem", "2", "New summary")

        put = requests[-1]
        assert put.method == "PUT"
        assert put.headers["Etag"] == "e1"
        assert put.content == b"New summary"
        assert "mindtouch.page%2523overview" in str(put.url)

    async def test_page_tags_by_path(self, build):
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"subdomain": "chem", "path": "Bookshelves/A", "dreamformat": "json"}
            return httpx.Response(200, json={"tag": {"@value": "coverpage:yes"}})

        client = build(handler)

        assert await client.get_page_tags_by_path("chem", "Bookshelves/A") == ["coverpage:yes"]


class TestAdaptClient:
    async def test_sync_course(self, libretexts_config, mock_http_client):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/analytics-dashboard/sync/abc123"
            assert request.headers["Authorization"] == "Bearer key"
            return httpx.Response(200, json={"course_id": 77})

        client = AdaptClient(libretexts_config, client=mock_http_client(handler))

        assert await client.sync_course("abc123", "key") == "77"

    async def test_sync_course_rejected(self, libretexts_config, mock_http_client):
        client = AdaptClient(libretexts_config, client=mock_http_client(lambda r: httpx.Response(200, json={})))

        assert await client.sync_course("abc123", "key") is None


class TestCIDClient:
    async def test_download(self, libretexts_config, mock_http_client):
        client = CIDClient(libretexts_config, client=mock_http_client(lambda r: httpx.Response(200, text="a,b\n")))

        assert await client.download_descriptors_csv() == "a,b\n"
