"""LibreTexts API clients

Overview
--------
Thin async HTTP clients for the services Conductor talks to:

- ``LibreTextsClient``: the LibreTexts library API (DownloadsCenter listings,
  page info/tag lookups) and the per-library page API (table of contents,
  page contents, overview property and tags).
- ``AdaptClient``: the ADAPT analytics sharing endpoint.
- ``CIDClient``: the c-id.net descriptor CSV download.

Errors
------
Transport failures and non-2xx answers are raised as ``LibreTextsApiError``
carrying the status code when there is one. Callers translate them into
Conductor error codes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlparse

import httpx
from lxml import etree
from lxml import html as lhtml

from conductor.server.core.config import LibreTextsConfig

logger = logging.getLogger(__name__)

OVERVIEW_PROPERTY = "mindtouch.page#overview"

# Tags managed by the library platform itself; never replaced by generated tags.
SYSTEM_TAG_PREFIXES = (
    "article:",
    "authorname:",
    "license:",
    "licenseversion:",
    "source@",
    "stage:",
    "lulu@",
    "author@",
    "printoptions:",
    "showtoc:",
    "coverpage:",
    "columns:",
    "transclude:",
    "transcluded:",
    "field:",
)


class LibreTextsApiError(Exception):
    """Failure talking to a LibreTexts service.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code when the service answered.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _as_list(value: Any) -> List[Any]:
    """The library API returns a bare object for single-element collections."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def html_to_text(body: str) -> str:
    if not body or not body.strip():
        return ""
    return lhtml.fromstring(body).text_content()


def is_system_tag(tag: str) -> bool:
    return any(tag.startswith(prefix) for prefix in SYSTEM_TAG_PREFIXES)


class _BaseClient:
    def __init__(self, timeout: float, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(f"{method} {url} failed: {exc}")
            raise LibreTextsApiError(f"Request to {url} failed: {exc}") from exc
        if response.status_code >= 400:
            logger.warning(f"{method} {url} answered {response.status_code}")
            raise LibreTextsApiError(
                f"{method} {url} answered {response.status_code}", status_code=response.status_code
            )
        return response


class LibreTextsClient(_BaseClient):
    """Client for the LibreTexts library API and the per-library page API.

    Args:
        config: Endpoint configuration
        client: Optional preconfigured ``httpx.AsyncClient``
    """

    def __init__(self, config: LibreTextsConfig, *, client: Optional[httpx.AsyncClient] = None) -> None:
        super().__init__(config.timeout_seconds, client)
        self.api_url = config.api_url.rstrip("/")
        self.origin = config.production_url
        self.library_url_template = config.library_url_template
        self.api_token = config.library_api_token

    # ------------------------------------------------------------------
    # DownloadsCenter listings
    # ------------------------------------------------------------------

    async def get_library_listing(self, library: str, kind: str) -> List[Dict[str, Any]]:
        """Book items of a library's ``Bookshelves`` or ``Courses`` listing."""
        if kind == "Bookshelves" and library == "espanol":
            path = f"{library}/home.json"
        else:
            path = f"{library}/{kind}.json"
        response = await self._request("GET", f"{self.api_url}/DownloadsCenter/{path}")
        data = response.json()
        return list(data.get("items", [])) if isinstance(data, dict) else []

    # ------------------------------------------------------------------
    # Page lookups by URL
    # ------------------------------------------------------------------

    @staticmethod
    def parse_page_url(url: str) -> Optional[Dict[str, str]]:
        """Split a library page URL into its ``subdomain`` and page ``path``."""
        parsed = urlparse(url.strip())
        host = parsed.hostname or ""
        if not host.endswith(".libretexts.org"):
            return None
        subdomain = host.split(".", 1)[0]
        path = parsed.path.lstrip("/")
        if not subdomain or not path:
            return None
        return {"subdomain": subdomain, "path": path}

    async def _endpoint(self, name: str, subdomain: str, path: str) -> Any:
        response = await self._request(
            "PUT",
            f"{self.api_url}/endpoint/{name}",
            json={"subdomain": subdomain, "path": path, "dreamformat": "json"},
            headers={"Origin": self.origin},
        )
        return response.json()

    async def get_page_info(self, subdomain: str, path: str) -> Dict[str, Any]:
        return await self._endpoint("info", subdomain, path)

    async def get_page_tags_by_path(self, subdomain: str, path: str) -> List[str]:
        data = await self._endpoint("tags", subdomain, path)
        tags = _as_list(data.get("tag") if isinstance(data, dict) else data)
        return [t.get("@value", "") for t in tags if isinstance(t, dict)]

    # ------------------------------------------------------------------
    # Page API
    # ------------------------------------------------------------------

    def _page_url(self, library: str, page_id: str, api: str) -> str:
        base = self.library_url_template.format(library=library).rstrip("/")
        return f"{base}/@api/deki/pages/{page_id}/{api}"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Origin": self.origin}
        if self.api_token:
            headers["X-Deki-Token"] = self.api_token
        headers.update(extra or {})
        return headers

    async def get_page_tree(self, library: str, page_id: str) -> Dict[str, Any]:
        response = await self._request(
            "GET", self._page_url(library, page_id, "tree"), params={"dream.out.format": "json"}, headers=self._headers()
        )
        return response.json().get("page", {})

    async def get_subpage_ids(self, library: str, cover_id: str) -> List[str]:
        """Page identifiers of a book's table of contents, depth first, cover page excluded."""
        root = await self.get_page_tree(library, cover_id)
        ids: List[str] = []

        def _walk(page: Dict[str, Any]) -> None:
            for child in _as_list((page.get("subpages") or {}).get("page")):
                if isinstance(child, dict) and child.get("@id"):
                    ids.append(str(child["@id"]))
                    _walk(child)

        _walk(root)
        return ids

    async def get_page_text(self, library: str, page_id: str) -> str:
        response = await self._request(
            "GET",
            self._page_url(library, page_id, "contents"),
            params={"dream.out.format": "json"},
            headers=self._headers(),
        )
        body = response.json().get("body", "")
        if isinstance(body, list):
            body = body[0] if body and isinstance(body[0], str) else ""
        return html_to_text(body or "")

    async def get_page_overview(self, library: str, page_id: str) -> Dict[str, Optional[str]]:
        """The page's overview text and the property etag needed to replace it."""
        response = await self._request(
            "GET",
            self._page_url(library, page_id, "properties"),
            params={"dream.out.format": "json"},
            headers=self._headers(),
        )
        for prop in _as_list(response.json().get("property")):
            if isinstance(prop, dict) and prop.get("@name") == OVERVIEW_PROPERTY:
                contents = prop.get("contents") or {}
                return {"overview": contents.get("#text") or "", "etag": prop.get("@etag")}
        return {"overview": "", "etag": None}

    async def get_page_tags(self, library: str, page_id: str) -> List[str]:
        response = await self._request(
            "GET", self._page_url(library, page_id, "tags"), params={"dream.out.format": "json"}, headers=self._headers()
        )
        return [t.get("@value", "") for t in _as_list(response.json().get("tag")) if isinstance(t, dict)]

    async def update_page_overview(self, library: str, page_id: str, summary: str) -> None:
        current = await self.get_page_overview(library, page_id)
        headers = {"Content-Type": "text/plain"}
        if current["etag"]:
            headers["Etag"] = current["etag"]
        await self._request(
            "PUT",
            self._page_url(library, page_id, f"properties/{quote(quote(OVERVIEW_PROPERTY, safe=''), safe='')}"),
            content=summary.encode("utf-8"),
            headers=self._headers(headers),
        )

    async def update_page_tags(self, library: str, page_id: str, tags: List[str]) -> None:
        """Replace the page's non-system tags with ``tags``, keeping system tags."""
        system_tags = [t for t in await self.get_page_tags(library, page_id) if is_system_tag(t)]
        merged = list(dict.fromkeys([*system_tags, *tags]))
        root = etree.Element("tags")
        for tag in merged:
            etree.SubElement(root, "tag", value=tag)
        body = etree.tostring(root, encoding="unicode")
        await self._request(
            "PUT",
            self._page_url(library, page_id, "tags"),
            content=body.encode("utf-8"),
            headers=self._headers({"Content-Type": "application/xml; charset=utf-8"}),
        )


class AdaptClient(_BaseClient):
    """Client for the ADAPT analytics sharing endpoint."""

    def __init__(self, config: LibreTextsConfig, *, client: Optional[httpx.AsyncClient] = None) -> None:
        super().__init__(config.timeout_seconds, client)
        self.base_url = config.adapt_url.rstrip("/")

    async def sync_course(self, course_id: str, sharing_key: str) -> Optional[str]:
        """Connect an analytics course to ADAPT.

        Returns:
            The ADAPT course identifier, or None when the key was not accepted
        """
        response = await self._request(
            "POST",
            f"{self.base_url}/analytics-dashboard/sync/{course_id}",
            headers={"Authorization": f"Bearer {sharing_key}"},
        )
        data = response.json()
        course = data.get("course_id") if isinstance(data, dict) else None
        return str(course) if course else None


class CIDClient(_BaseClient):
    """Client for the c-id.net descriptor export."""

    def __init__(self, config: LibreTextsConfig, *, client: Optional[httpx.AsyncClient] = None) -> None:
        super().__init__(config.timeout_seconds, client)
        self.url = config.cid_descriptors_url

    async def download_descriptors_csv(self) -> str:
        response = await self._request("GET", self.url)
        return response.text
