"""C-ID descriptor sync and lookup."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities.cid_descriptors import CIDDescriptor
from conductor.core.database.repositories import CIDDescriptorRepository
from conductor.core.errors import internal_error
from conductor.core.logging_config import get_logger

from .libretexts_client import CIDClient, LibreTextsApiError

logger = get_logger(__name__)

SYNC_MESSAGE = "Successfully synced C-ID Descriptors!"


class InvalidDateError(ValueError):
    pass


def parse_cid_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ``M/D/YYYY`` date; blank means no date."""
    text = (value or "").strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, "%m/%d/%Y")
    except ValueError as exc:
        raise InvalidDateError(text) from exc


def parse_descriptors_csv(raw: str) -> List[CIDDescriptor]:
    """Rows without a code or title, or with an unreadable date, are skipped."""
    descriptors = {}
    for row in csv.DictReader(io.StringIO(raw)):
        code = (row.get("cid") or "").strip()
        title = (row.get("title") or "").strip()
        if not code or not title:
            continue
        try:
            approved = parse_cid_date(row.get("approved"))
            expires = parse_cid_date(row.get("expires"))
        except InvalidDateError as exc:
            logger.debug(f"Skipping C-ID {code}: invalid date {exc}")
            continue
        descriptors[code] = CIDDescriptor(
            descriptor=code,
            title=title,
            description=(row.get("description") or "").strip(),
            approved=approved,
            expires=expires,
        )
    return list(descriptors.values())


class CIDDescriptorService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.descriptors = CIDDescriptorRepository(session)

    async def search(self, query: Optional[str] = None) -> List[CIDDescriptor]:
        return await self.descriptors.search(query)

    async def sync(self, client: CIDClient) -> str:
        try:
            raw = await client.download_descriptors_csv()
            parsed = parse_descriptors_csv(raw)
            if not parsed:
                raise ValueError("C-ID export contained no usable rows")
            count = await self.descriptors.upsert_many(parsed)
        except (LibreTextsApiError, SQLAlchemyError, ValueError, csv.Error) as exc:
            if isinstance(exc, SQLAlchemyError):
                await self.session.rollback()
            logger.error(f"C-ID descriptor sync failed: {exc}", exc_info=True)
            raise internal_error("err72") from exc
        logger.info(f"Synced {count} C-ID descriptors")
        return SYNC_MESSAGE
