"""
Collections service.

A collection may sit inside another collection. The child stores its
``parent_id`` and the parent lists the child as a ``collection`` resource;
both sides are kept in step on create, re-parent and delete.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import unquote

from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities.collections import Collection
from conductor.core.database.repositories import BookRepository, CollectionRepository
from conductor.core.errors import bad_request, not_found
from conductor.core.logging_config import get_logger
from conductor.core.models.io.books import BookRead
from conductor.core.models.io.collections import (
    CollectionCreate,
    CollectionRead,
    CollectionResourceRead,
    CollectionUpdate,
)
from conductor.core.utils import collator_key, generate_b62_id
from conductor.server.core.config import settings

logger = get_logger(__name__)


def to_read(collection: Collection, detailed: bool = False) -> CollectionRead:
    read = CollectionRead.model_validate(collection)
    return read.model_copy(
        update={"resource_count": len(collection.resources or []), "resources": read.resources if detailed else None}
    )


def _child_entry(coll_id: str) -> Dict[str, str]:
    return {"resourceType": "collection", "resourceID": coll_id}


class CollectionService:
    """Create, edit and browse collections of the instance organization."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.collections = CollectionRepository(session)
        self.books = BookRepository(session)

    async def _get_or_404(self, coll_id: str) -> Collection:
        collection = await self.collections.get_by_id(coll_id)
        if collection is None:
            raise not_found()
        return collection

    async def _ensure_not_descendant(self, parent_id: str, coll_id: str) -> None:
        """Reject a parent that is the collection itself or one of its descendants."""
        seen = set()
        current: Optional[str] = parent_id
        while current and current not in seen:
            if current == coll_id:
                raise bad_request("err2")
            seen.add(current)
            ancestor = await self.collections.get_by_id(current)
            current = ancestor.parent_id if ancestor else None

    async def _attach_to_parent(self, parent_id: str, coll_id: str) -> None:
        parent = await self.collections.get_by_id(parent_id)
        if parent is None:
            raise not_found()
        await self._ensure_not_descendant(parent_id, coll_id)
        if not parent.has_resource(coll_id):
            parent.resources = [*parent.resources, _child_entry(coll_id)]
            await self.collections.update(parent)

    async def _detach_from_parent(self, parent_id: str, coll_id: str) -> None:
        parent = await self.collections.get_by_id(parent_id)
        if parent is None:
            return
        parent.resources = [r for r in parent.resources if r.get("resourceID") != coll_id]
        await self.collections.update(parent)

    async def create(self, payload: CollectionCreate) -> str:
        collection = Collection(
            coll_id=generate_b62_id(8),
            org_id=settings.org_id,
            title=payload.title.strip(),
            cover_photo=payload.cover_photo,
            privacy=payload.privacy,
            auto_manage=payload.auto_manage,
            program=payload.program,
            locations=list(payload.locations),
            parent_id=payload.parent_id,
        )
        if payload.parent_id:
            await self._attach_to_parent(payload.parent_id, collection.coll_id)
        await self.collections.create(collection)
        logger.info(f"Created collection {collection.coll_id} (parent={payload.parent_id})")
        return collection.coll_id

    async def edit(self, coll_id: str, payload: CollectionUpdate) -> bool:
        """Apply a partial update.

        Returns:
            False when the payload carried no changes
        """
        collection = await self._get_or_404(coll_id)
        changes = payload.model_dump(exclude_unset=True)
        # null or "" parentID moves the collection to the root level
        clear_parent = "parent_id" in changes and not changes["parent_id"]
        changes = {field: value for field, value in changes.items() if value is not None}
        if clear_parent:
            changes["parent_id"] = None
        if not changes:
            return False

        if "parent_id" in changes and changes["parent_id"] != collection.parent_id:
            new_parent = changes["parent_id"]
            if new_parent:
                await self._attach_to_parent(new_parent, coll_id)
            if collection.parent_id:
                await self._detach_from_parent(collection.parent_id, coll_id)

        for field, value in changes.items():
            setattr(collection, field, list(value) if isinstance(value, list) else value)
        await self.collections.update(collection)
        return True

    async def delete(self, coll_id: str) -> None:
        collection = await self._get_or_404(coll_id)
        if collection.parent_id:
            await self._detach_from_parent(collection.parent_id, coll_id)
        await self.collections.delete(coll_id)
        logger.info(f"Deleted collection {coll_id}")

    async def list_commons(
        self, query: Optional[str], sort: str, descending: bool, limit: int, page: int
    ) -> Tuple[List[CollectionRead], int]:
        """Public root-level collections with paging."""
        total = await self.collections.count_root(settings.org_id, privacy="public", query=query)
        rows = await self.collections.list_root(
            settings.org_id,
            privacy="public",
            query=query,
            sort=sort,
            descending=descending,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return [to_read(row) for row in rows], total

    async def list_all(self, detailed: bool = False) -> List[CollectionRead]:
        rows = await self.collections.list_root(settings.org_id, sort="title")
        return [to_read(row, detailed=detailed) for row in rows]

    async def get(self, identifier: str) -> CollectionRead:
        collection = await self.collections.get_by_id_or_title(unquote(identifier))
        if collection is None:
            raise not_found()
        return to_read(collection)

    async def get_resources(
        self,
        coll_id: str,
        query: Optional[str] = None,
        sort: str = "title",
        descending: bool = False,
        limit: Optional[int] = None,
        page: int = 1,
    ) -> Tuple[List[CollectionResourceRead], int]:
        """Resolve a collection's entries into their book or collection records."""
        collection = await self._get_or_404(coll_id)
        book_ids = [r["resourceID"] for r in collection.resources if r.get("resourceType") == "resource"]
        child_ids = [r["resourceID"] for r in collection.resources if r.get("resourceType") == "collection"]
        books = {b.book_id: b for b in await self.books.get_many(book_ids)}
        children = {c.coll_id: c for c in await self.collections.get_many(child_ids)}

        needle = query.strip().lower() if query else ""
        resolved: List[CollectionResourceRead] = []
        for entry in collection.resources:
            resource_id = entry.get("resourceID")
            if entry.get("resourceType") == "resource" and resource_id in books:
                book = books[resource_id]
                if needle and needle not in book.title.lower() and needle not in (book.author or "").lower():
                    continue
                data: Dict[str, Any] = BookRead.model_validate(book).model_dump(by_alias=True)
            elif entry.get("resourceType") == "collection" and resource_id in children:
                child = children[resource_id]
                if needle and needle not in child.title.lower() and needle not in (child.program or "").lower():
                    continue
                data = to_read(child).model_dump(by_alias=True)
            else:
                continue
            resolved.append(
                CollectionResourceRead(
                    resource_type=entry["resourceType"], resource_id=resource_id, resource_data=data
                )
            )

        field = "author" if sort == "author" else "title"
        resolved.sort(key=lambda r: collator_key(r.resource_data.get(field) or ""), reverse=descending)
        total = len(resolved)
        if limit:
            start = (page - 1) * limit
            resolved = resolved[start : start + limit]
        return resolved, total

    async def add_resources(self, coll_id: str, book_ids: Sequence[str]) -> None:
        collection = await self._get_or_404(coll_id)
        entries = list(collection.resources)
        for book_id in dict.fromkeys(book_ids):
            if not any(e.get("resourceID") == book_id for e in entries):
                entries.append({"resourceType": "resource", "resourceID": book_id})
        collection.resources = entries
        await self.collections.update(collection)

    async def remove_resource(self, coll_id: str, resource_id: str) -> None:
        collection = await self._get_or_404(coll_id)
        collection.resources = [r for r in collection.resources if r.get("resourceID") != resource_id]
        await self.collections.update(collection)
