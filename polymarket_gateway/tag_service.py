"""Tag service backed by the Gamma API."""

from __future__ import annotations

from typing import Any

from .service_base import BaseService


class TagService(BaseService):
    """
    Service for tags and tag relationships.

    Single tag lookups return None for unknown tags. Relationship lookups are
    treated as collections: an unknown tag surfaces as a 404 error.
    """

    async def get_tags(self) -> list[dict[str, Any]]:
        return await self._fetch_collection("tags", None, self.client.fetch_tags)

    async def get_tag_by_id(self, tag_id: str) -> dict[str, Any] | None:
        return await self._fetch_entity(
            "tag:id", tag_id, lambda: self.client.fetch_tag_by_id(tag_id)
        )

    async def get_tag_by_slug(self, slug: str) -> dict[str, Any] | None:
        return await self._fetch_entity(
            "tag:slug", slug, lambda: self.client.fetch_tag_by_slug(slug)
        )

    async def get_tag_relationships_by_id(self, tag_id: str) -> list[dict[str, Any]]:
        return await self._fetch_collection(
            "tag:relationships:id",
            {"id": tag_id},
            lambda: self.client.fetch_tag_relationships_by_id(tag_id),
        )

    async def get_tag_relationships_by_slug(self, slug: str) -> list[dict[str, Any]]:
        return await self._fetch_collection(
            "tag:relationships:slug",
            {"slug": slug},
            lambda: self.client.fetch_tag_relationships_by_slug(slug),
        )

    async def get_related_tags_by_id(self, tag_id: str) -> list[dict[str, Any]]:
        return await self._fetch_collection(
            "tag:related:id",
            {"id": tag_id},
            lambda: self.client.fetch_related_tags_by_id(tag_id),
        )

    async def get_related_tags_by_slug(self, slug: str) -> list[dict[str, Any]]:
        return await self._fetch_collection(
            "tag:related:slug",
            {"slug": slug},
            lambda: self.client.fetch_related_tags_by_slug(slug),
        )
