"""Comment service backed by the Gamma API."""

from __future__ import annotations

from typing import Any

from .models import CommentFilters, UserCommentFilters
from .service_base import BaseService


class CommentService(BaseService):
    """Service for comment listings and lookups."""

    async def get_comments(self, filters: CommentFilters | None = None) -> list[dict[str, Any]]:
        params = (filters or CommentFilters()).to_params()
        return await self._fetch_collection(
            "comments",
            params,
            lambda: self.client.fetch_comments(params),
        )

    async def get_comment_by_id(
        self, comment_id: str, get_positions: bool = False
    ) -> Any | None:
        """
        Fetch a comment thread by id.

        get_positions is forwarded upstream and is part of the cache key, so
        the two variants are cached separately.
        """
        params = {"get_positions": get_positions}
        return await self._fetch_entity(
            "comment:id",
            comment_id,
            lambda: self.client.fetch_comment_by_id(comment_id, params),
            params=params,
        )

    async def get_comments_by_user(
        self, address: str, filters: UserCommentFilters | None = None
    ) -> list[dict[str, Any]]:
        params = (filters or UserCommentFilters()).to_params()
        return await self._fetch_collection(
            "comments:user",
            {"address": address, **params},
            lambda: self.client.fetch_comments_by_user(address, params),
        )
