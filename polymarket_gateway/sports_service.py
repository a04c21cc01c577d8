"""Sports service: teams and per-sport metadata from the Gamma API."""

from __future__ import annotations

from typing import Any

from .models import TeamQueryParams
from .service_base import BaseService


class SportsService(BaseService):
    async def get_teams(self, params: TeamQueryParams | None = None) -> list[dict[str, Any]]:
        query = (params or TeamQueryParams()).to_params()
        return await self._fetch_collection(
            "sports:teams",
            query,
            lambda: self.client.fetch_teams(query),
        )

    async def get_sports_metadata(self) -> list[dict[str, Any]]:
        return await self._fetch_collection(
            "sports:metadata", None, self.client.fetch_sports_metadata
        )
