"""Builder analytics from the Polymarket Data API."""

from __future__ import annotations

from typing import Any

from .models import BuilderLeaderboardParams, BuilderVolumeParams
from .service_base import BaseService


class BuilderDataService(BaseService):
    """
    Service for builder leaderboard and volume time series.

    Both change slowly upstream, so they use longer TTLs than the other
    services (leaderboard 5 minutes, volume 10 minutes by default).
    """

    async def get_leaderboard(
        self, params: BuilderLeaderboardParams | None = None
    ) -> list[dict[str, Any]]:
        query = (params or BuilderLeaderboardParams()).to_params()
        return await self._fetch_collection(
            "builders:leaderboard",
            query,
            lambda: self.client.fetch_builder_leaderboard(query),
            ttl=self.instances.config.builders_leaderboard_ttl,
        )

    async def get_volume_time_series(
        self, params: BuilderVolumeParams | None = None
    ) -> list[dict[str, Any]]:
        query = (params or BuilderVolumeParams()).to_params()
        return await self._fetch_collection(
            "builders:volume",
            query,
            lambda: self.client.fetch_builder_volume(query),
            ttl=self.instances.config.builders_volume_ttl,
        )
