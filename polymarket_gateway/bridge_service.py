"""Bridge service: supported deposit assets from the Bridge API."""

from __future__ import annotations

from typing import Any

from .service_base import BaseService


class BridgeService(BaseService):
    async def get_supported_assets(self) -> dict[str, Any]:
        """Supported chains and tokens; rarely changes, so it uses the extended TTL."""
        return await self._fetch_collection(
            "bridge:supported-assets",
            None,
            self.client.fetch_supported_assets,
            ttl=self.instances.config.extended_cache_ttl,
        )
