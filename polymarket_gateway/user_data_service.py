"""Wallet-level data from the Polymarket Data API: positions, trades, activity."""

from __future__ import annotations

from typing import Any

from .errors import ValidationError
from .service_base import BaseService


def _market_set(markets: list[str] | None) -> set[str]:
    return {m.lower() for m in markets or [] if m}


def _in_markets(row: dict[str, Any], wanted: set[str]) -> bool:
    for field in ("conditionId", "slug"):
        value = row.get(field)
        if isinstance(value, str) and value.lower() in wanted:
            return True
    return False


def filter_by_markets(rows: list[dict[str, Any]], markets: list[str] | None) -> list[dict[str, Any]]:
    """Keep rows whose conditionId or slug matches one of the markets, ignoring case."""
    wanted = _market_set(markets)
    if not wanted:
        return rows
    return [row for row in rows if _in_markets(row, wanted)]


def filter_trades(
    trades: list[dict[str, Any]], user: str | None, markets: list[str] | None
) -> list[dict[str, Any]]:
    """Narrow trades to one proxy wallet and/or a set of markets."""
    if user:
        wallet = user.lower()
        trades = [
            t for t in trades
            if isinstance(t.get("proxyWallet"), str) and t["proxyWallet"].lower() == wallet
        ]
    return filter_by_markets(trades, markets)


class UserDataService(BaseService):
    """
    Service for per-wallet positions, trades and portfolio data.

    Everything here is a collection lookup cached for the default TTL. The
    Data API does not always honour the market filter, so positions and
    trades are filtered again before they are cached.
    """

    async def get_current_positions(
        self, user: str, markets: list[str] | None = None
    ) -> list[dict[str, Any]]:
        params = {"user": user, "market": markets}
        return await self._fetch_collection(
            "users:positions",
            params,
            lambda: self.client.fetch_current_positions(user, markets),
            lambda rows, _params: filter_by_markets(rows, markets),
        )

    async def get_trades(
        self, user: str | None = None, markets: list[str] | None = None
    ) -> list[dict[str, Any]]:
        if not user and not markets:
            raise ValidationError("trades require at least one of: user or market")
        params = {"user": user, "market": markets}
        return await self._fetch_collection(
            "users:trades",
            params,
            lambda: self.client.fetch_trades(user, markets),
            lambda rows, _params: filter_trades(rows, user, markets),
        )

    async def get_user_activity(self, user: str) -> list[dict[str, Any]]:
        return await self._fetch_collection(
            "users:activity",
            {"user": user},
            lambda: self.client.fetch_user_activity(user),
        )

    async def get_top_holders(self, markets: list[str]) -> list[dict[str, Any]]:
        return await self._fetch_collection(
            "users:holders",
            {"market": markets},
            lambda: self.client.fetch_top_holders(markets),
        )

    async def get_portfolio_value(
        self, user: str, markets: list[str] | None = None
    ) -> list[dict[str, Any]]:
        return await self._fetch_collection(
            "users:value",
            {"user": user, "market": markets},
            lambda: self.client.fetch_portfolio_value(user, markets),
        )

    async def get_closed_positions(self, user: str) -> list[dict[str, Any]]:
        return await self._fetch_collection(
            "users:closed-positions",
            {"user": user},
            lambda: self.client.fetch_closed_positions(user),
        )
