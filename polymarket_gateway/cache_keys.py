"""Deterministic cache key derivation for façade lookups."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel


def build_cache_key(namespace: str, params: Mapping[str, Any] | BaseModel | None = None) -> str:
    """
    Build a cache key from a namespace and query parameters.

    Parameters that are None are dropped at every nesting level and mapping
    keys are sorted, so two parameter sets that differ only in key order or
    in absent-vs-None fields share a key. Values are JSON encoded, which keeps
    True distinct from "true" and lets values contain any character.

    Examples:
        build_cache_key("markets") -> "markets"
        build_cache_key("markets", {"limit": 10, "active": True})
            -> 'markets:{"active":true,"limit":10}'
    """
    cleaned = _canonicalize(params) if params is not None else None
    if not cleaned:
        return namespace
    payload = json.dumps(cleaned, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return f"{namespace}:{payload}"


def _canonicalize(value: Any) -> Any:
    if isinstance(value, BaseModel):
        value = value.model_dump(exclude_none=True)
    if isinstance(value, Mapping):
        return {
            str(key): _canonicalize(item)
            for key, item in value.items()
            if item is not None
        }
    if isinstance(value, (set, frozenset)):
        items = [_canonicalize(item) for item in value if item is not None]
        return sorted(items, key=lambda item: json.dumps(item, sort_keys=True))
    if isinstance(value, (list, tuple)):
        return [_canonicalize(item) for item in value if item is not None]
    return value


__all__ = ["build_cache_key"]
