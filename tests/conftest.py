import pathlib
import sys

import pytest

# Ensure repo root on sys.path for direct module imports when running tests locally.
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from polymarket_gateway.shared import reset_shared_instances

GATEWAY_ENV_VARS = (
    "POLYMARKET_API_URL",
    "POLYMARKET_DATA_API_URL",
    "POLYMARKET_BRIDGE_API_URL",
    "POLYMARKET_API_TIMEOUT",
    "POLYMARKET_CACHE_TTL",
    "POLYMARKET_CACHE_ENABLED",
)


@pytest.fixture(autouse=True)
def clean_gateway_state(monkeypatch):
    """Every test starts with no env overrides and an empty shared registry."""
    for name in GATEWAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_shared_instances()
    yield
    reset_shared_instances()
