"""Compatibility façade for service classes.

Re-exports focused implementations from dedicated modules to keep imports
stable while the codebase remains modular.
"""

from .bridge_service import BridgeService
from .builder_data_service import BuilderDataService
from .comment_service import CommentService
from .event_service import EventService
from .market_service import MarketService
from .search_service import SearchService
from .series_service import SeriesService
from .sports_service import SportsService
from .tag_service import TagService
from .user_data_service import UserDataService

__all__ = [
    "BridgeService",
    "BuilderDataService",
    "CommentService",
    "EventService",
    "MarketService",
    "SearchService",
    "SeriesService",
    "SportsService",
    "TagService",
    "UserDataService",
]
