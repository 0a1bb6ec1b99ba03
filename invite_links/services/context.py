"""
Update Context - storage clients and cache for one invocation

Built once per request and passed to every service call, so nothing
(clients, table names, cached aggregates) leaks between invocations.
"""
from enum import Enum
from typing import Optional, Dict

from ..config import Settings
from ..utils import account_table_name
from .dynamodb_service import DynamoDBService, build_session
from .cache_service import AggregateCache


# Partition keys
CAMPAIGN_PK = "CAMPAIGN"
GROUP_PK = "WHATSAPP#GROUP"
GROUP_CATEGORY_PK = "WHATSAPP#GROUPCATEGORY"
INVITE_LINKS_PK = "WHATSAPP#INVITELINKS"


class StorageLocation(str, Enum):
    """Where an aggregate lives."""
    SHARED = "shared"
    ACCOUNT = "account"


class UpdateContext:
    """Explicit state for a single update run."""

    def __init__(
        self,
        settings: Settings,
        primary: DynamoDBService,
        secondary: Optional[DynamoDBService] = None,
        cache: Optional[AggregateCache] = None,
    ):
        self.settings = settings
        self.primary = primary
        self.secondary = secondary
        self.cache = cache if cache is not None else AggregateCache(primary, settings.table_name, INVITE_LINKS_PK)

    @classmethod
    def from_settings(cls, settings: Settings, credentials: Optional[Dict] = None) -> "UpdateContext":
        """Create region clients (and the mirror client when configured)."""
        session = build_session(credentials)
        primary = DynamoDBService(region_name=settings.region, session=session)
        secondary = None
        if settings.secondary_region:
            secondary = DynamoDBService(region_name=settings.secondary_region, session=session)
        return cls(settings, primary, secondary)

    @property
    def shared_table(self) -> str:
        return self.settings.table_name

    def table_for(self, location: StorageLocation, account_id: str) -> str:
        """Resolve the table name holding aggregates for a location."""
        if location == StorageLocation.SHARED:
            return self.shared_table
        return account_table_name(account_id)
