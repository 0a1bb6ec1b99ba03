"""
Entity Service - raw account entities and existing invite-link records

Reads Campaign, Group and GroupCategory items from an account's own table
and finds the aggregates already published for that account. A storage
location that cannot be read is logged and treated as empty.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from ..utils import account_sk, account_table_name
from .context import (
    CAMPAIGN_PK,
    GROUP_CATEGORY_PK,
    GROUP_PK,
    INVITE_LINKS_PK,
    StorageLocation,
    UpdateContext,
)

logger = logging.getLogger(__name__)


@dataclass
class ExistingAggregate:
    """An aggregate record found in storage, tagged with where it was found."""
    location: StorageLocation
    item: Dict

    @property
    def sk(self) -> str:
        return self.item.get('SK', '')


def _query_account(ctx: UpdateContext, account_id: str, partition_key: str) -> List[Dict]:
    table_name = account_table_name(account_id)
    try:
        return ctx.primary.query_all(table_name, partition_key)
    except (ClientError, BotoCoreError) as e:
        logger.warning("Could not read %s items from %s: %s", partition_key, table_name, e)
        return []


def fetch_campaigns(ctx: UpdateContext, account_id: str) -> List[Dict]:
    """All campaign items from the account table."""
    return _query_account(ctx, account_id, CAMPAIGN_PK)


def fetch_groups(ctx: UpdateContext, account_id: str) -> List[Dict]:
    """All WhatsApp group items from the account table."""
    return _query_account(ctx, account_id, GROUP_PK)


def fetch_categories(ctx: UpdateContext, account_id: str) -> List[Dict]:
    """All group categories from the account table."""
    return _query_account(ctx, account_id, GROUP_CATEGORY_PK)


def fetch_shared_aggregates(ctx: UpdateContext, account_id: str) -> List[Dict]:
    """
    Invite-link records in the shared table attributed to this account.

    Served from the aggregate cache; falls back to a direct query when the
    cache is disabled.
    """
    owner = account_sk(account_id)
    if ctx.cache.load():
        return ctx.cache.items_for_account(owner)

    try:
        return ctx.primary.query_all(
            ctx.shared_table,
            INVITE_LINKS_PK,
            filter_expression=Attr('AccountSK').eq(owner),
        )
    except (ClientError, BotoCoreError) as e:
        logger.warning("Could not read invite links from %s for %s: %s", ctx.shared_table, owner, e)
        return []


def fetch_account_aggregates(ctx: UpdateContext, account_id: str) -> List[Dict]:
    """Invite-link records in the account's own table (always live)."""
    return _query_account(ctx, account_id, INVITE_LINKS_PK)


def fetch_existing_aggregates(ctx: UpdateContext, account_id: str) -> List[ExistingAggregate]:
    """
    Records already published for the account, from both locations.

    Both are always read: a campaign that gained or lost its domain since
    the last run still has its old record at the other location.
    """
    existing = [
        ExistingAggregate(StorageLocation.SHARED, item)
        for item in fetch_shared_aggregates(ctx, account_id)
    ]
    existing.extend(
        ExistingAggregate(StorageLocation.ACCOUNT, item)
        for item in fetch_account_aggregates(ctx, account_id)
    )
    return existing
