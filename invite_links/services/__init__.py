"""
Services package initialization
"""
from .context import UpdateContext, StorageLocation
from .dynamodb_service import DynamoDBService, convert_decimals
from .cache_service import AggregateCache
from .entity_service import (
    fetch_campaigns,
    fetch_groups,
    fetch_categories,
    fetch_existing_aggregates,
    ExistingAggregate
)
from .aggregation_service import aggregate, AggregateDraft, MAX_INVITE_CODES
from .writer_service import upsert, clear, AggregateUpdate
from .reconciliation_service import reconcile
from .orchestrator import update_invite_links, process_account, RunResult
