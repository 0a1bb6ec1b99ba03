"""
Orchestrator - run the invite-link update across accounts

Accounts are processed one at a time with a fixed pause between them to
keep the load on per-account tables bounded. Storage failures inside an
account are logged and absorbed; only an unexpected error fails the run.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from ..utils import format_timestamp
from . import aggregation_service, entity_service, reconciliation_service, writer_service
from .context import UpdateContext
from .writer_service import AggregateUpdate

logger = logging.getLogger(__name__)


@dataclass
class AccountResult:
    """Outcome for a single account."""
    account_id: str
    aggregates: int = 0
    upserts: int = 0
    clears: int = 0
    failed_writes: int = 0
    cleared: List[Tuple[str, str]] = field(default_factory=list)

    def summary(self) -> str:
        line = f"{self.account_id}: {self.upserts} written, {self.clears} cleared, {self.failed_writes} failed"
        if self.cleared:
            line += " (" + ", ".join(f"{location}:{sk}" for location, sk in self.cleared) + ")"
        return line


@dataclass
class RunResult:
    """Outcome for a whole run."""
    success: bool = True
    accounts_processed: int = 0
    accounts_skipped: int = 0
    upserts: int = 0
    clears: int = 0
    failed_writes: int = 0
    accounts: List[AccountResult] = field(default_factory=list)

    def add(self, account: AccountResult) -> None:
        self.accounts.append(account)
        self.accounts_processed += 1
        self.upserts += account.upserts
        self.clears += account.clears
        self.failed_writes += account.failed_writes

    def to_dict(self) -> Dict:
        return {
            'success': self.success,
            'accountsProcessed': self.accounts_processed,
            'accountsSkipped': self.accounts_skipped,
            'upserts': self.upserts,
            'clears': self.clears,
            'failedWrites': self.failed_writes,
        }


def parse_account_entry(entry) -> Optional[Tuple[str, List[str]]]:
    """
    Validate one {account_id: [campaign, ...]} entry.

    Returns:
        (account_id, campaign_names) or None if the entry is unusable
    """
    if not isinstance(entry, dict) or len(entry) != 1:
        return None
    account_id, campaign_names = next(iter(entry.items()))
    if not isinstance(account_id, str) or not account_id.strip():
        return None
    if not isinstance(campaign_names, list) or not campaign_names:
        return None
    if not all(isinstance(name, str) for name in campaign_names):
        return None
    if not aggregation_service.normalize_targets(campaign_names):
        return None
    return account_id.strip(), campaign_names


def process_account(
    ctx: UpdateContext,
    account_id: str,
    campaign_names: List[str],
    now: Optional[datetime] = None,
) -> AccountResult:
    """Fetch, aggregate, upsert and reconcile one account."""
    result = AccountResult(account_id=account_id)
    updated = format_timestamp(now)

    campaigns = entity_service.fetch_campaigns(ctx, account_id)
    groups = entity_service.fetch_groups(ctx, account_id)
    categories = entity_service.fetch_categories(ctx, account_id)
    logger.info("%s: %d campaign(s), %d group(s), %d categories",
                account_id, len(campaigns), len(groups), len(categories))

    drafts = aggregation_service.aggregate(campaigns, groups, categories, campaign_names)
    result.aggregates = len(drafts)

    for draft in drafts:
        update = AggregateUpdate.from_draft(draft, updated, account_id)
        if writer_service.upsert(ctx, draft.location, account_id, update):
            result.upserts += 1
        else:
            result.failed_writes += 1

    existing = entity_service.fetch_existing_aggregates(ctx, account_id)

    cleared, failed = reconciliation_service.reconcile(ctx, account_id, drafts, existing, updated)
    result.cleared = [(location.value, sk) for location, sk in cleared]
    result.clears = len(cleared)
    result.failed_writes += failed

    logger.info("%s: %d aggregate(s) written, %d cleared, %d failed write(s)",
                account_id, result.upserts, result.clears, result.failed_writes)
    return result


def update_invite_links(
    ctx: UpdateContext,
    accounts,
    pace_seconds: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """
    Update invite links for every account entry.

    Args:
        ctx: Update context (clients, cache, settings)
        accounts: [{account_id: [campaign name, ...]}, ...]
        pace_seconds: Pause between accounts, defaults to the configured value
        sleep: Pause function (replaced in tests)
    """
    run = RunResult()
    if pace_seconds is None:
        pace_seconds = ctx.settings.pace_seconds

    if not isinstance(accounts, list) or not accounts:
        logger.error("Invalid or empty 'accounts' list")
        run.success = False
        return run

    try:
        for entry in accounts:
            parsed = parse_account_entry(entry)
            if parsed is None:
                logger.warning("Skipping invalid account entry: %r", entry)
                run.accounts_skipped += 1
                continue

            if run.accounts_processed and pace_seconds > 0:
                sleep(pace_seconds)

            account_id, campaign_names = parsed
            run.add(process_account(ctx, account_id, campaign_names))
    except Exception:
        logger.exception("Error updating invite links")
        run.success = False

    logger.info("Invite link run finished: %s", run.to_dict())
    return run
