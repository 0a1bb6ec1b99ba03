"""
Reconciliation Service - clear invite-link records no longer produced
"""
import logging
from typing import Iterable, List, Set, Tuple

from .aggregation_service import AggregateDraft
from .context import StorageLocation, UpdateContext
from .entity_service import ExistingAggregate
from . import writer_service

logger = logging.getLogger(__name__)

Produced = Set[Tuple[StorageLocation, str]]


def produced_identities(drafts: Iterable[AggregateDraft]) -> Produced:
    """(location, SK) pairs written this run."""
    return {(draft.location, draft.sk) for draft in drafts}


def find_stale(existing: Iterable[ExistingAggregate], produced: Produced) -> List[ExistingAggregate]:
    """
    Records that should be emptied.

    Matching is per location: a record only survives where it was written
    this run, so an aggregate that moved between the shared and account
    tables is cleared at its old location. Records that are already empty
    are left alone.
    """
    stale = []
    seen = set()
    for record in existing:
        identity = (record.location, record.sk)
        if not record.sk or identity in produced or identity in seen:
            continue
        seen.add(identity)
        if not record.item.get('InviteCodes'):
            continue
        stale.append(record)
    return stale


def reconcile(
    ctx: UpdateContext,
    account_id: str,
    drafts: Iterable[AggregateDraft],
    existing: Iterable[ExistingAggregate],
    updated: str,
) -> Tuple[List[Tuple[StorageLocation, str]], int]:
    """
    Clear every previously published record this run did not produce.

    Returns:
        (cleared (location, SK) pairs, number of failed clears)
    """
    cleared = []
    failed = 0
    for record in find_stale(existing, produced_identities(drafts)):
        ok = writer_service.clear(
            ctx,
            record.location,
            account_id,
            record.sk,
            updated,
            campaign=record.item.get('Campaign', ""),
            category=record.item.get('Category', ""),
        )
        if ok:
            cleared.append((record.location, record.sk))
            logger.info("Cleared stale invite links %s (%s) for %s", record.sk, record.location.value, account_id)
        else:
            failed += 1
    return cleared, failed
