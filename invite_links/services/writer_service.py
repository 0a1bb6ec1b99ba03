"""
Writer Service - partial upserts of invite-link records

Only attributes that are explicitly present are written, so a clear
(InviteCodes -> []) never wipes Domain or AccountSK. Campaign and Category
are always written to keep every record the same shape.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from ..utils import account_sk
from .aggregation_service import AggregateDraft
from .context import INVITE_LINKS_PK, StorageLocation, UpdateContext

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()


@dataclass
class AggregateUpdate:
    """
    Partial update for one record.

    UNSET means "leave the stored value alone"; an empty string or list
    is written as-is.
    """
    sk: str
    campaign: str = ""
    category: str = ""
    domain: Any = UNSET
    invite_codes: Any = UNSET
    updated: Any = UNSET
    account_sk: Any = UNSET

    @classmethod
    def from_draft(cls, draft: AggregateDraft, updated: str, account_id: str) -> "AggregateUpdate":
        update = cls(
            sk=draft.sk,
            campaign=draft.campaign,
            category=draft.category,
            domain=draft.domain,
            invite_codes=list(draft.invite_codes),
            updated=updated,
        )
        # Shared records are attributed to their account
        if draft.location == StorageLocation.SHARED:
            update.account_sk = account_sk(account_id)
        return update

    @classmethod
    def clear(cls, sk: str, updated: str, campaign: str = "", category: str = "") -> "AggregateUpdate":
        return cls(sk=sk, campaign=campaign, category=category, invite_codes=[], updated=updated)

    @property
    def key(self) -> Dict[str, str]:
        return {'PK': INVITE_LINKS_PK, 'SK': self.sk}

    def attributes(self) -> Dict[str, Any]:
        """Attributes this update writes, keyed by attribute name."""
        attributes = {
            'Campaign': self.campaign or "",
            'Category': self.category or "",
        }
        if self.account_sk is not UNSET:
            attributes['AccountSK'] = self.account_sk
        if self.domain is not UNSET:
            attributes['Domain'] = self.domain or ""
        if self.invite_codes is not UNSET:
            attributes['InviteCodes'] = list(self.invite_codes or [])
        if self.updated is not UNSET:
            attributes['Updated'] = self.updated
        return attributes


def build_update_expression(update: AggregateUpdate) -> Tuple[str, Dict[str, Any], Dict[str, str]]:
    """
    Build the SET expression for an update.

    Returns:
        (UpdateExpression, ExpressionAttributeValues, ExpressionAttributeNames)
    """
    parts = []
    values: Dict[str, Any] = {}
    names: Dict[str, str] = {}

    for index, (name, value) in enumerate(update.attributes().items()):
        # Aliased so reserved words (Domain) are safe
        name_alias = f"#a{index}"
        value_alias = f":v{index}"
        names[name_alias] = name
        values[value_alias] = value
        parts.append(f"{name_alias} = {value_alias}")

    return "SET " + ", ".join(parts), values, names


def upsert(ctx: UpdateContext, location: StorageLocation, account_id: str, update: AggregateUpdate) -> bool:
    """
    Write an update to the primary region, mirroring to the secondary
    region when one is configured.

    Returns:
        True if the primary write was acknowledged
    """
    table_name = ctx.table_for(location, account_id)
    expression, values, names = build_update_expression(update)

    try:
        success = ctx.primary.update_item(table_name, update.key, expression, values, names)
    except (ClientError, BotoCoreError) as e:
        logger.warning("Could not update %s in %s: %s", update.sk, table_name, e)
        return False

    if not success:
        logger.warning("Update of %s in %s was not acknowledged", update.sk, table_name)
        return False

    if ctx.secondary is not None:
        try:
            if not ctx.secondary.update_item(table_name, update.key, expression, values, names):
                logger.warning("Mirror update of %s in %s (%s) was not acknowledged",
                               update.sk, table_name, ctx.secondary.region_name)
        except (ClientError, BotoCoreError) as e:
            logger.warning("Mirror update of %s in %s (%s) failed: %s",
                           update.sk, table_name, ctx.secondary.region_name, e)

    if location == StorageLocation.SHARED:
        ctx.cache.merge_on_write(update.sk, {**update.key, **update.attributes()})

    logger.debug("Updated %s in %s", update.sk, table_name)
    return True


def clear(ctx: UpdateContext, location: StorageLocation, account_id: str, sk: str, updated: str,
          campaign: str = "", category: str = "") -> bool:
    """Empty a record's InviteCodes without deleting it."""
    return upsert(ctx, location, account_id, AggregateUpdate.clear(sk, updated, campaign, category))
