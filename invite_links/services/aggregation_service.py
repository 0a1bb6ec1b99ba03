"""
Aggregation Service - build ranked invite-link aggregates from raw entities

Pure functions: no storage access. Given an account's campaigns, groups and
categories plus the campaign names requested for this run, produce one
draft per (campaign, category) bucket with at most MAX_INVITE_CODES codes,
smallest groups first, and the storage location it belongs in.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from ..utils import build_sort_key, normalize_campaign, normalize_category, to_number
from .context import StorageLocation


MAX_INVITE_CODES = 10

BucketKey = Tuple[str, Optional[str]]


@dataclass
class AggregateDraft:
    """One invite-link record to be written this run."""
    sk: str
    campaign: str
    category: str
    domain: str
    invite_codes: List[str] = field(default_factory=list)
    location: StorageLocation = StorageLocation.SHARED


def normalize_targets(campaign_names: Iterable[str]) -> List[str]:
    """Normalised, de-duplicated campaign keys in request order."""
    targets = []
    for name in campaign_names:
        key = normalize_campaign(name)
        if key and key not in targets:
            targets.append(key)
    return targets


def find_campaign(campaigns: List[Dict], campaign_key: str) -> Optional[Dict]:
    """Campaign item whose SK matches the normalised key, if any."""
    for campaign in campaigns:
        if normalize_campaign(campaign.get('SK')) == campaign_key:
            return campaign
    return None


def campaign_domain(campaign: Optional[Dict]) -> str:
    """Custom invite-link domain of a campaign ('' when none)."""
    if not campaign:
        return ""
    return str(campaign.get('DomainWhatsAppInviteLinks') or "")


def is_publishable(group: Dict) -> bool:
    value = group.get('Publishable')
    if isinstance(value, str):
        return value.strip().lower() == 'true'
    return bool(value)


def group_invite(group: Dict) -> str:
    """Invite code, falling back to the full invite link."""
    return group.get('InviteCode') or group.get('InviteLink') or ""


def filter_groups(groups: List[Dict], targets: List[str], categories: List[Dict]) -> List[Dict]:
    """
    Groups eligible for aggregation.

    A group must be publishable, carry an invite code or link, belong to a
    requested campaign, and either have no category or one that exists.
    """
    valid_categories = {normalize_category(c.get('SK')) for c in categories if c.get('SK')}
    target_set = set(targets)

    eligible = []
    for group in groups:
        if not is_publishable(group) or not group_invite(group):
            continue
        campaign = group.get('Campaign')
        if not campaign or normalize_campaign(campaign) not in target_set:
            continue
        category = group.get('Category')
        if category and normalize_category(category) not in valid_categories:
            continue
        eligible.append(group)
    return eligible


def bucket_groups(groups: List[Dict]) -> "OrderedDict[BucketKey, List[Dict]]":
    """Split groups by (campaign, category); None marks the no-category bucket."""
    buckets: "OrderedDict[BucketKey, List[Dict]]" = OrderedDict()
    for group in groups:
        category = group.get('Category')
        key = (
            normalize_campaign(group['Campaign']),
            normalize_category(category) if category else None,
        )
        buckets.setdefault(key, []).append(group)
    return buckets


def rank_groups(groups: List[Dict], limit: int = MAX_INVITE_CODES) -> List[Dict]:
    """Smallest groups first (stable on ties), truncated to limit."""
    return sorted(groups, key=lambda g: to_number(g.get('Members')))[:limit]


def format_invite_code(group: Dict) -> str:
    return f"{group.get('SK', '')}|{group.get('Name', '')}|{group_invite(group)}"


def aggregate(
    campaigns: List[Dict],
    groups: List[Dict],
    categories: List[Dict],
    campaign_names: Iterable[str],
) -> List[AggregateDraft]:
    """
    Build the aggregates for one account.

    Args:
        campaigns: CAMPAIGN items of the account
        groups: WHATSAPP#GROUP items of the account
        categories: WHATSAPP#GROUPCATEGORY items of the account
        campaign_names: Campaigns requested for this run (display names)

    Returns:
        Drafts in first-seen bucket order
    """
    targets = normalize_targets(campaign_names)
    eligible = filter_groups(groups, targets, categories)

    drafts = []
    for (campaign_key, category_key), bucket in bucket_groups(eligible).items():
        ranked = rank_groups(bucket)
        domain = campaign_domain(find_campaign(campaigns, campaign_key))
        drafts.append(AggregateDraft(
            sk=build_sort_key(campaign_key, category_key),
            campaign=str(ranked[0].get('Campaign', '')),
            category=category_key or "",
            domain=domain,
            invite_codes=[format_invite_code(g) for g in ranked],
            location=StorageLocation.ACCOUNT if domain else StorageLocation.SHARED,
        ))
    return drafts
