"""
Utility functions for key building and normalisation
"""
import math
import re
from datetime import datetime, timezone
from typing import Optional

_WHITESPACE = re.compile(r'\s')


def normalize_campaign(value) -> str:
    """
    Normalise a campaign name or identity for matching.
    Removes all whitespace (not just the ends) and lower-cases:
    "Summer Sale" -> "summersale"
    """
    if value is None:
        return ""
    return _WHITESPACE.sub('', str(value)).lower()


def normalize_category(value) -> str:
    """Normalise a category identity for matching."""
    if value is None:
        return ""
    return str(value).lower()


def build_sort_key(campaign_key: str, category_key: Optional[str] = None) -> str:
    """
    Build the aggregate identity.

    Returns CAMPAIGN for the no-category bucket, CAMPAIGN#CATEGORY otherwise.
    """
    campaign_part = _WHITESPACE.sub('', campaign_key).upper()
    if not category_key:
        return campaign_part
    return f"{campaign_part}#{_WHITESPACE.sub('', category_key).upper()}"


def account_table_name(account_id: str) -> str:
    """Per-account tables are addressed by the lower-cased account id."""
    return account_id.strip().lower()


def account_sk(account_id: str) -> str:
    """Account identity as stored on aggregate records."""
    return account_id.strip().upper()


def format_timestamp(value: Optional[datetime] = None) -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision:
    2024-05-01T12:30:45.123Z
    """
    if value is None:
        value = datetime.now(timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"


def to_number(value, default: float = 0) -> float:
    """Coerce a member count to a number, falling back to default."""
    if value is None or value == '' or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (ValueError, TypeError):
        return default
    if math.isnan(number):
        return default
    return number
