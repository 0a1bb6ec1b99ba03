"""
Aggregate Cache - read-through cache of shared-table invite-link records

The first read scans the shared table once; every successful write to the
shared table is merged back in, so later reads in the same run never hit
DynamoDB again. Per-account tables are never cached.
"""
import copy
import logging
import threading
from typing import Dict, List, Optional

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class AggregateCache:
    """Sort key -> last known aggregate record for the shared table."""

    def __init__(self, db, table_name: str, partition_key: str):
        self._db = db
        self._table_name = table_name
        self._partition_key = partition_key
        self._items: Dict[str, Dict] = {}
        self._loaded = False
        self._lock = threading.RLock()
        self.enabled = True

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> bool:
        """
        Populate the cache with a full scan if not done yet.

        Returns:
            True if the cache can serve reads, False if it is disabled
        """
        with self._lock:
            if not self.enabled:
                return False
            if self._loaded:
                return True

            try:
                items = self._db.scan_all(
                    self._table_name,
                    filter_expression=Attr('PK').eq(self._partition_key),
                )
            except (ClientError, BotoCoreError) as e:
                logger.warning("Aggregate cache disabled, scan of %s failed: %s", self._table_name, e)
                self.enabled = False
                return False

            self._items = {item['SK']: item for item in items if item.get('SK')}
            self._loaded = True
            logger.info("Aggregate cache loaded %d record(s) from %s", len(self._items), self._table_name)
            return True

    def get(self, sk: str) -> Optional[Dict]:
        """Cached record for a sort key, or None."""
        if not self.load():
            return None
        with self._lock:
            item = self._items.get(sk)
            return copy.deepcopy(item) if item is not None else None

    def items(self) -> List[Dict]:
        """All cached records."""
        if not self.load():
            return []
        with self._lock:
            return [copy.deepcopy(item) for item in self._items.values()]

    def items_for_account(self, account_sk: str) -> List[Dict]:
        """Cached records attributed to one account (AccountSK)."""
        return [item for item in self.items() if item.get('AccountSK') == account_sk]

    def merge_on_write(self, sk: str, attributes: Dict) -> None:
        """
        Fold a successful partial update into the cached record.

        Attributes in the write overwrite; anything the write did not set
        keeps its previously cached value.
        """
        with self._lock:
            # Not scanned yet: the eventual scan will see the write anyway
            if not self.enabled or not self._loaded:
                return
            previous = self._items.get(sk, {})
            merged = dict(previous)
            merged.update(copy.deepcopy(attributes))
            self._items[sk] = merged

    def invalidate_all(self) -> None:
        """Drop everything; the next read rescans (unless disabled)."""
        with self._lock:
            self._items = {}
            self._loaded = False
