"""
DynamoDB Service - Core connection and utilities
"""
import logging
from decimal import Decimal
from typing import Optional, List, Dict, Any

import boto3
from boto3.dynamodb.conditions import Key, ConditionBase
from botocore.config import Config

logger = logging.getLogger(__name__)

# Retries are left to botocore; callers treat a raised error as a failed step
BOTO_CONFIG = Config(retries={"max_attempts": 5, "mode": "standard"})


def convert_decimals(obj):
    """Recursively convert Decimal objects to int/float."""
    if isinstance(obj, list):
        return [convert_decimals(i) for i in obj]
    elif isinstance(obj, dict):
        return {k: convert_decimals(v) for k, v in obj.items()}
    elif isinstance(obj, Decimal):
        # Convert to int if it's a whole number, otherwise float
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj


def build_session(credentials: Optional[Dict] = None) -> boto3.session.Session:
    """
    Build a boto3 session.

    Credentials are only passed in for controlled tests against a real
    backend; normal runs use the default credential chain.
    """
    if not credentials:
        return boto3.session.Session()
    return boto3.session.Session(
        aws_access_key_id=credentials.get('accessKeyId'),
        aws_secret_access_key=credentials.get('secretAccessKey'),
        aws_session_token=credentials.get('sessionToken'),
    )


class DynamoDBService:
    """DynamoDB operations bound to a single region."""

    def __init__(self, region_name: Optional[str] = None, session: Optional[boto3.session.Session] = None):
        self.session = session or boto3.session.Session()
        self.region_name = region_name or self.session.region_name
        self.dynamodb = self.session.resource('dynamodb', region_name=region_name, config=BOTO_CONFIG)

    def get_table(self, table_name: str):
        """Get a DynamoDB table resource."""
        return self.dynamodb.Table(table_name)

    def query_all(
        self,
        table_name: str,
        partition_key: str,
        sort_key_prefix: Optional[str] = None,
        filter_expression: Optional[ConditionBase] = None,
    ) -> List[Dict]:
        """
        Query every item under a partition key, following LastEvaluatedKey.

        Args:
            table_name: Table to query
            partition_key: Value of PK
            sort_key_prefix: Optional begins_with predicate on SK
            filter_expression: Optional non-key filter

        Returns:
            All matching items with Decimals converted
        """
        table = self.get_table(table_name)
        condition = Key('PK').eq(partition_key)
        if sort_key_prefix:
            condition = condition & Key('SK').begins_with(sort_key_prefix)

        query_kwargs: Dict[str, Any] = {'KeyConditionExpression': condition}
        if filter_expression is not None:
            query_kwargs['FilterExpression'] = filter_expression

        items = []
        page_count = 0
        while True:
            response = table.query(**query_kwargs)
            items.extend(response.get('Items', []))
            page_count += 1

            if 'LastEvaluatedKey' not in response:
                break
            query_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']

        logger.debug("query_all(%s, %s): %d items from %d page(s)", table_name, partition_key, len(items), page_count)
        return convert_decimals(items)

    def scan_all(
        self,
        table_name: str,
        filter_expression: Optional[ConditionBase] = None,
    ) -> List[Dict]:
        """Scan a whole table with full DynamoDB pagination."""
        table = self.get_table(table_name)
        items = []
        scan_kwargs: Dict[str, Any] = {}
        if filter_expression is not None:
            scan_kwargs['FilterExpression'] = filter_expression
        page_count = 0

        while True:
            response = table.scan(**scan_kwargs)
            items.extend(response.get('Items', []))
            page_count += 1

            if 'LastEvaluatedKey' not in response:
                break

            scan_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']

        logger.debug("scan_all(%s): %d items from %d page(s)", table_name, len(items), page_count)
        return convert_decimals(items)

    def update_item(
        self,
        table_name: str,
        key: Dict,
        update_expression: str,
        expression_values: Dict,
        expression_names: Optional[Dict] = None,
    ) -> bool:
        """
        Partial update by primary key.

        Returns True when DynamoDB acknowledges the write with HTTP 200.
        """
        table = self.get_table(table_name)
        update_kwargs: Dict[str, Any] = {
            'Key': key,
            'UpdateExpression': update_expression,
            'ExpressionAttributeValues': expression_values,
        }
        if expression_names:
            update_kwargs['ExpressionAttributeNames'] = expression_names

        response = table.update_item(**update_kwargs)
        status = response.get('ResponseMetadata', {}).get('HTTPStatusCode')
        return status == 200
