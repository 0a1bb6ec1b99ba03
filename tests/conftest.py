"""
Shared fixtures: a moto-backed DynamoDB with the shared invite-links
table and one account table.
"""
import sys
from pathlib import Path

import boto3
import pytest
from moto import mock_aws

from invite_links.config import Settings
from invite_links.services.context import UpdateContext

# scripts/ is not a package
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

from factories import ACCOUNT, REGION, SHARED_TABLE, create_table  # noqa: E402


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    """Fake credentials so nothing can reach a real AWS account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)


@pytest.fixture
def settings():
    return Settings(table_name=SHARED_TABLE, region=REGION, pace_seconds=0)


@pytest.fixture
def dynamodb():
    with mock_aws():
        yield boto3.resource("dynamodb", region_name=REGION)


@pytest.fixture
def shared_table(dynamodb):
    return create_table(dynamodb, SHARED_TABLE)


@pytest.fixture
def account_table(dynamodb):
    return create_table(dynamodb, ACCOUNT.lower())


@pytest.fixture
def ctx(settings, shared_table, account_table):
    return UpdateContext.from_settings(settings)
