"""
Tests for environment-driven settings.
"""
import pytest

from invite_links.config import ConfigurationError, Settings, get_api_key


def test_table_name_is_required():
    with pytest.raises(ConfigurationError, match="AMAZON_DYNAMODB_TABLE"):
        Settings.from_env({})


def test_defaults():
    settings = Settings.from_env({"AMAZON_DYNAMODB_TABLE": "InviteLinks"})

    assert settings.table_name == "InviteLinks"
    assert settings.region is None
    assert settings.secondary_region is None
    assert settings.pace_seconds == 1.0
    assert settings.log_level == "INFO"


def test_main_region_wins_over_legacy_name():
    settings = Settings.from_env({
        "AMAZON_DYNAMODB_TABLE": "InviteLinks",
        "AMAZON_MAIN_REGION": "sa-east-1",
        "AMAZON_REGION": "us-east-1",
        "AMAZON_SECONDARY_REGION": "us-east-2",
    })

    assert settings.region == "sa-east-1"
    assert settings.secondary_region == "us-east-2"


def test_secondary_equal_to_primary_is_ignored():
    settings = Settings.from_env({
        "AMAZON_DYNAMODB_TABLE": "InviteLinks",
        "AMAZON_REGION": "us-east-1",
        "AMAZON_SECONDARY_REGION": "us-east-1",
    })

    assert settings.secondary_region is None


@pytest.mark.parametrize("value", ["fast", "-1"])
def test_invalid_pace_is_rejected(value):
    with pytest.raises(ConfigurationError):
        Settings.from_env({"AMAZON_DYNAMODB_TABLE": "InviteLinks", "INVITE_LINKS_PACE_SECONDS": value})


def test_api_key_is_read_separately():
    assert get_api_key({"API_KEY": "k"}) == "k"
    assert get_api_key({"API_KEY": ""}) is None
