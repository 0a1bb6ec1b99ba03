"""
Tests for the scheduled runner script.
"""
import json
import logging
from unittest.mock import patch

import pytest

import run_update
from invite_links.services.orchestrator import RunResult

from factories import ACCOUNT, group, invite_record, put_items


def test_accounts_from_flags():
    args = run_update.build_parser().parse_args(["--account", ACCOUNT, "--campaign", "A", "--campaign", "B"])

    assert run_update.load_accounts(args) == [{ACCOUNT: ["A", "B"]}]


def test_account_without_campaign_is_rejected():
    args = run_update.build_parser().parse_args(["--account", ACCOUNT])

    with pytest.raises(ValueError):
        run_update.load_accounts(args)


def test_accounts_from_file(tmp_path):
    path = tmp_path / "accounts.json"
    path.write_text(json.dumps([{ACCOUNT: ["Summer Sale"]}]))
    args = run_update.build_parser().parse_args(["--accounts-file", str(path)])

    assert run_update.load_accounts(args) == [{ACCOUNT: ["Summer Sale"]}]


def test_source_is_required():
    with pytest.raises(SystemExit):
        run_update.build_parser().parse_args([])


def test_missing_table_setting_fails_fast(monkeypatch):
    monkeypatch.delenv("AMAZON_DYNAMODB_TABLE", raising=False)

    with patch.object(run_update, "update_invite_links") as run:
        assert run_update.run_update(["--account", ACCOUNT, "--campaign", "A"]) is False

    run.assert_not_called()


def test_run_without_pacing(monkeypatch):
    monkeypatch.setenv("AMAZON_DYNAMODB_TABLE", "InviteLinksTable")
    monkeypatch.setenv("AMAZON_MAIN_REGION", "us-east-1")

    with patch.object(run_update, "update_invite_links", return_value=RunResult()) as run:
        assert run_update.run_update(["--account", ACCOUNT, "--campaign", "A", "--no-pace"]) is True

    assert run.call_args.kwargs["pace_seconds"] == 0


def test_full_run_against_moto(monkeypatch, shared_table, account_table):
    monkeypatch.setenv("AMAZON_DYNAMODB_TABLE", "InviteLinksTable")
    monkeypatch.setenv("AMAZON_MAIN_REGION", "us-east-1")
    monkeypatch.setenv("INVITE_LINKS_PACE_SECONDS", "0")
    put_items(account_table, [group("g1", invite_code="X1")])

    assert run_update.run_update(["--account", ACCOUNT, "--campaign", "Summer Sale"]) is True

    item = shared_table.get_item(Key={"PK": "WHATSAPP#INVITELINKS", "SK": "SUMMERSALE"})["Item"]
    assert item["InviteCodes"] == ["g1|Group g1|X1"]


def test_summary_lists_cleared_records(monkeypatch, caplog, shared_table, account_table):
    monkeypatch.setenv("AMAZON_DYNAMODB_TABLE", "InviteLinksTable")
    monkeypatch.setenv("AMAZON_MAIN_REGION", "us-east-1")
    put_items(shared_table, [invite_record("SUMMERSALE#SPORTS", ["old|Old|s"])])
    put_items(account_table, [group("g1", invite_code="X1")])

    with caplog.at_level(logging.INFO):
        assert run_update.run_update(["--account", ACCOUNT, "--campaign", "Summer Sale", "--no-pace"]) is True

    assert "ACC1: 1 written, 1 cleared, 0 failed (shared:SUMMERSALE#SPORTS)" in caplog.text
