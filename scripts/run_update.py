"""
Scheduled runner for the invite-link update

This script can be run via:
1. Linux cron
2. Windows Task Scheduler
3. GitHub Actions

Usage:
    python scripts/run_update.py --accounts-file accounts.json
    python scripts/run_update.py --account ACC1 --campaign "Summer Sale"

accounts.json holds the same list the Lambda receives:
    [{"ACC1": ["Summer Sale", "Winter Sale"]}, {"ACC2": ["Launch"]}]
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from invite_links import configure_logging
from invite_links.config import ConfigurationError, load_settings
from invite_links.services.context import UpdateContext
from invite_links.services.orchestrator import update_invite_links

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rebuild WhatsApp invite-link aggregates")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--accounts-file", type=Path, help="JSON file with the accounts list")
    source.add_argument("--account", help="Single account to process")
    parser.add_argument("--campaign", action="append", default=[],
                        help="Campaign for --account (repeatable)")
    parser.add_argument("--env-file", type=Path, default=None, help=".env file to load")
    parser.add_argument("--no-pace", action="store_true", help="Do not pause between accounts")
    parser.add_argument("--log-file", action="store_true",
                        help="Also log to update_run_<date>.log")
    return parser


def load_accounts(args: argparse.Namespace) -> list:
    """Accounts list from the file or the --account/--campaign flags."""
    if args.accounts_file is not None:
        with open(args.accounts_file, encoding="utf-8") as f:
            accounts = json.load(f)
        if not isinstance(accounts, list):
            raise ValueError(f"{args.accounts_file} must contain a JSON list")
        return accounts

    if not args.campaign:
        raise ValueError("--account needs at least one --campaign")
    return [{args.account: list(args.campaign)}]


def run_update(argv=None) -> bool:
    """Run the invite-link update; returns True on success."""
    args = build_parser().parse_args(argv)

    handlers = [logging.StreamHandler()]
    if args.log_file:
        handlers.append(logging.FileHandler(f'update_run_{datetime.now().strftime("%Y%m%d")}.log'))
    configure_logging("INFO", handlers)

    try:
        settings = load_settings(str(args.env_file) if args.env_file else None)
        accounts = load_accounts(args)
    except (ConfigurationError, ValueError, OSError) as e:
        logger.error("Cannot start update: %s", e)
        return False

    logging.getLogger().setLevel(settings.log_level)

    logger.info("=" * 60)
    logger.info("INVITE LINK UPDATE STARTED")
    logger.info(f"Time: {datetime.now().isoformat()}")
    logger.info(f"Accounts: {len(accounts)}")
    logger.info("=" * 60)

    ctx = UpdateContext.from_settings(settings)
    result = update_invite_links(ctx, accounts, pace_seconds=0 if args.no_pace else None)

    logger.info("=" * 60)
    logger.info("INVITE LINK UPDATE %s", "COMPLETED SUCCESSFULLY" if result.success else "FAILED")
    for account in result.accounts:
        logger.info(account.summary())
    logger.info(json.dumps(result.to_dict()))
    logger.info("=" * 60)

    return result.success


if __name__ == "__main__":
    success = run_update()
    sys.exit(0 if success else 1)
