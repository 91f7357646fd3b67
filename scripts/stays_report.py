#!/usr/bin/env python3
"""
Print a user's stays from the configured database.

Usage:
    python scripts/stays_report.py u_1a2b3c4d5e6f
    python scripts/stays_report.py --email ann@example.com --stats
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from staly.config import get_settings
from staly.db.database import create_engine, create_session_maker, init_db
from staly.services.auth_service import normalize_email
from staly.services.stats import day_count, share_summary, summarize_stays
from staly.storage.identity_store import IdentityStore
from staly.storage.kv import SqlKeyValueStore
from staly.storage.stay_store import StayStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def resolve_user_id(identity: IdentityStore, user_id: str | None, email: str | None) -> str | None:
    """Use the given id, or look it up from an email account."""
    if user_id:
        return user_id
    accounts = await identity.load_email_accounts()
    account = accounts.get(normalize_email(email or ""))
    return account.id if account else None


async def main_async(user_id: str | None, email: str | None, stats_only: bool = False) -> int:
    """Main async function."""
    settings = get_settings()
    engine = create_engine(settings.database_url)
    kv = SqlKeyValueStore(create_session_maker(engine))

    try:
        await init_db(engine)
        resolved = await resolve_user_id(IdentityStore(kv), user_id, email)
        if resolved is None:
            logger.error(f"No email account for {email}")
            return 1

        stays = await StayStore(kv).load(resolved)

        if stats_only:
            for line in share_summary(summarize_stays(stays)).splitlines():
                logger.info(line)
            return 0

        logger.info(f"{len(stays)} stays for {resolved}:")
        for stay in stays:
            check_out = stay.check_out.isoformat() if stay.check_out else "-"
            logger.info(
                f"  {stay.check_in.isoformat()} .. {check_out}  "
                f"{stay.title} ({stay.city or 'no city'}), {day_count(stay)}d"
            )
        return 0
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(
        description="List a user's stays or their statistics"
    )
    parser.add_argument("user_id", nargs="?", help="Internal user id")
    parser.add_argument("--email", help="Resolve the user from an email account")
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Only show the summary statistics",
    )

    args = parser.parse_args()
    if not args.user_id and not args.email:
        parser.error("give a user id or --email")
    sys.exit(asyncio.run(main_async(args.user_id, args.email, stats_only=args.stats)))


if __name__ == "__main__":
    main()
