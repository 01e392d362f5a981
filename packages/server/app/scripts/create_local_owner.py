"""
Create a user who owns a fresh organization, for local testing.

Usage:
    python -m app.scripts.create_local_owner --email me@example.com --name Me --password secret123
"""

import argparse
import asyncio

import structlog

from app.core.config import get_settings
from app.core.database import get_session_context, init_db
from app.core.logging import configure_logging
from app.services import users as user_service
from parley_shared.schemas.users import SignupRequest

log = structlog.get_logger()


async def create_owner(email: str, name: str, password: str, create_tables: bool) -> None:
    if create_tables:
        await init_db()

    async with get_session_context() as session:
        existing = await user_service.get_user_by_email(email, session)
        if existing:
            log.info("owner.exists", email=email, user_id=str(existing.id))
            return
        user = await user_service.signup(
            SignupRequest(email=email, name=name, password=password), session
        )
        log.info("owner.created", email=email, user_id=str(user.id))


def run() -> None:
    parser = argparse.ArgumentParser(description="Create a local organization owner.")
    parser.add_argument("--email", required=True, help="Email address for the user")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--password", required=True, help="Password (min 8 characters)")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables first (development databases without migrations)",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level, "console")
    asyncio.run(create_owner(args.email, args.name, args.password, args.create_tables))


if __name__ == "__main__":
    run()
