#!/usr/bin/env python3
"""
Database management commands.
Checks connectivity, creates or drops tables and provisions administrators.
"""

import asyncio
import sys
import argparse
import logging

from app.config import settings
from app.database import (
    AsyncSessionLocal,
    check_database_connection,
    create_tables,
    drop_tables,
    close_db_connection,
)
from app.models.user import UserRole
from app.repositories.user import UserRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class DatabaseManager:
    """Runs one management command against the configured database."""

    async def check(self) -> bool:
        """Round trip to the database."""
        logger.info(f"Checking database connection ({settings.environment})")
        return await check_database_connection()

    async def create_tables(self) -> None:
        await create_tables()

    async def drop_tables(self) -> None:
        logger.warning("Dropping all tables - all data will be lost!")
        await drop_tables()

    async def create_admin(self, email: str, password: str, name: str) -> None:
        """
        Create an administrator, or promote the existing account with this email.
        """
        async with AsyncSessionLocal() as session:
            repo = UserRepository(session)
            existing = await repo.get_by_email(email)

            if existing:
                if existing.role == UserRole.ADMIN:
                    logger.info(f"{email} is already an administrator")
                    return
                await repo.update_fields(existing, {"role": UserRole.ADMIN})
                logger.info(f"Promoted {email} to administrator")
                return

            await repo.create_user({
                "name": name,
                "email": email,
                "password": password,
                "role": UserRole.ADMIN,
            })
            logger.info(f"Administrator created: {email}")


async def run(args: argparse.Namespace) -> int:
    manager = DatabaseManager()
    try:
        if args.command == "check":
            return 0 if await manager.check() else 1

        if args.command == "create-tables":
            await manager.create_tables()

        elif args.command == "drop-tables":
            if not args.confirm:
                print("Dropping tables requires --confirm flag")
                return 1
            await manager.drop_tables()

        elif args.command == "create-admin":
            if len(args.password) < 6:
                print("Password must be at least 6 characters")
                return 1
            await manager.create_admin(args.email, args.password, args.name)

        return 0
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description="Estate Listing API database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("check", help="Check database connectivity")
    subparsers.add_parser("create-tables", help="Create all tables")

    drop_parser = subparsers.add_parser("drop-tables", help="Drop all tables (not in production)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping tables")

    admin_parser = subparsers.add_parser("create-admin", help="Create or promote an administrator")
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--password", required=True)
    admin_parser.add_argument("--name", default="Administrator")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    try:
        exit_code = asyncio.run(run(args))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
