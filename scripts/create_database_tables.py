"""
Create Database Tables Using SQLAlchemy

This script creates all database tables directly using SQLAlchemy's create_all()
method. This bypasses Alembic migrations and is useful for local setup and
testing. It can also create the first admin account, since admins cannot
self-register through the API.
"""
import argparse
import getpass
import sys
from pathlib import Path

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

import sqlalchemy as sa

from src.estatedesk.api.auth import get_password_hash
from src.estatedesk.core.enums import AccountStatus, UserRole
from src.estatedesk.db.repository import UserRepository
from src.estatedesk.db.session import create_all_tables, drop_all_tables, engine, get_db_session
from src.estatedesk.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def create_admin(email: str, password: str, first_name: str, last_name: str) -> None:
    """Create an admin account, or promote an existing account to admin."""
    repository = UserRepository()
    with get_db_session() as session:
        user = repository.get_by_email(session, email)
        if user is not None:
            user.role = UserRole.ADMIN.value
            logger.info("admin_promoted", user_id=user.id, email=user.email)
            return

        user = repository.create(
            session,
            first_name=first_name,
            last_name=last_name,
            email=email.strip().lower(),
            hashed_password=get_password_hash(password),
            role=UserRole.ADMIN.value,
            status=AccountStatus.ACTIVE.value,
        )
        logger.info("admin_created", user_id=user.id, email=user.email)


def main():
    """Create all database tables."""
    parser = argparse.ArgumentParser(description="Create EstateDesk database tables")
    parser.add_argument(
        '--reset',
        action='store_true',
        help='Drop existing tables first (deletes all data)'
    )
    parser.add_argument('--admin-email', help='Create an admin account with this email')
    parser.add_argument('--admin-password', help='Admin password (prompted if omitted)')
    parser.add_argument('--admin-first-name', default='System')
    parser.add_argument('--admin-last-name', default='Admin')
    args = parser.parse_args()

    setup_logging()
    logger.info("database_setup_started", url=engine.url.render_as_string(hide_password=True))

    existing = sa.inspect(engine).get_table_names()
    if existing and args.reset:
        logger.warning("dropping_existing_tables", count=len(existing))
        drop_all_tables()

    create_all_tables()

    # Verify tables were created
    tables = sorted(sa.inspect(engine).get_table_names())
    logger.info("database_tables_verified", count=len(tables), tables=tables)

    if args.admin_email:
        password = args.admin_password or getpass.getpass("Admin password: ")
        if len(password) < 6:
            logger.error("admin_password_too_short")
            sys.exit(1)
        create_admin(args.admin_email, password, args.admin_first_name, args.admin_last_name)

    logger.info("database_setup_complete")


if __name__ == "__main__":
    main()
