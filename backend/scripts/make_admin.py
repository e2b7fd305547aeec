"""
scripts/make_admin.py

Promote an existing user to admin.

The owner request record of the user is cleared; admin is assigned
statically and never goes through the owner approval workflow.
"""
import argparse
import sys
import logging
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.database import SessionLocal, init_db
from app.logging_config import setup_logging
from app.models.ontology import AccountState
from app.services.owner_access_service import OwnerAccessService
from app.services.user_service import UserService


logger = logging.getLogger(__name__)


def make_admin(email: str) -> int:
    """
    Promote the user with the given email

    Returns:
        Exit code (0 = promoted or already admin, 1 = user not found)
    """
    init_db()
    db = SessionLocal()
    try:
        user = UserService(db).get_user_by_email(email)
        if not user:
            logger.error(f"User with email {email} not found")
            return 1

        if user.account_state == AccountState.ADMIN:
            logger.info(f"User {email} is already an admin")
            return 0

        user = OwnerAccessService(db).make_admin(user)
        logger.info(f"Successfully made {email} an admin (id={user.id}, name={user.name})")
        return 0
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Promote a user to admin")
    parser.add_argument("email", help="Email of the user to promote")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    args = parser.parse_args()

    setup_logging(args.log_level)
    return make_admin(args.email)


if __name__ == "__main__":
    sys.exit(main())
