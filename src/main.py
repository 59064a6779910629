"""Command line administration for the Science Carnival backend.

Usage:
    python src/main.py create-admin   Interactively create an admin account.
    python src/main.py bootstrap      Seed the default admin, settings and wiki.
"""

import logging
import sys
from getpass import getpass

from core.database import SessionLocal
from core.exceptions import DuplicateUsernameError
from utils.bootstrap import bootstrap
from utils.db_storage import DatabaseStorage
from utils.user_manager import UserManager

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def print_usage() -> None:
    print(__doc__.strip())


def create_admin() -> int:
    """Prompt for account details and create an admin in the database.

    Returns:
        Process exit code.
    """
    username = input("Username: ").strip()
    if not username:
        print("Username is required.")
        return 1
    first_name = input("First name (optional): ").strip() or None
    last_name = input("Last name (optional): ").strip() or None
    email = input("Email (optional): ").strip() or None

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if not pw1:
        print("Password is required.")
        return 1
    if pw1 != pw2:
        print("Passwords do not match.")
        return 1

    db = SessionLocal()
    try:
        storage = DatabaseStorage(db)
        if storage.get_user_by_username(username) is not None:
            print(f"User '{username}' already exists.")
            return 1
        user = UserManager(storage).create_user(
            username=username,
            password=pw1,
            role="admin",
            first_name=first_name,
            last_name=last_name,
            email=email,
        )
    except DuplicateUsernameError as e:
        print(str(e))
        return 1
    finally:
        db.close()

    print(f"Admin '{user.username}' created with id {user.id}.")
    return 0


def run_bootstrap() -> int:
    db = SessionLocal()
    try:
        report = bootstrap(DatabaseStorage(db))
    finally:
        db.close()
    print(
        f"admin created: {report.admin_created}, "
        f"settings created: {report.settings_created}, "
        f"wiki articles created: {report.wiki_articles_created}"
    )
    return 0


COMMANDS = {
    "create-admin": create_admin,
    "bootstrap": run_bootstrap,
}


def main() -> None:
    """Main entry point."""
    if len(sys.argv) != 2 or sys.argv[1] not in COMMANDS:
        print_usage()
        sys.exit(2)

    try:
        sys.exit(COMMANDS[sys.argv[1]]())
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)
    except Exception as e:
        logger.error("Command failed: %s", e)
        raise


if __name__ == "__main__":
    main()
