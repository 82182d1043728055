import argparse
import getpass
import logging
import os
import sys
from pathlib import Path

from church_site.adapters.auth.crypto import JWTAuthAdapter
from church_site.adapters.auth.session_store import InMemorySessionStore
from church_site.adapters.clock import SystemClock
from church_site.adapters.sqlite.migrator import SQLiteMigrator
from church_site.adapters.sqlite.repos import SQLiteAdminRepo, SQLitePostRepo, SQLiteUserRepo
from church_site.components.posts import PostConfig, PostLifecycleManager, PromoteDueInput
from church_site.rules.loader import load_rules
from church_site.rules.models import Rules
from church_site.services.auth import AuthService, provision_admin

logger = logging.getLogger("cli")

DATA_DIR = os.environ.get("CHURCH_DATA_DIR", "./data")
DB_PATH = str(Path(DATA_DIR) / "church.db")
RULES_PATH = os.environ.get("CHURCH_RULES_PATH", "rules.yaml")


def get_rules() -> Rules:
    path = Path(RULES_PATH)
    if not path.exists():
        logger.error("Rules file %s not found.", path)
        sys.exit(1)
    return load_rules(path)


def handle_migrate(args: argparse.Namespace) -> None:
    os.makedirs(DATA_DIR, exist_ok=True)
    applied = SQLiteMigrator(DB_PATH).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_promote_due(args: argparse.Namespace) -> int:
    """Publish scheduled posts that are due. Meant to be run from cron."""
    rules = get_rules()
    manager = PostLifecycleManager(
        SQLitePostRepo(DB_PATH),
        SystemClock(),
        PostConfig(
            excerpt_max_length=rules.posts.excerpt_max_length,
            types=tuple(rules.posts.types),
            categories=tuple(rules.posts.categories),
        ),
    )
    result = manager.promote_due(PromoteDueInput())
    for error in result.errors:
        logger.error("%s: %s", error.code, error.message)
    print(f"Published {result.count} scheduled post(s).")
    return 0 if result.success else 1


def handle_create_admin(args: argparse.Namespace) -> int:
    """Create a login for `email` (if it has none) and grant it an admin role."""
    rules = get_rules()
    if args.role not in rules.auth.admin_roles:
        logger.warning("Role %r does not grant admin access.", args.role)

    user_repo = SQLiteUserRepo(DB_PATH)
    if user_repo.get_by_email(args.email) is None:
        password = args.password or getpass.getpass("Password: ")
        if not password:
            logger.error("A password is required for a new login.")
            return 1
        service = AuthService(
            user_repo,
            JWTAuthAdapter(),
            InMemorySessionStore(),
            SystemClock(),
            rules.auth.sessions.ttl_minutes,
        )
        service.create_user(args.email, password, args.name)
        print(f"Created login for {args.email}.")

    record = provision_admin(SQLiteAdminRepo(DB_PATH), args.email, args.name, args.role)
    print(f"{record.email} is now '{record.role}'.")
    return 0


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Church site CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")
    subparsers.add_parser("promote-due", help="Publish scheduled posts that are due")

    admin_parser = subparsers.add_parser("create-admin", help="Grant admin access to an email")
    admin_parser.add_argument("email")
    admin_parser.add_argument("--name", help="Display name")
    admin_parser.add_argument("--role", default="admin", help="admin or super_admin")
    admin_parser.add_argument("--password", help="Password for a new login (prompted if omitted)")

    args = parser.parse_args(argv)

    if args.command == "migrate":
        handle_migrate(args)
    elif args.command == "promote-due":
        sys.exit(handle_promote_due(args))
    elif args.command == "create-admin":
        sys.exit(handle_create_admin(args))


if __name__ == "__main__":
    main()
