"""
Maintenance commands.

    python -m deliveryapp.manage create-tables
    python -m deliveryapp.manage grant-admin owner@loja.com.br
"""
import argparse
import sys

from deliveryapp.config import settings
from deliveryapp.database import create_db_and_tables, engine
from deliveryapp.store import RecordStore


def grant_role(store: RecordStore, email: str, role: str) -> bool:
    user = store.maybe_single("users", email=email.strip().lower())
    if user is None:
        return False
    store.upsert("user_roles", {"user_id": user.id, "role": role}, on_conflict="user_id")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(prog="deliveryapp.manage")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("create-tables", help="create every table that does not exist yet")
    grant = commands.add_parser("grant-admin", help="give an existing account the admin role")
    grant.add_argument("email")

    args = parser.parse_args(argv)

    if args.command == "create-tables":
        create_db_and_tables()
        print("✅ Tables created")
        return 0

    if not grant_role(RecordStore(engine), args.email, settings.ADMIN_ROLE):
        print(f"❌ No account found for {args.email}")
        return 1

    print(f"✅ {args.email} is now {settings.ADMIN_ROLE}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
