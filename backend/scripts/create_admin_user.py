#!/usr/bin/env python3
import argparse
import os
import secrets
import sys
from pathlib import Path
from typing import List, Optional

REPO_BACKEND = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_BACKEND))

from purdetall.services.database import Database  # noqa: E402
from purdetall.services.errors import StoreError  # noqa: E402
from purdetall.services.user_store import UserStore  # noqa: E402
from purdetall.settings import load_settings  # noqa: E402


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create the initial PurDetall admin account.")
    parser.add_argument("--username", default="admin", help="Admin username.")
    parser.add_argument("--email", default="admin@purdetall.es", help="Admin email address.")
    parser.add_argument(
        "--password",
        default=os.getenv("ADMIN_PASSWORD", ""),
        help="Admin password (defaults to ADMIN_PASSWORD, or a generated one).",
    )
    parser.add_argument("--db-path", default="", help="Override SITE_DB_PATH.")
    args = parser.parse_args(argv)

    settings = load_settings(db_path=args.db_path or None)
    users = UserStore(Database(settings.db_path), bcrypt_rounds=settings.bcrypt_rounds)

    existing = users.find(args.username, args.email)
    if existing is not None:
        print(f"Admin user already exists: {existing['username']} <{existing['email']}>")
        return 0

    password = args.password or secrets.token_urlsafe(12)
    try:
        user_id = users.create_user(args.username, args.email, password, role="admin")
    except StoreError as exc:
        print(f"Could not create admin user: {exc}")
        return 1

    print(f"Created admin user id={user_id} username={args.username}")
    if not args.password:
        print(f"Generated password: {password}")
    print("Change this password from the admin panel after the first login.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
