#!/usr/bin/env python3
"""
Set a new password for a LawnCare Pro user.

Existing passwords are never read back; the script only stores a fresh
PBKDF2 hash for the given username.  The database defaults to the one
the API uses (``DATABASE_URL``).

Usage:
    python reset_password.py --username lawnlover --password "NewStrongPass!234"
    python reset_password.py --db /srv/lawn_care.db --username lawnlover

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import os
import sys
from typing import List, Optional

from lawn_care_api.app.core.config import settings
from lawn_care_api.app.core.db import get_connection, get_database_path
from lawn_care_api.app.core.security import hash_password


def reset_password(username: str, new_password: str) -> bool:
    """Store a new hash for ``username``; ``False`` if no such user exists."""
    conn = get_connection()
    try:
        cursor = conn.execute(
            "UPDATE users SET hashed_password = ? WHERE username = ?",
            (hash_password(new_password), username),
        )
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Reset a LawnCare Pro user's password.")
    ap.add_argument("--db", help="Path to the SQLite database (defaults to DATABASE_URL)")
    ap.add_argument("--username", required=True, help="User to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args(argv)

    if args.db:
        settings.database_url = os.path.abspath(args.db)
    db_path = get_database_path()
    # sqlite3.connect would create an empty file in place of a missing one.
    if not os.path.exists(db_path):
        print(f"[!] DB not found: {db_path}", file=sys.stderr)
        return 1

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        return 1

    if not reset_password(args.username, new_password):
        print(f"[!] No user found with username: {args.username}", file=sys.stderr)
        return 2
    print(f"[+] Password updated for user: {args.username}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
