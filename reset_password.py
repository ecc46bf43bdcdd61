#!/usr/bin/env python3
"""
Reset a user's password in the Community Platform SQLite database.

This script does not read or reveal any existing password.  It sets a
new PBKDF2 hash, in the same format the API uses, for the given
username.  Use it to recover an administrator account.

Usage:
    python reset_password.py --db ./community_platform_api/community_platform.db --username admin --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import os
import sqlite3
import sys

from community_platform_api.app.core.security import hash_password

MIN_PASSWORD_LENGTH = 6


def main():
    ap = argparse.ArgumentParser(description="Reset a Community Platform user's password (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./community_platform_api/community_platform.db)")
    ap.add_argument("--username", required=True, help="Username to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args()

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        sys.exit(1)

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        print(f"[!] Password must be at least {MIN_PASSWORD_LENGTH} characters.", file=sys.stderr)
        sys.exit(1)

    conn = sqlite3.connect(args.db)
    try:
        cur = conn.cursor()
        cur.execute("SELECT id FROM users WHERE username = ?", (args.username,))
        if not cur.fetchone():
            print(f"[!] No user found with username: {args.username}", file=sys.stderr)
            sys.exit(2)

        cur.execute("UPDATE users SET password = ? WHERE username = ?", (hash_password(new_password), args.username))
        conn.commit()
        print(f"[+] Password updated for user: {args.username}")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
