#!/usr/bin/env python
"""Seed development database with two befriended demo users.

Creates alice and bob (password "password123"), makes them friends, and has
alice send bob a first message.

Constraints:
- Refuses to run in staging or prod (HUDDLE_ENV check)
- Idempotent: existing demo users are left as they are
- Never runs automatically (manual invocation only)

Usage:
    cd python && DATABASE_URL=... python ../scripts/seed_dev.py
"""

import os
import sys

DEMO_PASSWORD = "password123"
DEMO_USERS = (
    ("alice", "alice@x.com", "Alice", "Liddell"),
    ("bob", "bob@x.com", "Bob", "Builder"),
)


def main():
    # 1. Environment check (hard fail in staging/prod)
    huddle_env = os.getenv("HUDDLE_ENV", "local")
    if huddle_env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in HUDDLE_ENV={huddle_env}")
        sys.exit(1)

    # 2. Check DATABASE_URL
    if not os.getenv("DATABASE_URL"):
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    from sqlalchemy import select

    from huddle.db.models import User
    from huddle.db.session import get_session_factory
    from huddle.services import messages as messages_service
    from huddle.services import relationships as relationships_service
    from huddle.services import users as users_service

    db = get_session_factory()()
    try:
        # 3. Users
        ids = {}
        for username, email, first_name, last_name in DEMO_USERS:
            existing = db.scalar(select(User).where(User.username == username))
            if existing is not None:
                ids[username] = existing.id
                print(f"User {username} already exists: {existing.id}")
                continue
            user = users_service.create_user(
                db, username, email, DEMO_PASSWORD, first_name=first_name, last_name=last_name
            )
            ids[username] = user.id
            print(f"Created user {username}: {user.id}")

        # 4. Friendship
        status = relationships_service.status_for(db, ids["alice"], ids["bob"]).status
        if status == "none":
            relationships_service.send_request(db, ids["alice"], ids["bob"])
            relationships_service.accept_request(db, ids["bob"], ids["alice"])
            messages_service.send_message(db, ids["alice"], ids["bob"], "hi")
            print("alice and bob are now friends")
        else:
            print(f"alice -> bob relationship already {status}")
    finally:
        db.close()

    print("\nSeed complete!")
    print(f"Log in as alice@x.com or bob@x.com with password {DEMO_PASSWORD!r}")


if __name__ == "__main__":
    main()
