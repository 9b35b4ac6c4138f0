#!/usr/bin/env python3
"""
Maintenance commands.

Usage:
    python manage.py create-user <email> <name> <password> [role]
    python manage.py clear-cache     # Drop every cached query result
    python manage.py purge-cache     # Drop expired cache entries only
"""

import asyncio
import sys

from app.container import container
from settings.logging import setup_logging

logger = setup_logging()


async def create_user(email: str, name: str, password: str, role: str = "developer") -> None:
    """Register a user with a hashed password."""
    await container.db.connect()
    try:
        user = await container.auth.register_user(email, name, password, role)
    except ValueError as e:
        logger.error("Cannot create user: {}", e)
        sys.exit(1)
    print(f"\n✅ Created {user['role']} {user['email']} (id {user['id']})\n")


async def clear_cache() -> None:
    """Drop every cached query result."""
    await container.db.connect()
    await container.cache.clear_cache()


async def purge_cache() -> None:
    """Drop expired cache entries."""
    await container.db.connect()
    removed = await container.cache.sweep()
    logger.info("Removed {} expired cache entries", removed)


def main():
    args = sys.argv[1:]
    if not args:
        print(__doc__)
        sys.exit(1)

    container.init()
    command, rest = args[0], args[1:]

    try:
        if command == "create-user" and len(rest) in (3, 4):
            asyncio.run(create_user(*rest))
        elif command == "clear-cache" and not rest:
            asyncio.run(clear_cache())
        elif command == "purge-cache" and not rest:
            asyncio.run(purge_cache())
        else:
            print(__doc__)
            sys.exit(1)
    finally:
        container.reset()


if __name__ == "__main__":
    main()
