#!/usr/bin/env python3
"""
Wait until the database accepts connections.

`app` only starts after `db` in docker-compose, it does not wait for
PostgreSQL to be ready. Run this before smoke tests or after `up`.
Reads DATABASE_URL and the TLS flags through the same settings as the app.

Usage:
    python scripts/wait_for_db.py
    python scripts/wait_for_db.py --timeout 60 --interval 1
"""

import os
import sys
import time
import asyncio
import argparse

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import asyncpg
from dotenv import load_dotenv

load_dotenv()

from app.config import get_settings
from app.db.connection import CONNECTION_ERRORS, connect_kwargs
from app.db.errors import DatabaseNotConfiguredError
from app.models.schemas import PoolSettings


async def try_connect(pool_settings: PoolSettings, timeout: float) -> bool:
    """One attempt: connect and run SELECT 1. Connection failures return False."""
    try:
        conn = await asyncpg.connect(
            pool_settings.dsn,
            timeout=timeout,
            **connect_kwargs(pool_settings),
        )
    except CONNECTION_ERRORS as e:
        print(f"  not ready: {type(e).__name__}: {e}")
        return False
    try:
        return await conn.fetchval("SELECT 1") == 1
    except CONNECTION_ERRORS as e:
        print(f"  not ready: {type(e).__name__}: {e}")
        return False
    finally:
        await conn.close()


async def main(timeout: float, interval: float) -> int:
    try:
        pool_settings = get_settings().pool_settings()
    except DatabaseNotConfiguredError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Waiting for {pool_settings.redacted_dsn()}")

    deadline = time.monotonic() + timeout
    attempt = 0
    while True:
        attempt += 1
        print(f"Attempt {attempt}...")
        if await try_connect(pool_settings, timeout=interval * 5):
            print("Database is ready")
            return 0
        if time.monotonic() >= deadline:
            print(f"ERROR: Database not ready after {timeout:.0f}s")
            return 1
        await asyncio.sleep(interval)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Wait for the database to accept connections")
    parser.add_argument("--timeout", type=float, default=30.0, help="Give up after this many seconds")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between attempts")

    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.timeout, args.interval)))
