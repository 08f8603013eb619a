#!/usr/bin/env python3
"""
check_env.py: verify required environment variables are set.

Loads .env via python-dotenv and checks that the keys the web process
needs to reach its database are present. Does not open a connection.

Usage:
    python scripts/check_env.py
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (one level up from scripts/)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

REQUIRED = {
    "DATABASE_URL": "PostgreSQL connection string",
}

OPTIONAL = {
    "DATABASE_SSL": "Negotiate TLS with the database (default false)",
    "DATABASE_SSL_VERIFY": "Verify the server certificate (default true)",
    "PORT": "HTTP port (default 3000)",
}


def mask(value: str) -> str:
    return value[:8] + "..." if len(value) > 8 else "***"


missing = [var for var in REQUIRED if not os.getenv(var)]

if missing:
    print("ENVIRONMENT CHECK FAILED")
    print()
    for var in missing:
        print(f"  MISSING  {var}  ({REQUIRED[var]})")
    print()
    print("Copy .env.example to .env and set your connection string.")
    sys.exit(1)

print("ENVIRONMENT CHECK PASSED")
print()
for var, description in REQUIRED.items():
    print(f"  OK  {var:<22} {mask(os.getenv(var))}  ({description})")
for var, description in OPTIONAL.items():
    value = os.getenv(var)
    shown = value if value is not None else "(default)"
    print(f"  --  {var:<22} {shown}  ({description})")
