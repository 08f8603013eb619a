#!/usr/bin/env python3
"""
Render the Dockerfile and docker-compose.yml.

Credentials default to POSTGRES_USER / POSTGRES_PASSWORD / POSTGRES_DB
from the environment (or .env), falling back to postgres/postgres/app.

Usage:
    python scripts/render_descriptors.py
    python scripts/render_descriptors.py --stdout
    python scripts/render_descriptors.py --base-image python:3.12-slim --output-dir build/
"""

import os
import sys
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dotenv import load_dotenv

from app.deploy.descriptors import (
    DEFAULT_BASE_IMAGE,
    DEFAULT_DB_IMAGE,
    render_compose,
    render_dockerfile,
)

load_dotenv()

PROJECT_ROOT = Path(__file__).parent.parent


def main():
    parser = argparse.ArgumentParser(description="Render deployment descriptors")
    parser.add_argument("--user", default=os.environ.get("POSTGRES_USER", "postgres"))
    parser.add_argument("--password", default=os.environ.get("POSTGRES_PASSWORD", "postgres"))
    parser.add_argument("--database", default=os.environ.get("POSTGRES_DB", "app"))
    parser.add_argument("--base-image", default=DEFAULT_BASE_IMAGE)
    parser.add_argument("--db-image", default=DEFAULT_DB_IMAGE)
    parser.add_argument("--output-dir", type=Path, default=PROJECT_ROOT)
    parser.add_argument("--stdout", action="store_true", help="Print instead of writing files")

    args = parser.parse_args()

    dockerfile = render_dockerfile(base_image=args.base_image)
    compose = render_compose(
        user=args.user,
        password=args.password,
        database=args.database,
        db_image=args.db_image,
    )

    if args.stdout:
        print("# Dockerfile")
        print(dockerfile)
        print("# docker-compose.yml")
        print(compose)
        return

    args.output_dir.mkdir(parents=True, exist_ok=True)
    (args.output_dir / "Dockerfile").write_text(dockerfile, encoding="utf-8")
    (args.output_dir / "docker-compose.yml").write_text(compose, encoding="utf-8")
    print(f"Wrote Dockerfile and docker-compose.yml to {args.output_dir}")


if __name__ == "__main__":
    main()
