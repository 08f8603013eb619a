#!/usr/bin/env python3
"""
Deployment Descriptor Checker

Validates the Dockerfile and docker-compose.yml against the service
contract: services `db` and `app`, POSTGRES_* credentials, DATABASE_URL
pointing at `db`, port mappings 5432:5432 and 3000:3000, and `app`
starting after `db`.

Usage:
    python scripts/check_descriptors.py
    python scripts/check_descriptors.py --compose path/to/docker-compose.yml
"""

import os
import sys
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app.deploy.descriptors import (
    DescriptorError,
    check_compose_file,
    check_dockerfile,
)

PROJECT_ROOT = Path(__file__).parent.parent


def report(name: str, problems: list) -> bool:
    if not problems:
        print(f"  OK    {name}")
        return True
    print(f"  FAIL  {name}")
    for problem in problems:
        print(f"          - {problem}")
    return False


def main(compose_path: Path, dockerfile_path: Path) -> int:
    print("=" * 60)
    print("Deployment descriptor check")
    print("=" * 60)

    ok = True

    if dockerfile_path.exists():
        ok &= report(str(dockerfile_path), check_dockerfile(dockerfile_path))
    else:
        ok &= report(str(dockerfile_path), ["File not found"])

    if compose_path.exists():
        try:
            problems = check_compose_file(compose_path)
        except DescriptorError as e:
            problems = [str(e)]
        ok &= report(str(compose_path), problems)
    else:
        ok &= report(str(compose_path), ["File not found"])

    return 0 if ok else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Validate Dockerfile and docker-compose.yml"
    )
    parser.add_argument(
        "--compose",
        type=Path,
        default=PROJECT_ROOT / "docker-compose.yml",
        help="Compose file to check"
    )
    parser.add_argument(
        "--dockerfile",
        type=Path,
        default=PROJECT_ROOT / "Dockerfile",
        help="Dockerfile to check"
    )

    args = parser.parse_args()

    sys.exit(main(args.compose, args.dockerfile))
