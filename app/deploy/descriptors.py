"""
Deployment Descriptors

Renders and checks the two files that deploy the service:

- Dockerfile: turns the web process source into a runnable image
- docker-compose.yml: runs `db` (PostgreSQL) and `app` side by side,
  injects DATABASE_URL into `app`, and starts `app` after `db`

Usage:
    from app.deploy.descriptors import render_compose, check_compose_file

    text = render_compose(user="postgres", password="secret", database="app")
    problems = check_compose_file("docker-compose.yml")
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlsplit, unquote

import yaml


DEFAULT_BASE_IMAGE = "python:3.12-slim"
DEFAULT_DB_IMAGE = "postgres"
DEFAULT_WORKDIR = "/usr/src/app"
APP_PORT = 3000
DB_PORT = 5432

DB_SERVICE = "db"
APP_SERVICE = "app"
DB_ENVIRONMENT = ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")


class DescriptorError(Exception):
    """A descriptor could not be parsed."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


# =============================================================================
# Container build descriptor
# =============================================================================

def render_dockerfile(
    base_image: str = DEFAULT_BASE_IMAGE,
    port: int = APP_PORT,
    workdir: str = DEFAULT_WORKDIR,
) -> str:
    """
    Render the Dockerfile for the web process.

    Packaging metadata is copied and installed before the source so the
    dependency layer is cached across source edits.
    """
    return "\n".join([
        f"FROM {base_image}",
        "",
        f"WORKDIR {workdir}",
        "",
        "COPY pyproject.toml ./",
        "RUN pip install --no-cache-dir .",
        "",
        "COPY . .",
        "",
        f"EXPOSE {port}",
        "",
        f'CMD ["uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", "{port}"]',
        "",
    ])


def _dockerfile_instructions(text: str) -> List[tuple]:
    """Split a Dockerfile into (INSTRUCTION, arguments) pairs."""
    instructions = []
    pending = ""
    for raw in text.splitlines():
        line = raw.strip()
        if not pending and (not line or line.startswith("#")):
            continue
        if line.endswith("\\"):
            pending += line[:-1] + " "
            continue
        line = pending + line
        pending = ""
        keyword, _, args = line.partition(" ")
        instructions.append((keyword.upper(), args.strip()))
    if pending:
        keyword, _, args = pending.strip().partition(" ")
        instructions.append((keyword.upper(), args.strip()))
    return instructions


def validate_dockerfile(text: str, port: int = APP_PORT) -> List[str]:
    """
    Check a Dockerfile against the build contract.

    Returns:
        List of problems; empty when the file is valid
    """
    instructions = _dockerfile_instructions(text)
    if not instructions:
        return ["Dockerfile is empty"]

    problems = []
    keywords = [keyword for keyword, _ in instructions]

    first = next((k for k in keywords if k not in ("ARG",)), None)
    if first != "FROM":
        problems.append("Dockerfile must start with a FROM instruction")
    if "WORKDIR" not in keywords:
        problems.append("Dockerfile sets no WORKDIR")
    if "RUN" not in keywords:
        problems.append("Dockerfile has no dependency install step (RUN)")
    if not any(k in ("COPY", "ADD") for k in keywords):
        problems.append("Dockerfile never copies the source (COPY)")

    exposed = set()
    for keyword, args in instructions:
        if keyword == "EXPOSE":
            exposed.update(p.split("/")[0] for p in args.split())
    if str(port) not in exposed:
        problems.append(f"Dockerfile does not EXPOSE {port}")

    if not any(k in ("CMD", "ENTRYPOINT") for k in keywords):
        problems.append("Dockerfile has no startup command (CMD)")

    return problems


# =============================================================================
# Multi-service descriptor
# =============================================================================

def database_url(
    user: str,
    password: str,
    database: str,
    host: str = DB_SERVICE,
    port: int = DB_PORT,
) -> str:
    """Connection string the `app` service uses to reach `db`."""
    return f"postgresql://{user}:{password}@{host}:{port}/{database}"


def build_compose(
    user: str = "postgres",
    password: str = "postgres",
    database: str = "app",
    db_image: str = DEFAULT_DB_IMAGE,
    app_port: int = APP_PORT,
    db_port: int = DB_PORT,
) -> Dict[str, Any]:
    """Build the multi-service descriptor as a plain dict."""
    return {
        "services": {
            DB_SERVICE: {
                "image": db_image,
                "environment": {
                    "POSTGRES_USER": user,
                    "POSTGRES_PASSWORD": password,
                    "POSTGRES_DB": database,
                },
                "ports": [f"{db_port}:{db_port}"],
            },
            APP_SERVICE: {
                "build": ".",
                "environment": {
                    "DATABASE_URL": database_url(user, password, database, port=db_port),
                },
                "ports": [f"{app_port}:{app_port}"],
                "depends_on": [DB_SERVICE],
            },
        },
    }


def render_compose(**kwargs) -> str:
    """Render build_compose(**kwargs) as YAML."""
    return yaml.safe_dump(build_compose(**kwargs), sort_keys=False, default_flow_style=False)


def load_compose(text: str) -> Dict[str, Any]:
    """
    Parse a multi-service descriptor.

    Raises:
        DescriptorError: If the text is not valid YAML or not a mapping
    """
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        problem = getattr(e, "problem", None) or str(e)
        if mark is not None:
            raise DescriptorError(
                f"Invalid compose file: {problem}", mark.line + 1, mark.column + 1
            ) from e
        raise DescriptorError(f"Invalid compose file: {problem}") from e

    if not isinstance(doc, dict):
        raise DescriptorError("Compose file must be a mapping at the top level")
    return doc


# Shapes each service key may take; anything else is reported as malformed
SERVICE_KEY_SHAPES = {
    "environment": (dict, list),
    "ports": (list,),
    "depends_on": (dict, list),
}


def _malformed_keys(service: Dict[str, Any]) -> List[str]:
    """Keys present with a shape compose does not accept."""
    return [
        key for key, shapes in SERVICE_KEY_SHAPES.items()
        if service.get(key) is not None and not isinstance(service[key], shapes)
    ]


def _environment(service: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """Normalize `environment` (mapping or KEY=VALUE list) to a dict."""
    env = service.get("environment") or {}
    if isinstance(env, dict):
        return {str(k): (None if v is None else str(v)) for k, v in env.items()}
    result = {}
    for item in env:
        key, sep, value = str(item).partition("=")
        result[key] = value if sep else None
    return result


def _port_mapping(published: Any, target: Any) -> str:
    # No published port means compose picks a random host port
    if published in (None, ""):
        return f"random:{target}"
    return f"{published}:{target}"


def _ports(service: Dict[str, Any]) -> List[str]:
    """Normalize `ports` to "published:target" strings."""
    result = []
    for entry in service.get("ports") or []:
        if isinstance(entry, dict):
            result.append(_port_mapping(entry.get("published"), entry.get("target")))
            continue
        mapping = str(entry).split("/")[0]
        parts = mapping.split(":")
        if len(parts) == 1:
            # "3000" only names the container port
            result.append(_port_mapping(None, parts[0]))
        else:
            # Drop a host IP prefix such as 127.0.0.1:5432:5432
            result.append(_port_mapping(parts[-2], parts[-1]))
    return result


def _depends_on(service: Dict[str, Any]) -> List[str]:
    depends = service.get("depends_on") or []
    if isinstance(depends, dict):
        return list(depends)
    return [str(d) for d in depends]


def _check_database_url(url: str, db_env: Dict[str, Optional[str]]) -> List[str]:
    problems = []
    parts = urlsplit(url)
    if parts.scheme not in ("postgres", "postgresql"):
        problems.append(f"DATABASE_URL has scheme '{parts.scheme}', expected postgresql")
    if parts.hostname != DB_SERVICE:
        problems.append(
            f"DATABASE_URL should point at host '{DB_SERVICE}', not '{parts.hostname}'"
        )

    # Only compare literal values; ${VAR} interpolation is resolved by compose
    expected = {
        "user": (db_env.get("POSTGRES_USER"), unquote(parts.username or "")),
        "password": (db_env.get("POSTGRES_PASSWORD"), unquote(parts.password or "")),
        "database": (db_env.get("POSTGRES_DB"), parts.path.lstrip("/")),
    }
    for label, (declared, used) in expected.items():
        if declared and "$" not in declared and "$" not in used and declared != used:
            problems.append(
                f"DATABASE_URL {label} '{used}' does not match the db service ('{declared}')"
            )
    return problems


def validate_compose(
    doc: Dict[str, Any],
    app_port: int = APP_PORT,
    db_port: int = DB_PORT,
) -> List[str]:
    """
    Check a parsed compose document against the service contract.

    Returns:
        List of problems; empty when the document is valid
    """
    services = doc.get("services")
    if not isinstance(services, dict) or not services:
        return ["Compose file defines no services"]

    problems = []
    for name in (DB_SERVICE, APP_SERVICE):
        if not isinstance(services.get(name), dict):
            problems.append(f"Service '{name}' is not defined")
    if problems:
        return problems

    db = services[DB_SERVICE]
    app = services[APP_SERVICE]

    malformed = {}
    for name, service in ((DB_SERVICE, db), (APP_SERVICE, app)):
        malformed[name] = _malformed_keys(service)
        for key in malformed[name]:
            problems.append(f"Service '{name}' has malformed {key}")

    if not db.get("image") and not db.get("build"):
        problems.append(f"Service '{DB_SERVICE}' needs an image")
    db_env = {}
    if "environment" not in malformed[DB_SERVICE]:
        db_env = _environment(db)
        for key in DB_ENVIRONMENT:
            if not db_env.get(key):
                problems.append(f"Service '{DB_SERVICE}' is missing environment variable {key}")
    if "ports" not in malformed[DB_SERVICE] and f"{db_port}:{db_port}" not in _ports(db):
        problems.append(f"Service '{DB_SERVICE}' does not map port {db_port}:{db_port}")

    if not app.get("build") and not app.get("image"):
        problems.append(f"Service '{APP_SERVICE}' needs a build context or an image")
    if "environment" not in malformed[APP_SERVICE]:
        url = _environment(app).get("DATABASE_URL")
        if not url:
            problems.append(f"Service '{APP_SERVICE}' is missing environment variable DATABASE_URL")
        else:
            problems.extend(_check_database_url(url, db_env))
    if "ports" not in malformed[APP_SERVICE] and f"{app_port}:{app_port}" not in _ports(app):
        problems.append(f"Service '{APP_SERVICE}' does not map port {app_port}:{app_port}")
    if "depends_on" not in malformed[APP_SERVICE] and DB_SERVICE not in _depends_on(app):
        problems.append(f"Service '{APP_SERVICE}' does not depend on '{DB_SERVICE}'")

    return problems


def check_compose_file(path: Union[str, Path]) -> List[str]:
    """
    Load and validate a compose file.

    Raises:
        DescriptorError: If the file cannot be parsed
    """
    text = Path(path).read_text(encoding="utf-8")
    return validate_compose(load_compose(text))


def check_dockerfile(path: Union[str, Path]) -> List[str]:
    """Load and validate a Dockerfile."""
    return validate_dockerfile(Path(path).read_text(encoding="utf-8"))
