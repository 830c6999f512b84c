# config/validation.py

"""
Startup checks for production environment variables.

Each check inspects ``os.environ`` and returns a list of problems; the app
refuses to start in production while any check reports one.
"""

import os
import sys
from typing import List, Tuple

_DEFAULT_SECRETS = {"your-secret-key", "your_secret_key", "dev-secret-key-change-in-production"}
_REALTIME_BACKENDS = ("log", "memory", "webhook")


def _check_secrets() -> List[str]:
    problems = []
    secret_key = os.environ.get("SECRET_KEY", "")
    if not secret_key or secret_key in _DEFAULT_SECRETS:
        problems.append(
            "SECRET_KEY must be set to a non-default value. "
            'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
        )
    # JWT_SECRET_KEY falls back to SECRET_KEY when unset
    jwt_secret = os.environ.get("JWT_SECRET_KEY")
    if jwt_secret is not None and jwt_secret in _DEFAULT_SECRETS:
        problems.append("JWT_SECRET_KEY must not be a default value")
    return problems


def _check_database() -> List[str]:
    if os.environ.get("DATABASE_URL"):
        return []
    return ["DATABASE_URL must point at the production database (PostgreSQL connection string)"]


def _check_realtime() -> List[str]:
    backend = os.environ.get("REALTIME_BACKEND", "log").strip().lower()
    if backend not in _REALTIME_BACKENDS:
        return [f"REALTIME_BACKEND must be one of {', '.join(_REALTIME_BACKENDS)}, got '{backend}'"]
    if backend == "webhook" and not os.environ.get("REALTIME_WEBHOOK_URL"):
        return ["REALTIME_WEBHOOK_URL is required when REALTIME_BACKEND=webhook"]
    return []


_CHECKS = (_check_secrets, _check_database, _check_realtime)


def validate_environment(flask_env: str = None) -> Tuple[bool, List[str]]:
    """
    Validate required environment variables.

    Args:
        flask_env: Flask environment; read from FLASK_ENV when None.
                   Only ``production`` is checked.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    if flask_env is None:
        flask_env = os.environ.get("FLASK_ENV", "development")
    if flask_env != "production":
        return True, []

    errors = [problem for check in _CHECKS for problem in check()]
    return not errors, errors


def validate_and_exit(flask_env: str = None) -> None:
    """Print every validation error to stderr and exit(1) if any were found."""
    is_valid, errors = validate_environment(flask_env)
    if is_valid:
        return

    print("Environment validation failed:", file=sys.stderr)
    for i, error in enumerate(errors, 1):
        print(f"  {i}. {error}", file=sys.stderr)
    print("Check your .env file or environment variables.", file=sys.stderr)
    sys.exit(1)
