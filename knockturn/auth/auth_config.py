"""
auth_config.py
==============
JWT, password hashing and database configuration.
Loaded from .env — never hardcoded.

JWT_SECRET is required. There is no dev fallback: a missing secret stops
the server at startup instead of signing tokens with a guessable key.
"""

import os
from typing import NamedTuple

from dotenv import load_dotenv

from knockturn.auth.auth_errors import MissingSecretError

load_dotenv()

# ─────────────────────────────
# JWT Settings
# ─────────────────────────────
JWT_ALGORITHM: str = "HS256"
JWT_EXPIRY_DAYS: int = 7          # Tokens expire after 7 days

# ─────────────────────────────
# Password hashing
# ─────────────────────────────
BCRYPT_ROUNDS: int = 10           # bcrypt cost factor

# ─────────────────────────────
# Database
# ─────────────────────────────
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{os.getenv('POSTGRES_USER', 'postgres')}:"
    f"{os.getenv('POSTGRES_PASSWORD', '')}@"
    f"{os.getenv('POSTGRES_HOST', 'localhost')}:"
    f"{os.getenv('POSTGRES_PORT', '5432')}/"
    f"{os.getenv('POSTGRES_DB', 'knockturn')}"
)


class AuthSettings(NamedTuple):
    jwt_secret: str
    jwt_algorithm: str = JWT_ALGORITHM
    jwt_expiry_days: int = JWT_EXPIRY_DAYS
    bcrypt_rounds: int = BCRYPT_ROUNDS


def _int_env(env: dict, name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_auth_settings(env: dict | None = None) -> AuthSettings:
    """
    Read auth settings from the environment (or the given mapping).

    Raises MissingSecretError if JWT_SECRET is unset or blank.
    Called once at server startup.
    """
    if env is None:
        env = os.environ

    secret = env.get("JWT_SECRET", "")
    if not secret or not secret.strip():
        raise MissingSecretError(
            "JWT_SECRET is not set. Add it to .env or the process environment."
        )

    return AuthSettings(
        jwt_secret=secret,
        jwt_expiry_days=_int_env(env, "JWT_EXPIRY_DAYS", JWT_EXPIRY_DAYS),
        bcrypt_rounds=_int_env(env, "BCRYPT_ROUNDS", BCRYPT_ROUNDS),
    )
