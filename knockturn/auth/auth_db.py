"""
auth_db.py
==========
Database layer for user accounts.

Tables managed here:
  - users  (id, username, password, employee_id, role)

`password` holds the bcrypt hash only. The plaintext never reaches this
module. `employee_id` optionally links the login to an employees row.
`role` is free text, usually 'ADMIN' or 'EMPLOYEE'. Rows read back without
one get "user"; other values are returned unchanged.
"""

import uuid
import psycopg2
from psycopg2 import errors
from psycopg2.extras import RealDictCursor

from knockturn.auth.auth_config import DATABASE_URL
from knockturn.auth.auth_errors import AuthDBError, UserExistsError
from knockturn.auth.roles import role_or_default


def _get_conn():
    """Open and return a raw psycopg2 connection."""
    try:
        return psycopg2.connect(DATABASE_URL)
    except psycopg2.Error as e:
        raise AuthDBError(f"Auth DB connection failed: {str(e)}")


def _row(row) -> dict | None:
    if not row:
        return None
    user = dict(row)
    user["id"] = str(user["id"])
    if user.get("employee_id") is not None:
        user["employee_id"] = str(user["employee_id"])
    user["role"] = role_or_default(user.get("role"))
    return user


# ─────────────────────────────
# Init
# ─────────────────────────────

def init_users_db() -> None:
    """
    Create the `users` table if it does not already exist.
    Called once at server startup — safe to call multiple times.
    """
    conn = _get_conn()
    try:
        with conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id          UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                    username    TEXT UNIQUE NOT NULL,
                    password    TEXT NOT NULL,
                    employee_id UUID,
                    role        TEXT DEFAULT 'EMPLOYEE'
                );
            """)
        conn.commit()
        print("[AUTH DB] users table ready")
    except psycopg2.Error as e:
        conn.rollback()
        raise AuthDBError(f"Failed to initialise auth DB: {str(e)}")
    finally:
        conn.close()


# ─────────────────────────────
# Read
# ─────────────────────────────

_USER_COLUMNS = "id, username, password, employee_id, role"


def get_user_by_username(username: str) -> dict | None:
    """
    Fetch a user row by username.
    Returns a dict with keys {id, username, password, employee_id, role}
    or None if not found.
    """
    conn = _get_conn()
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = %s;",
                (username.strip(),)
            )
            return _row(cur.fetchone())
    except psycopg2.Error as e:
        raise AuthDBError(f"Failed to read user: {str(e)}")
    finally:
        conn.close()


def get_user_by_id(user_id: str) -> dict | None:
    conn = _get_conn()
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s;",
                (user_id,)
            )
            return _row(cur.fetchone())
    except psycopg2.DataError:
        # not a UUID
        return None
    except psycopg2.Error as e:
        raise AuthDBError(f"Failed to read user: {str(e)}")
    finally:
        conn.close()


def username_exists(username: str) -> bool:
    """Return True if the username is already registered."""
    return get_user_by_username(username) is not None


# ─────────────────────────────
# Write
# ─────────────────────────────

def create_user(
    username: str,
    hashed_password: str,
    role: str | None = None,
    employee_id: str | None = None,
) -> str:
    """
    Insert a new user into the `users` table.
    Returns the new user's UUID as a string.
    """
    user_id = str(uuid.uuid4())
    conn = _get_conn()
    try:
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO users (id, username, password, employee_id, role)
                VALUES (%s, %s, %s, %s, COALESCE(%s, 'EMPLOYEE'));
                """,
                (user_id, username.strip(), hashed_password, employee_id, role)
            )
        conn.commit()
        return user_id
    except errors.UniqueViolation:
        conn.rollback()
        raise UserExistsError("Username already exists")
    except psycopg2.Error as e:
        conn.rollback()
        raise AuthDBError(f"Failed to create user: {str(e)}")
    finally:
        conn.close()
