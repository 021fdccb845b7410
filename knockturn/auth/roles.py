"""
roles.py
========
User roles.

The users table stores free-text roles, usually 'ADMIN' or 'EMPLOYEE'.
Records without a role get Role.USER ("user"), which is also what ends up
in the token. Stored values outside the enum are carried through as-is.
"""

from enum import Enum

from knockturn.auth.auth_errors import UnknownRoleError


class Role(str, Enum):
    USER = "user"
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"

    @classmethod
    def default(cls) -> "Role":
        return cls.USER

    @classmethod
    def parse(cls, raw) -> "Role":
        """
        Strict parse for roles supplied at registration.

        None / "" → Role.USER
        "admin", "ADMIN" → Role.ADMIN   (case-insensitive)
        anything else → UnknownRoleError
        """
        if isinstance(raw, cls):
            return raw
        if not raw:
            return cls.default()

        text = str(raw).strip()
        if not text:
            return cls.default()
        for role in cls:
            if role.value.lower() == text.lower():
                return role
        raise UnknownRoleError(f"Unknown role: {raw!r}")


def role_or_default(raw) -> str:
    """
    Role string to carry for a stored user record.

    Empty / missing → "user"; anything else is returned unchanged.
    Never raises.
    """
    if isinstance(raw, Role):
        return raw.value
    if raw is None:
        return Role.default().value
    text = str(raw)
    return text if text.strip() else Role.default().value
