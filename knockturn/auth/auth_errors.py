"""
auth_errors.py
==============
Exceptions raised by the auth package.

Expected authentication failures (wrong password, bad token, bad header)
are NOT exceptions: they come back as False / None. These cover
configuration and storage problems only.
"""


class AuthError(Exception):
    """Base class for auth package errors."""


class MissingSecretError(AuthError):
    """JWT_SECRET is missing or blank. Fatal at startup."""


class UnknownRoleError(AuthError, ValueError):
    """A user record carries a role value we do not recognise."""


class AuthDBError(AuthError):
    """The users table could not be read or written."""


class UserExistsError(AuthDBError):
    """Username is already registered."""
