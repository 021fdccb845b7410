"""
credential_service.py
=====================
Password hashing and bearer-token issue / verification.

  hash_password / verify_password   — bcrypt (passlib), cost 10
  issue_token / verify_token        — HS256 JWT (python-jose), 7-day expiry
  extract_bearer_token              — "Bearer <token>" header parsing

Tokens are stateless: nothing is stored server-side, a token is valid as
long as its signature checks out and it has not expired. No refresh, no
revocation.

Expected failures never raise:
  wrong password          → False
  bad / expired token     → None
  malformed header        → None
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import ValidationError

from knockturn.auth.auth_config import (
    AuthSettings, JWT_ALGORITHM, JWT_EXPIRY_DAYS, BCRYPT_ROUNDS,
)
from knockturn.auth.auth_errors import MissingSecretError
from knockturn.auth.auth_models import TokenPayload, TokenCheck, TokenStatus
from knockturn.auth.roles import role_or_default


BEARER_SCHEME = "Bearer"


def extract_bearer_token(header_value: Optional[str]) -> Optional[str]:
    """
    Pull the token out of an Authorization header value.

    Accepts exactly "Bearer <token>": two parts split on a single space,
    scheme matched case-sensitively. Anything else returns None.
    """
    if not header_value:
        return None
    parts = header_value.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_SCHEME or not parts[1]:
        return None
    return parts[1]


def _user_field(user, name: str):
    """Read a field from a DB row dict or an object with attributes."""
    if isinstance(user, dict):
        return user.get(name)
    return getattr(user, name, None)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialService:
    """
    Holds the signing secret and the bcrypt context for the process.

    Build one at startup (see CredentialService.from_settings) and share it;
    it keeps no mutable state.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = JWT_ALGORITHM,
        expiry_days: int = JWT_EXPIRY_DAYS,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
        clock: Callable[[], datetime] | None = None,
    ):
        if not secret or not secret.strip():
            raise MissingSecretError("CredentialService needs a non-empty signing secret")

        self._secret = secret
        self._algorithm = algorithm
        self._expiry = timedelta(days=expiry_days)
        self._clock = clock or _utcnow
        self._pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds,
        )

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "CredentialService":
        return cls(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expiry_days=settings.jwt_expiry_days,
            bcrypt_rounds=settings.bcrypt_rounds,
        )

    extract_bearer_token = staticmethod(extract_bearer_token)

    # ─────────────────────────────
    # Passwords
    # ─────────────────────────────

    def hash_password(self, plain: str) -> str:
        return self._pwd_context.hash(plain)

    def verify_password(self, plain: str, hashed: Optional[str]) -> bool:
        """True iff `plain` is the password `hashed` was made from."""
        try:
            return self._pwd_context.verify(plain, hashed)
        except (ValueError, TypeError) as e:
            # Unrecognised or corrupt stored hash
            print(f"[AUTH] password check failed on unreadable hash: {type(e).__name__}")
            return False

    # ─────────────────────────────
    # Tokens
    # ─────────────────────────────

    def issue_token(self, user) -> str:
        """
        Sign a token for a user record (dict row or object).

        Carries sub (= user id), username and the stored role string; role
        falls back to "user" when the record has none. Expires expiry_days
        after issue. Raises ValueError if the record has no id or username.
        """
        user_id = _user_field(user, "id")
        username = _user_field(user, "username")
        if user_id is None or str(user_id) == "":
            raise ValueError("Cannot issue a token for a user record without an id")
        if not username:
            raise ValueError("Cannot issue a token for a user record without a username")

        now = self._clock()
        claims = {
            "sub": str(user_id),
            "username": username,
            "role": role_or_default(_user_field(user, "role")),
            "iat": now,
            "exp": now + self._expiry,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def check_token(self, token) -> TokenCheck:
        """Verify a token and say why it failed, if it did."""
        if not isinstance(token, str) or not token:
            return TokenCheck(status=TokenStatus.MALFORMED)

        try:
            # exp is checked below against self._clock, not the wall clock
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            # python-jose reports unparseable input as JWTError too
            if token.count(".") != 2:
                return TokenCheck(status=TokenStatus.MALFORMED)
            return TokenCheck(status=TokenStatus.INVALID)

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            return TokenCheck(status=TokenStatus.MALFORMED)
        if exp < self._clock().timestamp():
            return TokenCheck(status=TokenStatus.EXPIRED)

        try:
            payload = TokenPayload(
                id=claims["sub"],
                username=claims["username"],
                role=role_or_default(claims.get("role")),
            )
        except (KeyError, ValidationError):
            return TokenCheck(status=TokenStatus.MALFORMED)

        return TokenCheck(status=TokenStatus.VALID, payload=payload)

    def verify_token(self, token) -> Optional[TokenPayload]:
        """
        Decoded payload if the token is genuine and unexpired, else None.

        Callers only learn "authenticated or not"; the failure reason is
        kept internal.
        """
        result = self.check_token(token)
        if not result.ok:
            print(f"[AUTH] token not accepted ({result.status.value})")
            return None
        return result.payload

    # ─────────────────────────────
    # Login helper
    # ─────────────────────────────

    def authenticate(self, user: Optional[dict], plain: str) -> Optional[str]:
        """Token for `user` if the password matches, None otherwise."""
        if not user:
            # same bcrypt work as a real check
            self._pwd_context.dummy_verify()
            return None
        if not self.verify_password(plain, _user_field(user, "password")):
            return None
        return self.issue_token(user)
