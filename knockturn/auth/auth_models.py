"""
auth_models.py
==============
Pydantic models shared by the credential service and the auth router.
"""

from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from knockturn.auth.roles import Role


# ─────────────────────────────
# Token models
# ─────────────────────────────

class TokenPayload(BaseModel):
    """What a signed token carries. Never holds secret material."""
    id: str
    username: str
    role: str = Role.USER.value


class TokenStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"        # bad signature, tampered, bad claims
    MALFORMED = "malformed"    # not a JWT at all, or payload fields missing


class TokenCheck(BaseModel):
    status: TokenStatus
    payload: Optional[TokenPayload] = None

    @property
    def ok(self) -> bool:
        return self.status is TokenStatus.VALID


# ─────────────────────────────
# Request / Response models
# ─────────────────────────────

class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str
    password: str
    role: Optional[str] = None
    employee_id: Optional[UUID] = None   # links the login to an employees row


class UserOut(BaseModel):
    id: str
    username: str
    role: str


class LoginResponse(BaseModel):
    success: bool
    message: str
    token: str | None = None
    user: UserOut | None = None


class RegisterResponse(BaseModel):
    success: bool
    message: str
    user_id: str | None = None
