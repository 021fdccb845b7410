"""
auth_routes.py
==============
FastAPI router for authentication.

Endpoints:
  POST /api/auth/register  — create a login (username + password)
  POST /api/auth/login     — check password, receive JWT
  GET  /api/auth/me        — decode the caller's bearer token

Protected routes elsewhere use the `require_user` dependency:
  Authorization: Bearer <jwt_token>

Handlers that hash or verify passwords are plain `def` so FastAPI runs
them in its threadpool; bcrypt would otherwise block the event loop.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from knockturn.auth import auth_db
from knockturn.auth.auth_errors import AuthDBError, UnknownRoleError, UserExistsError
from knockturn.auth.auth_models import (
    LoginRequest, LoginResponse, RegisterRequest, RegisterResponse,
    TokenPayload, UserOut,
)
from knockturn.auth.credential_service import CredentialService
from knockturn.auth.roles import Role, role_or_default

# ─────────────────────────────
# Router
# ─────────────────────────────
router = APIRouter(prefix="/api/auth", tags=["Auth"])


# ─────────────────────────────
# Dependencies
# ─────────────────────────────

def get_credentials(request: Request) -> CredentialService:
    """The CredentialService built at startup (see knockturn.main)."""
    return request.app.state.credentials


def require_user(
    request: Request,
    credentials: CredentialService = Depends(get_credentials),
) -> TokenPayload:
    """
    Resolve the caller from the Authorization header.
    401 if the header is missing/malformed or the token does not verify.
    """
    token = credentials.extract_bearer_token(request.headers.get("Authorization"))
    payload = credentials.verify_token(token) if token else None
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"success": False, "message": "Invalid token"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


# ─────────────────────────────
# Endpoints
# ─────────────────────────────

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(req: RegisterRequest, credentials: CredentialService = Depends(get_credentials)):
    """
    Register a new login.

    - Rejects unknown roles → 400
    - Username already taken → 409
    - Stores the bcrypt hash, never the password
    - Optional employee_id links the login to an employees row
    """
    try:
        role = Role.parse(req.role) if req.role else None
    except UnknownRoleError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "message": str(e)}
        )

    try:
        if auth_db.username_exists(req.username):
            raise UserExistsError(req.username)
        hashed = credentials.hash_password(req.password)
        user_id = auth_db.create_user(
            username=req.username,
            hashed_password=hashed,
            role=role.value if role else None,
            employee_id=str(req.employee_id) if req.employee_id else None,
        )
    except UserExistsError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"success": False, "message": "User already exists"}
        )
    except AuthDBError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "message": f"Internal server error: {str(e)}"}
        )

    return RegisterResponse(success=True, message="User created successfully", user_id=user_id)


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def login(req: LoginRequest, credentials: CredentialService = Depends(get_credentials)):
    """
    Authenticate user and return a JWT.

    - Looks up username in `users` table
    - Verifies bcrypt password hash
    - Returns signed JWT (7-day expiry)

    Unknown username and wrong password get the same 401.
    """
    try:
        user = auth_db.get_user_by_username(req.username)
    except AuthDBError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "message": f"Internal server error: {str(e)}"}
        )

    token = credentials.authenticate(user, req.password)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"success": False, "message": "Invalid credentials"}
        )

    return LoginResponse(
        success=True,
        message="Login successful",
        token=token,
        user=UserOut(id=user["id"], username=user["username"], role=role_or_default(user.get("role"))),
    )


@router.get("/me", response_model=UserOut)
async def me(user: TokenPayload = Depends(require_user)):
    """Who the bearer token belongs to."""
    return UserOut(id=user.id, username=user.username, role=user.role)
