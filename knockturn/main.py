from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from knockturn.auth.auth_config import load_auth_settings
from knockturn.auth.credential_service import CredentialService

app = FastAPI(title="Knockturn", version="0.1.0")

# ─────────────────────────────
# CORS Configuration
# ─────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # React client is served from its own dev server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─────────────────────────────
# Include Auth Routes  (/api/auth/register  /api/auth/login  /api/auth/me)
# ─────────────────────────────
from knockturn.auth.auth_routes import router as auth_router
from knockturn.auth.auth_db import init_users_db
app.include_router(auth_router)


def configure_credentials(env: dict | None = None) -> CredentialService:
    """
    Load auth settings and attach a CredentialService to the app.
    Raises MissingSecretError when JWT_SECRET is not set; the server
    must not start without it.
    """
    settings = load_auth_settings(env)
    credentials = CredentialService.from_settings(settings)
    app.state.credentials = credentials
    return credentials


@app.on_event("startup")
async def startup_event():
    """Validate config and initialise the users table on startup"""
    configure_credentials()
    print("[STARTUP] credential service ready")
    # users table (id, username, password hash, employee_id, role)
    init_users_db()


@app.get("/health")
async def health():
    return {"status": "ok"}
