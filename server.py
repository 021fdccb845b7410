"""
server.py — Entry Point
=======================
Run the API with:

    uvicorn server:app --reload --port 8000

Requires JWT_SECRET and DATABASE_URL (or the POSTGRES_* variables) in .env.
"""

from knockturn.main import app  # noqa: F401 — import the FastAPI app

# In Docker:
#   CMD ["uvicorn", "server:app", "--host", "0.0.0.0", "--port", "8000"]
