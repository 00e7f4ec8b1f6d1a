"""FastAPI dependencies for injection."""
from core.auth import get_current_principal
from core.config import get_settings
from db.store import get_bookmark_store

__all__ = [
    "get_bookmark_store",
    "get_current_principal",
    "get_settings",
]
