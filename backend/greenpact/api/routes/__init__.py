"""Route modules for the Greenpact API."""
from . import admin, auth, users

__all__ = ["auth", "admin", "users"]
