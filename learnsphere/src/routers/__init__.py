"""API routers."""

from learnsphere.src.routers import admin, auth, health, history, learning

__all__ = ["admin", "auth", "health", "history", "learning"]
