"""
API Routers - Modular organization of API endpoints
"""
from . import health, start, user, files

__all__ = ["health", "start", "user", "files"]
