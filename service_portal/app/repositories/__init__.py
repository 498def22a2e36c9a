"""
Repositories for the Portal Service.

Thin wrappers over the data store. Reads go through the shared
``QueryCache``; writes bypass it and invalidate after they succeed.
"""

from .admin import AdminRepository
from .profiles import ProfileRepository

__all__ = ["AdminRepository", "ProfileRepository"]
