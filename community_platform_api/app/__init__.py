"""
Application package initializer.

The API is split into ``core`` (configuration, database, security),
``schemas`` (pydantic models), ``services`` (business logic over
SQLite) and ``api`` (versioned FastAPI routers).
"""

from .main import app  # noqa: F401
