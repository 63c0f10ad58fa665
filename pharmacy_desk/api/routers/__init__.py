"""
API routers, one module per resource.

Each router is included at root level by ``pharmacy_desk.api.app`` and
declares its full path, so the route table reads the same here as in the
public interface.
"""

from pharmacy_desk.api.routers.auth import router as auth_router
from pharmacy_desk.api.routers.backup import router as backup_router
from pharmacy_desk.api.routers.email import router as email_router
from pharmacy_desk.api.routers.requests import router as requests_router
from pharmacy_desk.api.routers.system import router as system_router
from pharmacy_desk.api.routers.uploads import router as uploads_router

__all__ = [
    "auth_router",
    "backup_router",
    "email_router",
    "requests_router",
    "system_router",
    "uploads_router",
]
