# Routers package
from . import app_router
from . import users_router
from . import files_router

__all__ = [
    "app_router",
    "users_router",
    "files_router",
]
