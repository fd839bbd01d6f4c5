# Models package (re-export feature modules for stable imports)
from .users.user import User
from .files.file_node import FileNode

__all__ = [
    "User",
    "FileNode",
]
