"""filestore/storage/__init__.py — public API of the storage package."""

from filestore.storage.base import StoredFile
from filestore.storage.naming import UniqueNameGenerator
from filestore.storage.path_sanitizer import PathSanitizer
from filestore.storage.policy import PolicyValidator

__all__ = [
    "StoredFile",
    "PathSanitizer",
    "PolicyValidator",
    "UniqueNameGenerator",
]
