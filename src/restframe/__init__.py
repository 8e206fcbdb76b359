__version__ = "0.1.0"

from .core.entity import BaseEntity
from .core.pagination import LimitOffsetPagination, PageNumberPagination, Pagination
from .core.repository import repository_for
from .core.serializer import EntitySerializer

__all__ = [
    "BaseEntity",
    "EntitySerializer",
    "LimitOffsetPagination",
    "PageNumberPagination",
    "Pagination",
    "repository_for",
]
