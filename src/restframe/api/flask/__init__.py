"""Flask bindings of RestFrame"""

from .base import RestFrame
from .routers import Router
from .viewsets import GenericAPIResourceSet, action

__all__ = ["RestFrame", "Router", "GenericAPIResourceSet", "action"]
