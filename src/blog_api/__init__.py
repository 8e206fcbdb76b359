"""Reference API exposing posts and their comments"""

from .app import create_app

__all__ = ["create_app"]
