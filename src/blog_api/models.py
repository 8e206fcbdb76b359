"""Resources of the blog API

Text is stored as received. Clients escape it for the medium they render to.
"""

from restframe.core.entity import BaseEntity
from restframe.core.field import DateTime, HasMany, Reference, String, Text


class User(BaseEntity):
    """Identity record. Users are managed by identity providers, not over the API"""

    username = String(max_length=150, required=True, sanitize=False)


class Post(BaseEntity):
    title = String(max_length=100, required=True, sanitize=False)
    text = Text(required=True, sanitize=False)
    created = DateTime(auto_now_add=True)
    comments = HasMany("Comment")


class Comment(BaseEntity):
    post = Reference(Post, required=True)
    user = Reference(User, required=True)
    text = Text(required=True, sanitize=False)
