"""Identity providers of the blog API

Users are looked up by identifier for session authentication, and by a
static token for token authentication. Tokens live in process memory.
"""

import secrets

from restframe.core.repository import repository_for
from restframe.exceptions import ObjectNotFoundError

from .models import User

# Token key -> user identifier
_tokens = {}


def issue_token(user):
    """Create a token for `user` and return its key"""
    key = secrets.token_hex(20)
    _tokens[key] = user.id
    return key


def revoke_tokens():
    _tokens.clear()


def load_user(user_id):
    try:
        return repository_for(User).get(user_id)
    except ObjectNotFoundError:
        return None


def load_user_from_token(key):
    user_id = _tokens.get(key)
    if user_id is None:
        return None
    return load_user(user_id)
