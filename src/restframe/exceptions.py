"""Exceptions raised by RestFrame

The API layer maps them to HTTP responses: failures of use cases travel as
:exc:`UsecaseExecutionError`, authentication problems become 401 and
permission problems 403 responses.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class RestFrameException(Exception):
    """Root of the RestFrame exception hierarchy.

    `extra_info` carries optional context for error handlers.
    """

    def __init__(self, *args: Any, extra_info: Any = None) -> None:
        super().__init__(*args)
        self.extra_info = extra_info


class ConfigurationError(RestFrameException):
    """The application is set up wrong, for example a missing SECRET_KEY,
    a serializer without an entity or a reference to an unknown entity
    """


class ObjectNotFoundError(RestFrameException):
    """No entity has the requested identifier"""


class InvalidPageError(RestFrameException):
    """The page asked for is out of range or not a number"""


class InvalidOperationError(RestFrameException):
    """The entity refuses the change, like overwriting a creation timestamp"""


class IncorrectUsageError(RestFrameException):
    """A RestFrame building block was used against its contract"""


class ValidationError(RestFrameException):
    """Input failed validation.

    :param messages: A message, a list of messages, or field names mapped
        to lists of messages.
    """

    def __init__(self, messages: Any, traceback: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.messages = messages
        self.traceback = traceback
        logger.debug(f"Validation failed: {messages}")

    def __str__(self) -> str:
        return str(dict(self.messages) if isinstance(self.messages, dict) else self.messages)


class AuthenticationFailed(RestFrameException):
    """Credentials came with the request, but do not identify a user"""


class NotAuthenticated(RestFrameException):
    """The request needs an identified user and carries no credentials"""


class PermissionDenied(RestFrameException):
    """The user is known, but not allowed to do this"""


class UsecaseExecutionError(RestFrameException):
    """A use case answered with a failure, and the caller asked for an exception.

    :param value: `(Status, body)` of the failure response
    :param orig_exc: The exception that made the use case fail, if any
    :param orig_trace: Its traceback
    """

    def __init__(self, value, orig_exc=None, orig_trace=None, **kwargs):
        super().__init__(**kwargs)
        self.value = value
        self.orig_exc = orig_exc
        self.orig_trace = orig_trace
