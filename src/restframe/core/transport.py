"""Objects carrying input into use cases and results out of them

Use cases never raise for expected failures. They answer with a
`ResponseSuccess` or a `ResponseFailure`, whose `code` is a `Status`
mirroring the HTTP status the API layer will send.
"""

import sys

from enum import Enum


class Status(Enum):
    """Outcomes of a use case, valued by HTTP status code"""

    SUCCESS = 200
    SUCCESS_CREATED = 201
    SUCCESS_WITH_NO_CONTENT = 204
    PARAMETERS_ERROR = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    UNPROCESSABLE_ENTITY = 422
    SYSTEM_ERROR = 500


class InvalidRequestObject:
    """Stands in for a request object whose inputs are incomplete.

    Problems are kept in `errors` as `{"parameter": ..., "message": ...}`.
    """

    is_valid = False

    def __init__(self):
        self.errors = []

    def add_error(self, parameter, message):
        self.errors.append({"parameter": parameter, "message": message})

    @property
    def has_errors(self):
        return len(self.errors) > 0


class RequestObject:
    """Inputs of a use case, bound to the entity class being operated on.

    Subclasses list the keys they cannot do without in `required`.
    """

    is_valid = True

    required = ("entity_cls",)

    def __init__(self, entity_cls, identifier=None, data=None, params=None):
        self.entity_cls = entity_cls
        self.identifier = identifier
        self.data = {} if data is None else data
        self.params = {} if params is None else params

    @classmethod
    def from_dict(cls, entity_cls, adict):
        """Build a request object, or an `InvalidRequestObject` listing what is missing"""
        provided = dict(adict, entity_cls=entity_cls)
        missing = [key for key in cls.required if provided.get(key) is None]
        if not missing:
            return cls(entity_cls, **adict)

        invalid = InvalidRequestObject()
        for key in missing:
            invalid.add_error(key, "is required")
        return invalid


class ResponseSuccess:
    """Outcome of a use case that did its job.

    :param code: `Status` among the 2xx values
    :param value: The entity, or list of entities, produced
    :param message: Optional note for the caller
    """

    success = True
    status = None

    def __init__(self, code=None, value=None, message=None):
        self.code = code or self.status
        self.value = value
        self.message = message


class ResponseSuccessCreated(ResponseSuccess):
    status = Status.SUCCESS_CREATED

    def __init__(self, value=None, message=None):
        super().__init__(value=value, message=message)


class ResponseSuccessWithNoContent(ResponseSuccess):
    status = Status.SUCCESS_WITH_NO_CONTENT

    def __init__(self, value=None, message=None):
        super().__init__(value=value, message=message)


class ResponseFailure:
    """Outcome of a use case that could not do its job.

    `message` is a string or a mapping of field names to message lists.
    Details of system errors stay in the logs; callers only see
    `exception_message`. When built while handling an exception, the
    exception and its traceback are kept on `exc` and `trace`.
    """

    success = False
    exception_message = "Something went wrong. Please try later!!"

    def __init__(self, code, message):
        self.code = code
        if code is Status.SYSTEM_ERROR:
            message = self.exception_message
        self.message = message
        _, self.exc, self.trace = sys.exc_info()

    @property
    def value(self):
        """The `{"code", "message"}` body sent to API clients"""
        return {"code": getattr(self.code, "value", self.code), "message": self.message}

    @classmethod
    def build_from_invalid_request(cls, invalid_request_object):
        """400 failure keyed by the parameters an `InvalidRequestObject` complains about"""
        grouped = {}
        for error in invalid_request_object.errors:
            grouped.setdefault(error["parameter"], []).append(error["message"])
        return cls.build_parameters_error(grouped)

    @classmethod
    def build_parameters_error(cls, message=None):
        return cls(Status.PARAMETERS_ERROR, message)

    @classmethod
    def build_not_found(cls, message=None):
        return cls(Status.NOT_FOUND, message)

    @classmethod
    def build_unprocessable_error(cls, message=None):
        return cls(Status.UNPROCESSABLE_ENTITY, message)

    @classmethod
    def build_system_error(cls, message=None):
        return cls(Status.SYSTEM_ERROR, message)
