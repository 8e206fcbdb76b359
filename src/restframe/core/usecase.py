"""Use cases that perform the resource operations behind API views

A use case receives a request object, runs against the entity's repository
and always answers with a response object. Failures are converted to
`ResponseFailure` objects here and never escape as exceptions.
"""

import logging

from abc import ABCMeta, abstractmethod

from restframe.core.field import HasMany
from restframe.core.repository import repository_for
from restframe.core.transport import (
    InvalidRequestObject,
    RequestObject,
    ResponseFailure,
    ResponseSuccess,
    ResponseSuccessCreated,
    ResponseSuccessWithNoContent,
    Status,
)
from restframe.exceptions import (
    InvalidOperationError,
    ObjectNotFoundError,
    UsecaseExecutionError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class UseCase(metaclass=ABCMeta):
    """A single operation on the resources of an entity.

    Subclasses implement `process_request`. `execute` turns what it raises
    into the matching `ResponseFailure`.
    """

    def execute(self, request_object):
        if not request_object.is_valid:
            return ResponseFailure.build_from_invalid_request(request_object)

        try:
            return self.process_request(request_object)
        except ValidationError as err:
            return ResponseFailure.build_parameters_error(err.messages)
        except ObjectNotFoundError:
            return ResponseFailure.build_not_found(
                {"identifier": ["Object with this ID does not exist."]}
            )
        except InvalidOperationError as err:
            return ResponseFailure.build_unprocessable_error({"_entity": [str(err)]})
        except Exception as exc:
            logger.error(
                f"{self.__class__.__name__} execution failed due to error {exc}",
                exc_info=True,
            )
            return ResponseFailure.build_system_error(f"{exc.__class__.__name__}: {exc}")

    @abstractmethod
    def process_request(self, request_object):
        """Perform the operation and return a response object"""


class ShowRequestObject(RequestObject):
    required = ("entity_cls", "identifier")


class ShowUseCase(UseCase):
    """Fetch one entity by identifier"""

    def process_request(self, request_object):
        entity = repository_for(request_object.entity_cls).get(request_object.identifier)
        return ResponseSuccess(Status.SUCCESS, entity)


class ListRequestObject(RequestObject):
    """Filters and ordering of a listing.

    Query parameters that name an attribute of the entity become equality
    filters, with values cast by the attribute's field. `order_by` takes a
    list or comma separated names, each optionally prefixed with `-`.
    Anything else, like pagination parameters, stays in `params` for the
    view.
    """

    def __init__(self, entity_cls, filters=None, order_by=(), params=None):
        super().__init__(entity_cls, params=params)
        self.filters = filters or {}
        self.order_by = order_by

    @staticmethod
    def _parse_ordering(order_by):
        if isinstance(order_by, str):
            return [name.strip() for name in order_by.split(",") if name.strip()]
        return list(order_by)

    @classmethod
    def from_dict(cls, entity_cls, adict):
        if entity_cls is None:
            invalid_request = InvalidRequestObject()
            invalid_request.add_error("entity_cls", "is required")
            return invalid_request

        errors = InvalidRequestObject()
        attributes = entity_cls.meta_.attributes
        params = dict(adict)

        order_by = cls._parse_ordering(params.pop("order_by", ()))
        for name in order_by:
            if name.lstrip("-") not in attributes:
                errors.add_error("order_by", f"`{name}` is not a sortable attribute")

        filters = {}
        filterable = [
            name for name in params
            if name in attributes and not isinstance(attributes[name], HasMany)
        ]
        for name in filterable:
            value = params.pop(name)
            try:
                filters[name] = attributes[name]._cast_to_type(value)
            except ValidationError:
                errors.add_error(name, f"`{value}` is not a valid filter value")

        if errors.has_errors:
            return errors
        return cls(entity_cls, filters=filters, order_by=tuple(order_by), params=params)


class ListUseCase(UseCase):
    """Fetch the entities matching the request's filters, in its order"""

    def process_request(self, request_object):
        entities = repository_for(request_object.entity_cls).filter(
            order_by=request_object.order_by, **request_object.filters
        )
        return ResponseSuccess(Status.SUCCESS, entities)


class CreateRequestObject(RequestObject):
    required = ("entity_cls", "data")


class CreateUseCase(UseCase):
    """Build an entity from validated data and save it"""

    def process_request(self, request_object):
        entity = repository_for(request_object.entity_cls).create(**request_object.data)
        return ResponseSuccessCreated(entity)


class UpdateRequestObject(RequestObject):
    required = ("entity_cls", "identifier", "data")


class UpdateUseCase(UseCase):
    """Apply validated data to an existing entity. Absent keys keep their values."""

    def process_request(self, request_object):
        repository = repository_for(request_object.entity_cls)
        entity = repository.get(request_object.identifier).update(request_object.data)
        repository.add(entity)
        return ResponseSuccess(Status.SUCCESS, entity)


class DeleteRequestObject(RequestObject):
    required = ("entity_cls", "identifier")


class DeleteUseCase(UseCase):
    """Remove an entity, along with the entities that depend on it"""

    def process_request(self, request_object):
        repository = repository_for(request_object.entity_cls)
        repository.remove(repository.get(request_object.identifier))
        return ResponseSuccessWithNoContent()


class Tasklet:
    """Runs a use case from plain inputs"""

    @classmethod
    def perform(cls, entity_cls, usecase_cls, request_object_cls, payload: dict, raise_error=False):
        """Build the request object from `payload`, execute `usecase_cls` and
        return its response.

        :param raise_error: Raise :exc:`UsecaseExecutionError` instead of
            returning a `ResponseFailure`. The API views rely on it to abort
            request handling.
        """
        request_object = request_object_cls.from_dict(entity_cls, payload)
        response = usecase_cls().execute(request_object)

        if raise_error and not response.success:
            logger.debug(f"{usecase_cls.__name__} failed: {response.value}")
            raise UsecaseExecutionError(
                (response.code, response.value),
                orig_exc=getattr(response, "exc", None),
                orig_trace=getattr(response, "trace", None),
            )
        return response
