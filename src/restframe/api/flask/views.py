"""Class based views that expose entities over HTTP

`APIResource` takes care of the request plumbing common to every endpoint:
picking the handler, parsing input, identifying the user and rendering.
`GenericAPIResource` adds the CRUD operations, which run through use cases
and shape their results with the view's serializer.
"""

import logging

from flask import Response, current_app, g, request
from flask.views import MethodView
from werkzeug.http import parse_options_header

from restframe.api.flask.utils import multidict_to_dict
from restframe.conf import get_setting
from restframe.core.repository import repository_for
from restframe.core.transport import ResponseFailure, Status
from restframe.core.usecase import (
    CreateRequestObject,
    CreateUseCase,
    DeleteRequestObject,
    DeleteUseCase,
    ListRequestObject,
    ListUseCase,
    ShowRequestObject,
    ShowUseCase,
    Tasklet,
    UpdateRequestObject,
    UpdateUseCase,
)
from restframe.exceptions import (
    ConfigurationError,
    InvalidPageError,
    NotAuthenticated,
    ObjectNotFoundError,
    PermissionDenied,
    UsecaseExecutionError,
)
from restframe.utils import perform_import, resource_name, resource_plural

logger = logging.getLogger(__name__)

WRITE_METHODS = ("POST", "PUT", "PATCH")
FORM_MIME_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class APIResource(MethodView):
    """Base view of all API endpoints.

    Handlers are picked by HTTP method, or by the `action` name the router
    binds the view with. They return data, `(data, code)`, `(data, code,
    headers)` or a ready made Flask response.

    `authentication_classes` and `permission_classes` default to the
    `AUTHENTICATION_CLASSES` and `PERMISSION_CLASSES` settings, `renderer`
    to `DEFAULT_RENDERER`. A `parser`, when set, runs after the payload
    is parsed and may rework `request.payload`.
    """

    authentication_classes = None
    permission_classes = None
    renderer = None
    parser = None

    def __init__(self, action=None):
        self.action = action
        self.user = None

    def _lookup_method(self):
        candidates = [self.action, request.method.lower()]
        if request.method == "HEAD":
            candidates.append("get")

        for name in candidates:
            handler = getattr(self, name, None) if name else None
            if handler is not None:
                return handler

        raise AssertionError(f"{self.__class__.__name__} cannot handle {request.method}")

    def parse_payload(self):
        """Collect the request input into `request.payload`.

        Write requests are read from the body according to its content type,
        other requests from the query string.
        """
        if request.method not in WRITE_METHODS:
            request.payload = multidict_to_dict(request.args)
        else:
            content_type = request.content_type or get_setting("DEFAULT_CONTENT_TYPE")
            mime_type, _ = parse_options_header(content_type)

            if mime_type in FORM_MIME_TYPES:
                request.payload = {
                    **multidict_to_dict(request.form),
                    **multidict_to_dict(request.files),
                }
            elif mime_type == "application/json":
                body = request.get_json(force=True, silent=True)
                request.payload = {} if body is None else body
            else:
                request.payload = {}

        parser = getattr(type(self), "parser", None)
        if parser:
            perform_import(parser)()

    def get_authenticators(self):
        classes = self.authentication_classes
        if classes is None:
            classes = get_setting("AUTHENTICATION_CLASSES")
        return [auth_cls() for auth_cls in perform_import(classes) or []]

    def get_permissions(self):
        classes = self.permission_classes
        if classes is None:
            classes = get_setting("PERMISSION_CLASSES")
        return [permission_cls() for permission_cls in perform_import(classes) or []]

    def perform_authentication(self):
        """Identify the user with the first authenticator that recognizes the request"""
        for authenticator in self.get_authenticators():
            user = authenticator.authenticate()
            if user is not None:
                self.user = user
                break

        g.user = self.user

    def check_permissions(self):
        """Raise if any permission class denies the request"""
        for permission in self.get_permissions():
            if not permission.has_permission(request, self):
                if self.user is None:
                    raise NotAuthenticated("Authentication credentials were not provided.")
                raise PermissionDenied(permission.message)

    def render_response(self, response):
        """Turn the handler's return value into a Flask response"""
        if isinstance(response, current_app.response_class):
            return response

        # Renderers are plain functions, so look them up on the class
        renderer = perform_import(
            getattr(type(self), "renderer", None) or get_setting("DEFAULT_RENDERER")
        )
        return renderer(*self._unpack_response(response))

    @staticmethod
    def _unpack_response(value):
        """Normalize a handler's return value to `(data, code, headers)`"""
        if isinstance(value, tuple) and len(value) in (2, 3):
            data, code, *rest = value
            return data, code, rest[0] if rest else {}
        return value, 200, {}

    def dispatch_request(self, *args, **kwargs):
        handler = self._lookup_method()

        self.parse_payload()
        self.perform_authentication()
        self.check_permissions()

        return self.render_response(handler(*args, **kwargs))


def fail(response_failure):
    """Abort request handling with the failure response"""
    raise UsecaseExecutionError((response_failure.code, response_failure.value))


class GenericAPIResource(APIResource):
    """Base view for the CRUD operations on an entity.

    Subclasses declare the `entity_cls` they expose and the `serializer_cls`
    used for both input validation and output shaping. `pagination_cls`
    defaults to the `DEFAULT_PAGINATION_CLASS` setting.

    Single items are rendered as `{<resource>: {...}}`, collections as a
    page under the plural resource name along with the paging metadata.
    """

    entity_cls = None
    serializer_cls = None
    pagination_cls = None

    def get_entity_cls(self):
        if not self.entity_cls:
            raise ConfigurationError(
                f"`{self.__class__.__name__}` needs an `entity_cls` attribute, "
                f"or an override of `get_entity_cls()`"
            )
        return self.entity_cls

    def get_serializer_cls(self):
        if not self.serializer_cls:
            raise ConfigurationError(
                f"`{self.__class__.__name__}` needs a `serializer_cls` attribute, "
                f"or an override of `get_serializer_cls()`"
            )
        return self.serializer_cls

    def get_serializer(self, *args, **kwargs):
        """Serializer for this request, with the view and user in its context"""
        serializer = self.get_serializer_cls()(*args, **kwargs)
        serializer.context = self.get_serializer_context()
        return serializer

    def get_serializer_context(self):
        return {"view": self, "user": self.user}

    def get_paginator(self):
        pagination_cls = self.pagination_cls or get_setting("DEFAULT_PAGINATION_CLASS")
        return perform_import(pagination_cls)()

    def get_payload(self):
        """Input data for create and update operations"""
        return request.payload

    def get_object(self, identifier):
        """Fetch the entity, or fail the request with a 404"""
        try:
            return repository_for(self.get_entity_cls()).get(identifier)
        except ObjectNotFoundError:
            fail(
                ResponseFailure.build_not_found(
                    {"identifier": ["Object with this ID does not exist."]}
                )
            )

    def validate_payload(self, payload, partial=False):
        """Validate the input with the serializer, failing the request with a 400"""
        data, errors = self.get_serializer().validate_payload(payload, partial=partial)
        if errors:
            fail(ResponseFailure.build_parameters_error(errors))
        return data

    def serialize_page(self, items, serializer=None):
        """Paginate and serialize `items` into the list response body"""
        serializer = serializer or self.get_serializer(many=True)
        paginator = self.get_paginator()
        try:
            pagination = paginator.paginate(items, request.args, url=request.url)
        except InvalidPageError as exc:
            fail(ResponseFailure.build_not_found({"page": [str(exc)]}))

        entity_cls = serializer.opts.entity_cls
        return paginator.get_paginated_data(
            serializer.dump(pagination.items), pagination, key=resource_plural(entity_cls)
        )

    def _process_request(self, usecase_cls, request_object_cls, payload, many=False):
        """Run the use case and shape its result into the response body.

        Failures abort the request through `UsecaseExecutionError`.
        """
        entity_cls = self.get_entity_cls()
        response_object = Tasklet.perform(
            entity_cls, usecase_cls, request_object_cls, payload, raise_error=True
        )
        code = response_object.code.value

        if response_object.code == Status.SUCCESS_WITH_NO_CONTENT:
            return Response(None, code)

        if many:
            return self.serialize_page(response_object.value), code

        body = self.get_serializer().dump(response_object.value)
        return {resource_name(entity_cls): body}, code

    def show_resource(self, identifier):
        return self._process_request(
            ShowUseCase, ShowRequestObject, payload={"identifier": identifier}
        )

    def list_resources(self):
        return self._process_request(
            ListUseCase, ListRequestObject, payload=dict(request.payload), many=True
        )

    def create_resource(self):
        data = self.validate_payload(self.get_payload())
        return self._process_request(CreateUseCase, CreateRequestObject, payload={"data": data})

    def update_resource(self, identifier, partial=False):
        self.get_object(identifier)
        data = self.validate_payload(self.get_payload(), partial=partial)
        return self._process_request(
            UpdateUseCase,
            UpdateRequestObject,
            payload={"identifier": identifier, "data": data},
        )

    def delete_resource(self, identifier):
        return self._process_request(
            DeleteUseCase, DeleteRequestObject, payload={"identifier": identifier}
        )


class ShowAPIResource(GenericAPIResource):
    """Responds to `GET <item>` with a single entity"""

    def get(self, identifier):
        return self.show_resource(identifier)


class ListAPIResource(GenericAPIResource):
    """Responds to `GET <collection>` with a page of entities.

    Query parameters naming an attribute filter the collection, `order_by`
    sorts it.
    """

    def get(self):
        return self.list_resources()


class CreateAPIResource(GenericAPIResource):
    """Responds to `POST <collection>` by creating an entity"""

    def post(self):
        return self.create_resource()


class UpdateAPIResource(GenericAPIResource):
    """Responds to `PUT <item>` with a full update, `PATCH <item>` with a partial one"""

    def put(self, identifier):
        return self.update_resource(identifier)

    def patch(self, identifier):
        return self.update_resource(identifier, partial=True)


class DeleteAPIResource(GenericAPIResource):
    """Responds to `DELETE <item>` by removing the entity"""

    def delete(self, identifier):
        return self.delete_resource(identifier)
