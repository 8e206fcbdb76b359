"""The Flask extension that wires RestFrame into an application"""

import logging

from flask import Request, current_app, g, request

from restframe.api.flask.routers import Router
from restframe.api.flask.views import APIResource
from restframe.conf import active_config, get_setting
from restframe.exceptions import (
    AuthenticationFailed,
    NotAuthenticated,
    PermissionDenied,
    UsecaseExecutionError,
)
from restframe.utils import perform_import

logger = logging.getLogger(__name__)


class RestFrameRequest(Request):
    """Request class whose `payload` holds the input parsed by the view"""

    payload = None


class RestFrame:
    """Flask extension serving RestFrame viewsets.

    >>> app = Flask(__name__)
    >>> api = RestFrame(app)
    >>> api.register_viewset(PostResourceSet, "posts", "/posts")

    The app can also be bound later with `init_app`. Settings already present
    in `app.config` take precedence over the active RestFrame config.
    """

    def __init__(self, app=None):
        self.app = None
        self.router = Router()

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Bind the extension, and the routes registered so far, to `app`"""
        self.app = app
        app.request_class = RestFrameRequest
        app.before_request(self._load_identity)

        app.register_error_handler(UsecaseExecutionError, self._handle_exception)
        app.register_error_handler(AuthenticationFailed, self._handle_unauthenticated)
        app.register_error_handler(NotAuthenticated, self._handle_unauthenticated)
        app.register_error_handler(PermissionDenied, self._handle_forbidden)

        for setting, value in active_config.as_dict().items():
            app.config.setdefault(setting, value)

        app.extensions["restframe"] = self
        self.router.init_app(app)

    def register_viewset(self, view, endpoint, url, pk_name="identifier", pk_type="int"):
        """Expose `view` under `url`, with `endpoint` as the basename of its routes"""
        self.router.register(url, view, basename=endpoint, pk_type=pk_type, pk_name=pk_name)

    @staticmethod
    def _load_identity():
        g.user = None

    @staticmethod
    def _get_renderer():
        """Renderer of the view that failed, so errors match its successes"""
        renderer = None
        if request.url_rule:
            view_func = current_app.view_functions[request.url_rule.endpoint]
            view_class = getattr(view_func, "view_class", None)
            if view_class and issubclass(view_class, APIResource):
                renderer = getattr(view_class, "renderer", None)
        return perform_import(renderer or get_setting("DEFAULT_RENDERER"))

    def _handle_exception(self, exc):
        """Render the failure response carried by a `UsecaseExecutionError`"""
        handler = perform_import(get_setting("EXCEPTION_HANDLER"))
        if handler:
            code, data, headers = handler(exc)
        else:
            status, data = exc.value
            code, headers = status.value, {}

        logger.info(f"{request.method} {request.path} failed with {code}: {data}")
        return self._get_renderer()(data, code, headers)

    @staticmethod
    def _authenticate_header():
        """`WWW-Authenticate` value of the first authentication scheme defining one"""
        for auth_cls in perform_import(get_setting("AUTHENTICATION_CLASSES")) or []:
            header = auth_cls().authenticate_header()
            if header:
                return header
        return None

    def _handle_unauthenticated(self, exc):
        logger.warning(f"{request.method} {request.path} unauthenticated: {exc}")
        header = self._authenticate_header()
        return self._get_renderer()(
            {"code": 401, "message": str(exc)},
            401,
            {"WWW-Authenticate": header} if header else {},
        )

    def _handle_forbidden(self, exc):
        logger.warning(f"{request.method} {request.path} forbidden: {exc}")
        return self._get_renderer()({"code": 403, "message": str(exc)}, 403, {})
