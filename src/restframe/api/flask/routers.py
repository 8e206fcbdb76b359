"""Generate URL rules for viewsets

For a viewset registered under `/posts` with the basename `posts`, the router
generates:

    =======================  ========  ===============
    Rule                     Method    Endpoint
    =======================  ========  ===============
    /posts                   GET       list_posts
    /posts                   POST      create_posts
    /posts/<int:identifier>  GET       show_posts
    /posts/<int:identifier>  PUT       update_posts
    /posts/<int:identifier>  PATCH     patch_posts
    /posts/<int:identifier>  DELETE    delete_posts
    =======================  ========  ===============

plus one rule for every method decorated with `action`.
"""

import logging

from collections import namedtuple

from restframe.exceptions import ConfigurationError
from restframe.utils import resource_plural

logger = logging.getLogger(__name__)

Route = namedtuple("Route", ["rule", "endpoint", "view_func", "methods"])

# Operation name -> (route is for an item, HTTP method)
OPERATIONS = {
    "list": (False, "GET"),
    "create": (False, "POST"),
    "show": (True, "GET"),
    "update": (True, "PUT"),
    "patch": (True, "PATCH"),
    "delete": (True, "DELETE"),
}


class Router:
    """Collects viewset registrations and installs their routes on a Flask app

    Routes are added to the app immediately when the router is bound to one,
    otherwise when `init_app` is called.
    """

    def __init__(self, app=None):
        self.app = None
        self.registry = []

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        for route in self.routes:
            self._add_route(route)

    def register(self, prefix, viewset, basename=None, pk_type="int", pk_name="identifier"):
        """Register a viewset under the URL `prefix`

        :param basename: Suffix of the endpoint names. Defaults to the plural
            resource name of the viewset's entity.
        :param pk_type: Werkzeug converter of the identifier in item routes.
        :param pk_name: Name of the identifier argument passed to the viewset.
        """
        if basename is None:
            entity_cls = getattr(viewset, "entity_cls", None)
            if entity_cls is None:
                raise ConfigurationError(
                    f"`basename` argument not specified, and could not be derived "
                    f"for `{viewset.__name__}`: it has no `entity_cls` attribute."
                )
            basename = resource_plural(entity_cls)

        if any(registered[2] == basename for registered in self.registry):
            raise ConfigurationError(f"A viewset is already registered as `{basename}`")

        registration = (prefix, viewset, basename, pk_type, pk_name)
        routes = self.get_routes(*registration)
        self.registry.append(registration)

        if self.app is not None:
            for route in routes:
                self._add_route(route)

    def get_routes(self, prefix, viewset, basename, pk_type, pk_name):
        """Return the `Route` list of a single registration"""
        collection_rule = "/" + prefix.strip("/")
        item_rule = f"{collection_rule}/<{pk_type}:{pk_name}>"

        routes = []
        for operation in getattr(viewset, "operations", ()):
            if operation not in OPERATIONS:
                raise ConfigurationError(f"`{operation}` is not a known operation")
            detail, method = OPERATIONS[operation]
            endpoint = f"{operation}_{basename}"
            routes.append(
                Route(
                    rule=item_rule if detail else collection_rule,
                    endpoint=endpoint,
                    view_func=viewset.as_view(endpoint),
                    methods=[method],
                )
            )

        extra_actions = viewset.get_extra_actions() if hasattr(viewset, "get_extra_actions") else {}
        for name, func in extra_actions.items():
            base_rule = item_rule if func.action_detail else collection_rule
            endpoint = f"{name}_{basename}"
            routes.append(
                Route(
                    rule=f"{base_rule}/{func.url_path.strip('/')}",
                    endpoint=endpoint,
                    view_func=viewset.as_view(endpoint, action=name),
                    methods=[func.action_method],
                )
            )

        return routes

    @property
    def routes(self):
        """All routes generated for the registered viewsets"""
        routes = []
        for registration in self.registry:
            routes.extend(self.get_routes(*registration))
        return routes

    def _add_route(self, route):
        logger.debug(f"Adding route {route.methods} {route.rule} -> {route.endpoint}")
        self.app.add_url_rule(
            route.rule,
            endpoint=route.endpoint,
            view_func=route.view_func,
            methods=route.methods,
        )
