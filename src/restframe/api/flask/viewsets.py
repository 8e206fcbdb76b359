"""Viewsets group the CRUD handlers of an entity into a single class, for
the router to expose. Extra endpoints are declared with `action`.
"""

from restframe.api.flask.views import GenericAPIResource
from restframe.exceptions import IncorrectUsageError

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def action(detail, method="GET", url_path=None):
    """Mark a viewset method as a routable action.

    :param detail: `True` when the action applies to a single item, and is
        routed below the item URL with the identifier passed to the method.
        `False` routes the action below the collection URL.
    :param method: The single HTTP method the action answers to.
    :param url_path: URL segment of the action. Defaults to the method name.
    """
    method = method.upper()
    if method not in METHODS:
        raise IncorrectUsageError(f"`{method}` is not a supported HTTP method")

    def decorator(func):
        func.action_detail = detail
        func.action_method = method
        func.url_path = url_path or func.__name__
        return func

    return decorator


class GenericAPIResourceSet(GenericAPIResource):
    """All CRUD operations of an entity behind two URLs, the collection and the item.

    `operations` lists what the router exposes, among `list`, `create`,
    `show`, `update`, `patch` and `delete`. Narrow it down in subclasses to
    leave operations out.
    """

    operations = ("list", "create", "show", "update", "patch", "delete")

    @classmethod
    def get_extra_actions(cls):
        """Methods decorated with `action`, by name"""
        return {
            name: attr
            for name, attr in ((name, getattr(cls, name, None)) for name in dir(cls))
            if callable(attr) and hasattr(attr, "action_detail")
        }

    def get(self, identifier=None):
        if identifier is None:
            return self.list_resources()
        return self.show_resource(identifier)

    def post(self):
        return self.create_resource()

    def put(self, identifier):
        return self.update_resource(identifier)

    def patch(self, identifier):
        return self.update_resource(identifier, partial=True)

    def delete(self, identifier):
        return self.delete_resource(identifier)


class ReadOnlyAPIResourceSet(GenericAPIResourceSet):
    """A viewset that only lists and shows entities"""

    operations = ("list", "show")
