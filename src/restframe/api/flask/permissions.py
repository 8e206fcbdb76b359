"""Permission checks run by API views before the handler method"""

SAFE_METHODS = ("GET", "HEAD", "OPTIONS")


class BasePermission:
    """A base class from which all permission classes should inherit."""

    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        """Return `True` if permission is granted, `False` otherwise."""
        return True


class AllowAny(BasePermission):
    """Allow any access."""


class IsAuthenticated(BasePermission):
    """Allows access only to authenticated users."""

    def has_permission(self, request, view):
        return view.user is not None


class IsAuthenticatedOrReadOnly(BasePermission):
    """The request is authenticated as a user, or is a read-only request."""

    def has_permission(self, request, view):
        return request.method in SAFE_METHODS or view.user is not None
