"""
Default settings. Override these with settings in the module pointed to
by the RESTFRAME_CONFIG environment variable, or per application through
the Flask app's config.
"""

####################
# CORE             #
####################

DEBUG = False

# A secret key for this particular RestFrame installation. Also used by Flask
# to sign session cookies.
SECRET_KEY = "kN3q!vXo7#RcT0p@Lw8sZ2yH"

# Level used by `restframe.utils.logging.configure_logging` when neither an
# explicit level nor RESTFRAME_LOG_LEVEL is supplied.
LOG_LEVEL = "INFO"

####################
# PAGINATION       #
####################

# Policy class used by list views that do not declare `pagination_cls`
DEFAULT_PAGINATION_CLASS = "restframe.core.pagination.PageNumberPagination"

# Default no. of records to return per page
PAGE_SIZE = 10

# Upper bound for page sizes requested through query parameters
MAX_PAGE_SIZE = 100

####################
# APIs             #
####################

# Default content type of the input data if none provided
DEFAULT_CONTENT_TYPE = "application/json"

# Custom exception handler for the app.
#   Called with the exception, must return a `(code, data, headers)` tuple.
EXCEPTION_HANDLER = None

# Default output renderer for the app
DEFAULT_RENDERER = "restframe.api.flask.renderers.render_json"

####################
# IDENTITY         #
####################

# Authentication classes tried in order. The first to return a user wins.
AUTHENTICATION_CLASSES = [
    "restframe.api.flask.authentication.SessionAuthentication",
    "restframe.api.flask.authentication.TokenAuthentication",
]

# Permission classes checked on every request
PERMISSION_CLASSES = ["restframe.api.flask.permissions.AllowAny"]

# Callable that accepts a user identifier (as stored in the session) and
#   returns the user record, or None.
USER_LOADER = None

# Callable that accepts a token key and returns the user record, or None.
TOKEN_LOADER = None
