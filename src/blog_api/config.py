"""Settings of the blog API, layered over the RestFrame defaults"""

SECRET_KEY = "blog-api-development-key"

PAGE_SIZE = 10
MAX_PAGE_SIZE = 50

PERMISSION_CLASSES = ["restframe.api.flask.permissions.IsAuthenticatedOrReadOnly"]

USER_LOADER = "blog_api.identity.load_user"
TOKEN_LOADER = "blog_api.identity.load_user_from_token"
