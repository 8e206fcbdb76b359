"""Application factory of the blog API"""

import logging

from flask import Flask

from restframe.api.flask import RestFrame

from .views import CommentResourceSet, PostResourceSet, UserResourceSet

logger = logging.getLogger(__name__)


def create_app(config=None):
    """Create the Flask app serving the blog API

    :param config: Optional mapping of settings overriding `blog_api.config`
    """
    app = Flask(__name__)
    app.config.from_object("blog_api.config")
    if config:
        app.config.update(config)

    api = RestFrame(app)
    api.register_viewset(PostResourceSet, "posts", "/posts")
    api.register_viewset(CommentResourceSet, "comments", "/comments")
    api.register_viewset(UserResourceSet, "users", "/users")

    logger.debug(f"Blog API created with {len(api.router.routes)} routes")
    return app
