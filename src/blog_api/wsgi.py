"""WSGI entry point of the blog API, for servers like gunicorn

    gunicorn blog_api.wsgi:app
"""

from restframe.utils.logging import configure_logging

from .app import create_app

configure_logging()
app = create_app()
