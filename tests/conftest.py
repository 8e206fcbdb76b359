"""Module to setup the app, clients and other required artifacts for tests

    isort:skip_file
"""

import pytest

from restframe.core.repository import repository_for, reset_repositories


@pytest.fixture(autouse=True)
def run_around_tests():
    """Cleanup stored records and issued tokens after each test run"""
    # A test function will be run at this point
    yield

    from blog_api.identity import revoke_tokens

    reset_repositories()
    revoke_tokens()


@pytest.fixture
def app():
    from blog_api import create_app

    app = create_app({"TESTING": True, "SERVER_NAME": "localhost"})
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    """Setup client for test cases"""
    return app.test_client()


@pytest.fixture
def user():
    from blog_api.models import User

    return repository_for(User).create(username="john")


@pytest.fixture
def token(user):
    from blog_api.identity import issue_token

    return issue_token(user)


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Token {token}"}
