import nox

PYTHON_VERSIONS = ["3.10", "3.11", "3.12", "3.13"]


def _install(session: nox.Session) -> None:
    """Install the project with test extras into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the test suite across Python versions."""
    _install(session)
    session.run("pytest", "--cov=restframe", "--cov=blog_api", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
@nox.parametrize("marshmallow", ["3", "4"])
def marshmallow(session: nox.Session, marshmallow: str) -> None:
    """Run the serializer tests against each marshmallow major version."""
    _install(session)
    session.install(f"marshmallow~={marshmallow}.0")
    session.run("pytest", "tests/serializer", *session.posargs)
