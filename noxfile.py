import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

# Packages with C extensions that must be rebuilt per Python version.
_C_EXT_PACKAGES = ["psycopg2"]


def _install(session: nox.Session, with_postgres: bool = False) -> None:
    """Install the project with test extras into the nox virtualenv."""
    extras = "test,postgres,redis" if with_postgres else "test"
    session.install("-e", f".[{extras}]")
    if with_postgres:
        # Force-rebuild C-extension packages so the .so matches this Python version.
        session.install("--force-reinstall", "--no-cache-dir", *_C_EXT_PACKAGES)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run("pytest", "tests/fulfillment/domain/")


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_production(session: nox.Session) -> None:
    """Run the suite against PostgreSQL and Redis (services must be running)."""
    _install(session, with_postgres=True)
    session.run("pytest", "--env", "production", *session.posargs)
