import os
from pathlib import Path
import nox

# Reuse existing virtualenvs for faster runs
nox.options.reuse_existing_virtualenvs = True
# Default sessions when running "nox"
nox.options.sessions = ["lint", "unit", "integration"]

# Common dependencies for test sessions
COMMON_DEPS = ["-e", ".[test]"]

# Environment variables to propagate
PASSED_ENV_VARS = [
    "DATABASE_URL",
    "ENVIRONMENT",
    "LOG_LEVEL",
    "CHECKIN_MAX_ATTEMPTS",
]


def _set_env(session):
    """
    Propagate database and test-related environment variables into the session.
    Also ensure the project root is on PYTHONPATH.
    """
    session.env["PYTHONPATH"] = str(Path.cwd())
    for var in PASSED_ENV_VARS:
        if var in os.environ:
            session.env[var] = os.environ[var]


@nox.session(name="lint")
def lint(session):
    """
    Code formatting, linting, and type-checks:
      - isort
      - black
      - flake8
      - mypy
    """
    _set_env(session)
    session.install("isort", "black", "flake8", "mypy")
    session.run("isort", "app/", "tests/")
    session.run("black", "app/", "tests/")
    session.run("flake8", "--max-line-length=110", "app/", "tests/")
    session.run("mypy", "app/")


@nox.session(name="unit")
def unit(session):
    """
    Run unit tests (engine, stores, sanitization, middleware).
    Usage:
      nox -s unit
      nox -s unit -- tests/unit/test_services/test_checkin.py
    """
    _set_env(session)
    session.install(*COMMON_DEPS)
    tests = session.posargs or ["tests/unit"]
    session.run(
        "pytest",
        *tests,
        "-m",
        "unit",
        "-vv",
        "--tb=short",
        "--cov=app",
        "--cov-report=term-missing",
        "--cov-report=html:.nox/htmlcov",
    )


@nox.session(name="integration")
def integration(session):
    """
    Run API tests through the FastAPI app against SQLite.
    Usage:
      nox -s integration
      nox -s integration -- tests/integration/test_api/test_checkin_api.py
    """
    _set_env(session)
    session.install(*COMMON_DEPS)
    tests = session.posargs or ["tests/integration"]
    session.run("pytest", *tests, "-vv", "--tb=short")


@nox.session(name="load")
def load(session):
    """
    Replay scanner traffic against a running server.
    Usage:
      LOCUST_HOST=http://localhost:8000 nox -s load
    """
    _set_env(session)
    session.install("-e", ".[load]")
    host = os.environ.get("LOCUST_HOST", "http://localhost:8000")
    session.run("locust", "-f", "locustfile.py", "--headless", "-u", "50", "-r", "10",
                "-t", "1m", "--host", host)
