"""
Shared pytest fixtures for the task tracker test suite.

Provides the Flask application, test client, database session, data
factories for persons and tasks, and ready-made tokens/headers for an
ordinary user, a second user and an administrator.

Key Concepts Demonstrated:
- Session-scoped vs function-scoped fixtures for performance and isolation
- Factory pattern (person_factory, task_factory) for flexible test data
- Database setup/teardown so every test starts from empty tables
- Tokens minted by the application's own TokenService
"""

from __future__ import annotations

import os

import pytest
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"
os.environ["TEST_JWT_SECRET_KEY"] = "test-jwt-secret-key-for-local-tests-0123456789"

from tests.helpers import DEFAULT_PASSWORD, auth_headers
from tracker_app import create_app, db
from tracker_app.jwt import Principal
from tracker_app.models import Person, Role, Task, TaskStatus

fake = Faker()


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    """
    Create the application once for the whole test session.

    Yields:
        Flask application configured with ``TestingConfig``.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Fresh test client per test, so cookies never leak between tests."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide clean tables for each test.

    Creates all tables, yields the ``db`` extension, then rolls back and
    drops everything.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def token_service(app):
    return app.extensions["token_service"]


@pytest.fixture
def jwt_secret() -> str:
    """The signing secret the test app was created with."""
    return os.environ["TEST_JWT_SECRET_KEY"]


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def person_factory(db_session):
    """
    Factory fixture for creating Person rows.

    Usernames and full names are generated long enough to satisfy the
    8-character minimums. Every person gets :data:`DEFAULT_PASSWORD`
    unless one is given.

    Example:
        def test_something(person_factory):
            admin = person_factory(role=Role.ADMIN)
    """

    def _create_person(
        *,
        username: str | None = None,
        full_name: str | None = None,
        password: str = DEFAULT_PASSWORD,
        role: Role = Role.USER,
    ) -> Person:
        person = Person(
            username=username or f"{fake.user_name()}_{fake.unique.random_int(1000, 9999)}",
            full_name=full_name or f"{fake.first_name()} {fake.last_name()} Jr",
            role=role.value,
        )
        person.set_password(password)
        db_session.session.add(person)
        db_session.session.commit()
        return person

    return _create_person


@pytest.fixture
def task_factory(db_session):
    """
    Factory fixture for creating Task rows owned by a given person.

    Example:
        task = task_factory(owner, status=TaskStatus.DONE)
    """

    def _create_task(
        owner: Person,
        *,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus = TaskStatus.TO_DO,
    ) -> Task:
        task = Task(
            title=title or fake.sentence(nb_words=4)[:100],
            description=description if description is not None else fake.paragraph(),
            tracking_status=status.value,
            person_id=owner.person_id,
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


# -----------------------------------------------------------------------------
# Identity Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def user(person_factory) -> Person:
    return person_factory(username="user_one_account", full_name="User One Example")


@pytest.fixture
def other_user(person_factory) -> Person:
    return person_factory(username="user_two_account", full_name="User Two Example")


@pytest.fixture
def admin(person_factory) -> Person:
    return person_factory(
        username="admin_account", full_name="Admin Person Example", role=Role.ADMIN
    )


def _principal(person: Person) -> Principal:
    return Principal.from_view(person.to_dict())


@pytest.fixture
def user_headers(token_service, user) -> dict[str, str]:
    return auth_headers(token_service.issue(_principal(user)))


@pytest.fixture
def other_user_headers(token_service, other_user) -> dict[str, str]:
    return auth_headers(token_service.issue(_principal(other_user)))


@pytest.fixture
def admin_headers(token_service, admin) -> dict[str, str]:
    return auth_headers(token_service.issue(_principal(admin)))


@pytest.fixture
def json_headers() -> dict[str, str]:
    """Headers for anonymous JSON requests."""
    return {"Content-Type": "application/json", "Accept": "application/json"}
