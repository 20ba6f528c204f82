"""
Shared pytest fixtures for the workflow routing service test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test reference data seed + table recreate (autouse)
    - client: Flask test client (function-scoped)
    - workflow / step / second_step / custom_dependency: scenario entities
      created through the API
"""

import pytest

from routeflow import create_app
from routeflow.models import db as _db
from routeflow.services.reference_data import seed_reference_data


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: seed reference rows, then drop and recreate every table."""
    with app.app_context():
        seed_reference_data(include_samples=True)
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


def create_workflow(client, description="Test Workflow"):
    res = client.post("/api/workflow/new", data={"description": description})
    assert res.status_code == 200
    return int(res.get_json())


def create_step(client, workflow_id, title="Step"):
    res = client.post(f"/api/workflow/{workflow_id}/step", data={"stepTitle": title})
    assert res.status_code == 200
    return int(res.get_json())


@pytest.fixture()
def workflow(client):
    """ID of a freshly created workflow."""
    return create_workflow(client)


@pytest.fixture()
def step(client, workflow):
    """ID of the first step of ``workflow`` (its initial step)."""
    return create_step(client, workflow, "Step 1")


@pytest.fixture()
def second_step(client, workflow, step):
    return create_step(client, workflow, "Step 2")


@pytest.fixture()
def custom_dependency(client):
    """ID of a custom requirement."""
    res = client.post("/api/workflow/dependencies", data={"description": "Test Requirement"})
    assert res.status_code == 200
    return int(res.get_json())
