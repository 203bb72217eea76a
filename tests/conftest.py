"""
Shared pytest fixtures for the virtual museum submission pipeline.

Each test gets a fresh app bound to its own file-backed SQLite database,
seeded with catalog artifacts for two museums.
"""

import pytest
from flask_jwt_extended import create_access_token

from virtual_museum.extensions import db
from virtual_museum.main import create_app
from virtual_museum.models.artifact import Artifact

MUSEUM_M = "mus-m"
MUSEUM_N = "mus-n"

CATALOG = [
    ("art-m1", MUSEUM_M, "Processional Cross", "religious-items", "on_display"),
    ("art-m2", MUSEUM_M, "Illuminated Gospel", "manuscripts", "in_storage"),
    ("art-m3", MUSEUM_M, "Axum Coin", "coins", "on_loan"),
    ("art-n1", MUSEUM_N, "Gondar Shield", "weapons", "on_display"),
]


# ==================== APP FIXTURES ====================

@pytest.fixture
def app(tmp_path):
    app = create_app(
        "testing",
        {
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
            "SQLALCHEMY_ENGINE_OPTIONS": {"connect_args": {"timeout": 30}},
        },
    )
    with app.app_context():
        db.create_all()
        for artifact_id, museum_id, name, category, status in CATALOG:
            db.session.add(Artifact(
                id=artifact_id,
                museum_id=museum_id,
                name=name,
                category=category,
                status=status,
            ))
        db.session.commit()
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return app.extensions["virtual_museum"]


# ==================== AUTH FIXTURES ====================

@pytest.fixture
def token_for(app):
    """Mint bearer headers the way the identity service would."""

    def _make(user_id="usr-m1", role="museum_admin", museum_id=MUSEUM_M):
        claims = {"role": role}
        if museum_id:
            claims["museum_id"] = museum_id
        with app.app_context():
            token = create_access_token(identity=user_id, additional_claims=claims)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def museum_headers(token_for):
    return token_for()


@pytest.fixture
def other_museum_headers(token_for):
    return token_for("usr-n1", museum_id=MUSEUM_N)


@pytest.fixture
def reviewer_headers(token_for):
    return token_for("usr-admin", role="super_admin", museum_id=None)


# ==================== SUBMISSION HELPERS ====================

def submission_payload(**overrides):
    payload = {
        "title": "Lalibela Churches",
        "type": "Gallery",
        "description": "Rock-hewn churches of Lalibela, carved in the 12th century.",
        "artifacts": [
            {"artifact_id": "art-m1", "display_order": 0},
            {"artifact_id": "art-m2", "display_order": 1, "featured": True},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_submission(client, museum_headers):
    def _create(headers=None, **overrides):
        resp = client.post(
            "/api/v1/virtual-museum/submissions",
            json=submission_payload(**overrides),
            headers=headers or museum_headers,
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _create


@pytest.fixture
def advance(client, museum_headers, reviewer_headers):
    """Drive a submission through the pipeline up to ``status``."""

    def _advance(submission_id, status):
        steps = ["under_review", "approved", "published"]
        if status == "rejected":
            steps = ["under_review", "rejected"]
        for step in steps:
            if step == "under_review":
                resp = client.post(
                    f"/api/v1/virtual-museum/submissions/{submission_id}/submit",
                    headers=museum_headers,
                )
            elif step in ("approved", "rejected"):
                body = {"decision": step, "feedback": "Reviewed"}
                if step == "rejected":
                    body["rejection_reason"] = "needs higher-resolution images"
                resp = client.post(
                    f"/api/v1/admin/virtual-museum/submissions/{submission_id}/review",
                    json=body,
                    headers=reviewer_headers,
                )
            else:
                resp = client.post(
                    f"/api/v1/admin/virtual-museum/submissions/{submission_id}/publish",
                    json={},
                    headers=reviewer_headers,
                )
            assert resp.status_code == 200, resp.get_json()
            if step == status:
                break
        return resp.get_json()["data"]

    return _advance


@pytest.fixture
def make_payload():
    return submission_payload
