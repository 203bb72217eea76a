"""Unauthenticated discovery endpoints and engagement counters."""
import pytest

from virtual_museum.extensions import db
from virtual_museum.models.submission import Submission

PUBLIC = "/api/v1/virtual-museum/public"
ADMIN = "/api/v1/admin/virtual-museum/submissions"


@pytest.fixture
def published(create_submission, advance):
    submission = create_submission()
    advance(submission["id"], "published")
    return submission["id"]


def test_feed_ordering(client, create_submission, advance, reviewer_headers):
    ids = {}
    for title in ("Axum", "Gondar", "Harar", "Lalibela"):
        ids[title] = create_submission(title=title)["id"]
        advance(ids[title], "approved")

    for title in ("Axum", "Gondar", "Lalibela"):
        client.post(f"{ADMIN}/{ids[title]}/publish", json={}, headers=reviewer_headers)
    client.post(f"{ADMIN}/{ids['Harar']}/publish", json={"featured": True}, headers=reviewer_headers)

    client.get(f"{PUBLIC}/{ids['Gondar']}")
    client.get(f"{PUBLIC}/{ids['Gondar']}")

    resp = client.get(PUBLIC)
    assert resp.status_code == 200
    titles = [s["title"] for s in resp.get_json()["data"]]
    # featured first, then most viewed, then newest
    assert titles == ["Harar", "Gondar", "Lalibela", "Axum"]

    resp = client.get(f"{PUBLIC}?featured=true")
    assert [s["title"] for s in resp.get_json()["data"]] == ["Harar"]


def test_feed_excludes_unpublished(client, create_submission, advance, published):
    create_submission(title="Draft")
    approved = create_submission(title="Approved only")
    advance(approved["id"], "approved")

    body = client.get(PUBLIC).get_json()
    assert [s["id"] for s in body["data"]] == [published]
    assert body["pagination"]["total"] == 1


def test_feed_pagination(client, create_submission, advance):
    for i in range(3):
        advance(create_submission(title=f"Hall {i}")["id"], "published")

    body = client.get(f"{PUBLIC}?page=2&limit=2").get_json()
    assert len(body["data"]) == 1
    assert body["pagination"] == {"total": 3, "page": 2, "limit": 2, "total_pages": 2}


def test_view_counts(client, published):
    first = client.get(f"{PUBLIC}/{published}")
    assert first.status_code == 200
    assert first.get_json()["data"]["metrics"]["views"] == 1
    assert first.get_json()["data"]["metrics"]["last_viewed"] is not None

    second = client.get(f"{PUBLIC}/{published}")
    assert second.get_json()["data"]["metrics"]["views"] == 2


def test_view_unpublished_is_not_found(client, create_submission):
    submission = create_submission()
    resp = client.get(f"{PUBLIC}/{submission['id']}")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["code"] == "NOT_FOUND"


def test_deleted_published_record_is_hidden(app, client, published):
    with app.app_context():
        db.session.get(Submission, published).is_deleted = True
        db.session.commit()

    assert client.get(f"{PUBLIC}/{published}").status_code == 404
    assert client.get(PUBLIC).get_json()["data"] == []
    assert client.post(f"{PUBLIC}/{published}/favorite").status_code == 404


def test_rate(client, published):
    client.post(f"{PUBLIC}/{published}/rate", json={"rating": 4})
    resp = client.post(f"{PUBLIC}/{published}/rate", json={"rating": 5})
    assert resp.status_code == 200
    metrics = resp.get_json()["data"]["metrics"]
    assert metrics["total_ratings"] == 2
    assert metrics["average_rating"] == 4.5


@pytest.mark.parametrize("body", [{}, {"rating": 0}, {"rating": 6}, {"rating": "5"}, {"rating": 4.5}])
def test_rate_validation(client, published, body):
    resp = client.post(f"{PUBLIC}/{published}/rate", json=body)
    assert resp.status_code == 422
    assert "rating" in resp.get_json()["error"]["details"]


def test_rate_unpublished_is_not_found(client, create_submission):
    submission = create_submission()
    resp = client.post(f"{PUBLIC}/{submission['id']}/rate", json={"rating": 5})
    assert resp.status_code == 404


def test_favorite_and_share(client, published):
    client.post(f"{PUBLIC}/{published}/favorite")
    resp = client.post(f"{PUBLIC}/{published}/favorite")
    assert resp.get_json()["data"]["metrics"]["favorites"] == 2

    resp = client.post(f"{PUBLIC}/{published}/share")
    metrics = resp.get_json()["data"]["metrics"]
    assert metrics["shares"] == 1
    assert metrics["views"] == 0


def test_view_includes_catalog_details(client, published):
    artifacts = client.get(f"{PUBLIC}/{published}").get_json()["data"]["artifacts"]
    assert [a["name"] for a in artifacts] == ["Processional Cross", "Illuminated Gospel"]
    assert [a["category"] for a in artifacts] == ["religious-items", "manuscripts"]


def test_feed_includes_catalog_details(client, published):
    data = client.get(PUBLIC).get_json()["data"]
    assert [a["name"] for a in data[0]["artifacts"]] == ["Processional Cross", "Illuminated Gospel"]
