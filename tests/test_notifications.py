"""
Notification routes
"""

import uuid

import pytest


@pytest.fixture
def seeded(fake_db, make_bin):
    bin_row = make_bin(name="Bin C", location="Plaza")
    other = make_bin(name="Bin D", location="Park Avenue")
    fake_db.seed("notifications", bin_id=bin_row["id"], message="Bin C 95%", type="critical",
                 read=False, created_at="2025-01-01T10:00:00+00:00")
    fake_db.seed("notifications", bin_id=bin_row["id"], message="Bin C 75%", type="warning",
                 read=True, created_at="2025-01-01T09:00:00+00:00")
    fake_db.seed("notifications", bin_id=other["id"], message="Bin D battery low", type="info",
                 read=False, created_at="2025-01-01T11:00:00+00:00")
    return bin_row, other


def test_list_embeds_bin_and_counts_unread(client, seeded, auth_headers):
    response = client.get("/api/notifications", headers=auth_headers())

    assert response.status_code == 200
    body = response.json()
    assert body["unreadCount"] == 2
    assert [n["message"] for n in body["notifications"]] == ["Bin D battery low", "Bin C 95%", "Bin C 75%"]
    assert body["notifications"][1]["trash_bins"]["location"] == "Plaza"


def test_list_unread_for_one_bin(client, seeded, auth_headers):
    bin_row, _ = seeded

    response = client.get(
        "/api/notifications", params={"bin_id": bin_row["id"], "unread_only": True}, headers=auth_headers()
    )

    body = response.json()
    assert [n["message"] for n in body["notifications"]] == ["Bin C 95%"]
    assert body["unreadCount"] == 1


def test_list_requires_token(client):
    assert client.get("/api/notifications").status_code == 401


def test_mark_read(client, fake_db, seeded, auth_headers):
    target = fake_db.rows("notifications")[0]

    response = client.patch(f"/api/notifications/{target['id']}/read", headers=auth_headers())

    assert response.status_code == 200
    assert response.json()["read"] is True
    assert fake_db.find("notifications", "id", target["id"])["read"] is True


def test_mark_read_unknown_returns_404(client, auth_headers):
    response = client.patch(f"/api/notifications/{uuid.uuid4()}/read", headers=auth_headers())

    assert response.status_code == 404


def test_mark_all_read(client, fake_db, seeded, auth_headers):
    response = client.patch("/api/notifications/read-all", headers=auth_headers())

    assert response.status_code == 200
    assert response.json()["updated"] == 2
    assert all(n["read"] for n in fake_db.rows("notifications"))


def test_delete(client, fake_db, seeded, auth_headers):
    target = fake_db.rows("notifications")[0]

    response = client.delete(f"/api/notifications/{target['id']}", headers=auth_headers())

    assert response.status_code == 204
    assert len(fake_db.rows("notifications")) == 2


def test_officer_creates_notification(client, fake_db, make_bin, auth_headers):
    bin_row = make_bin()

    response = client.post(
        "/api/notifications",
        json={"bin_id": bin_row["id"], "message": "Lid damaged", "type": "warning"},
        headers=auth_headers("officer")
    )

    assert response.status_code == 201
    assert fake_db.rows("notifications")[0]["message"] == "Lid damaged"


def test_public_cannot_create_notification(client, make_bin, auth_headers):
    bin_row = make_bin()

    response = client.post(
        "/api/notifications",
        json={"bin_id": bin_row["id"], "message": "Lid damaged"},
        headers=auth_headers("public")
    )

    assert response.status_code == 403


def test_create_for_unknown_bin_returns_404(client, auth_headers):
    response = client.post(
        "/api/notifications",
        json={"bin_id": str(uuid.uuid4()), "message": "Lid damaged"},
        headers=auth_headers("admin")
    )

    assert response.status_code == 404


def test_malformed_bin_filter_returns_400(client, fake_db, seeded, auth_headers):
    listed = client.get("/api/notifications", params={"bin_id": "abc"}, headers=auth_headers())
    marked = client.patch("/api/notifications/read-all", params={"bin_id": "abc"}, headers=auth_headers())

    assert listed.status_code == 400
    assert marked.status_code == 400
    assert sum(not n["read"] for n in fake_db.rows("notifications")) == 2
