"""Integration tests for the HTTP and WebSocket surface."""
from __future__ import annotations

from typing import Iterator
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from conftest import FakeMailer
from ireporter.database import SessionLocal
from ireporter.main import app
from ireporter.models import User


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def client(mailer: FakeMailer) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        app.state.mailer = mailer
        yield test_client


def _register(client: TestClient, first_name: str, *, password: str = "password123") -> dict:
    response = client.post(
        "/auth/register",
        json={
            "first_name": first_name,
            "last_name": "Okafor",
            "email": f"{first_name.lower()}@example.com",
            "password": password,
            "phone": "0800000000",
        },
    )
    assert response.status_code == 201, response.text
    token = response.cookies.get("token")
    assert token
    # Keep the jar empty so each request picks its identity from the header.
    client.cookies.clear()
    return {"user": response.json()["user"], "token": token}


def _auth(account: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {account['token']}"}


def _promote_to_admin(account: dict) -> None:
    with SessionLocal() as session:
        user = session.scalar(select(User).where(User.public_id == UUID(account["user"]["id"])))
        assert user is not None
        user.role = "admin"
        session.commit()


def _drain(client: TestClient) -> None:
    client.portal.call(app.state.tasks.join)


def test_session_cookie_round_trip(client: TestClient) -> None:
    response = client.post(
        "/auth/register",
        json={"first_name": "Ngozi", "last_name": "Eze", "email": "Ngozi@Example.com", "password": "password123"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Registration successful"
    assert body["user"]["email"] == "ngozi@example.com"
    assert body["user"]["role"] == "user"
    assert "hashed_password" not in body["user"]
    assert "httponly" in response.headers["set-cookie"].lower()

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["display_name"] == "Ngozi Eze"

    assert client.post("/auth/logout").status_code == 200
    client.cookies.clear()
    anonymous = client.get("/auth/me")
    assert anonymous.status_code == 401
    assert anonymous.json() == {"error": "No token provided"}

    login = client.post("/auth/login", json={"email": "ngozi@example.com", "password": "password123"})
    assert login.status_code == 200
    assert login.json()["message"] == "Login successful"


def test_duplicate_email_and_bad_password_are_rejected(client: TestClient) -> None:
    _register(client, "Tunde")

    duplicate = client.post(
        "/auth/register",
        json={"first_name": "Tunde", "last_name": "B", "email": "tunde@example.com", "password": "password123"},
    )
    assert duplicate.status_code == 400
    assert duplicate.json() == {"error": "Email already exists"}

    bad_login = client.post("/auth/login", json={"email": "tunde@example.com", "password": "wrong-password"})
    assert bad_login.status_code == 401
    assert bad_login.json() == {"error": "Invalid email or password"}


def test_report_lifecycle_notifies_admins_and_owner(client: TestClient, mailer: FakeMailer) -> None:
    owner = _register(client, "Chidi")
    admin = _register(client, "Amaka")
    _promote_to_admin(admin)

    created = client.post(
        "/reports",
        headers=_auth(owner),
        json={"title": "Pothole", "description": "Large pothole", "location": "Main St", "lat": "1.5", "lng": "oops"},
    )
    assert created.status_code == 201, created.text
    report = created.json()["report"]
    assert report["status"] == "pending"
    assert report["lat"] == 1.5
    assert report["lng"] == 0.0
    _drain(client)

    admin_inbox = client.get("/notifications", headers=_auth(admin)).json()
    assert admin_inbox["unread_count"] == 1
    assert admin_inbox["notifications"][0]["message"] == "New report submitted: Pothole"
    assert [to for to, _, _ in mailer.sent] == ["amaka@example.com"]

    forbidden = client.put(f"/reports/{report['id']}/status", headers=_auth(owner), json={"status": "resolved"})
    assert forbidden.status_code == 403

    invalid = client.put(f"/reports/{report['id']}/status", headers=_auth(admin), json={"status": "closed"})
    assert invalid.status_code == 400
    assert invalid.json() == {"error": "Invalid status"}

    updated = client.put(f"/reports/{report['id']}/status", headers=_auth(admin), json={"status": "resolved"})
    assert updated.status_code == 200
    assert updated.json()["report"]["status"] == "resolved"
    _drain(client)

    owner_inbox = client.get("/notifications", headers=_auth(owner)).json()
    assert [item["message"] for item in owner_inbox["notifications"]] == ['Your report "Pothole" is now "resolved"']

    all_reports = client.get("/reports", headers=_auth(admin))
    assert all_reports.status_code == 200
    assert all_reports.json()[0]["owner_name"] == "Chidi Okafor"
    assert client.get("/reports", headers=_auth(owner)).status_code == 403

    mine = client.get("/reports/mine", headers=_auth(owner))
    assert [item["title"] for item in mine.json()] == ["Pothole"]

    assert client.delete(f"/reports/{report['id']}", headers=_auth(admin)).status_code == 403
    deleted = client.delete(f"/reports/{report['id']}", headers=_auth(owner))
    assert deleted.status_code == 200
    assert client.get("/reports/mine", headers=_auth(owner)).json() == []


def test_missing_report_fields_return_400(client: TestClient) -> None:
    owner = _register(client, "Kemi")

    response = client.post("/reports", headers=_auth(owner), json={"title": "No details"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_unusable_coordinates_fall_back_to_zero(client: TestClient) -> None:
    owner = _register(client, "Sade")
    base = {"title": "Flooding", "description": "Road under water", "location": "Ikeja"}

    structured = client.post("/reports", headers=_auth(owner), json={**base, "lat": {"x": 1}, "lng": [1]})
    assert structured.status_code == 201, structured.text
    assert structured.json()["report"]["lat"] == 0.0
    assert structured.json()["report"]["lng"] == 0.0

    flags = client.post("/reports", headers=_auth(owner), json={**base, "lat": True, "lng": "nan"})
    assert flags.status_code == 201, flags.text
    assert flags.json()["report"]["lat"] == 0.0
    assert flags.json()["report"]["lng"] == 0.0


def test_admin_can_send_direct_notification(client: TestClient, mailer: FakeMailer) -> None:
    citizen = _register(client, "Yemi")
    admin = _register(client, "Femi")
    _promote_to_admin(admin)

    response = client.post(
        "/notifications",
        headers=_auth(admin),
        json={"user_id": citizen["user"]["id"], "message": "  Please add a photo  ", "force_email": True},
    )
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["message"] == "Please add a photo"
    assert created["type"] == "generic"
    assert created["read"] is False
    _drain(client)

    inbox = client.get("/notifications", headers=_auth(citizen)).json()
    assert [item["id"] for item in inbox["notifications"]] == [created["id"]]
    assert [to for to, _, _ in mailer.sent] == ["yemi@example.com"]

    forbidden = client.post(
        "/notifications",
        headers=_auth(citizen),
        json={"user_id": admin["user"]["id"], "message": "hi"},
    )
    assert forbidden.status_code == 403

    unknown = client.post(
        "/notifications",
        headers=_auth(admin),
        json={"user_id": "00000000-0000-0000-0000-000000000000", "message": "hi"},
    )
    assert unknown.status_code == 404
    assert unknown.json() == {"error": "User not found"}

    blank = client.post("/notifications", headers=_auth(admin), json={"user_id": citizen["user"]["id"], "message": " "})
    assert blank.status_code == 400
    assert blank.json() == {"error": "user_id and message are required"}


def test_notification_read_and_delete_endpoints(client: TestClient) -> None:
    owner = _register(client, "Ife")
    admin = _register(client, "Obi")
    _promote_to_admin(admin)
    for title in ("Pothole", "Broken light", "Blocked drain"):
        client.post(
            "/reports",
            headers=_auth(owner),
            json={"title": title, "description": "details", "location": "Lagos"},
        )
    _drain(client)

    inbox = client.get("/notifications", headers=_auth(admin)).json()["notifications"]
    assert len(inbox) == 3

    first_id = inbox[0]["id"]
    marked = client.put(f"/notifications/{first_id}/read", headers=_auth(admin))
    assert marked.status_code == 200
    assert marked.json()["read"] is True
    assert client.put(f"/notifications/{first_id}/read", headers=_auth(owner)).status_code == 404

    first_pass = client.put("/notifications/mark-all-read", headers=_auth(admin))
    second_pass = client.put("/notifications/mark-all-read", headers=_auth(admin))
    assert first_pass.status_code == second_pass.status_code == 200
    assert first_pass.json()["count"] == 2
    assert second_pass.json()["count"] == 0
    after = client.get("/notifications", headers=_auth(admin)).json()
    assert after["unread_count"] == 0
    assert all(item["read"] for item in after["notifications"])

    assert client.delete(f"/notifications/{first_id}", headers=_auth(admin)).status_code == 200
    assert client.delete(f"/notifications/{first_id}", headers=_auth(admin)).status_code == 404
    cleared = client.delete("/notifications", headers=_auth(admin))
    assert cleared.json()["count"] == 2
    assert client.get("/notifications", headers=_auth(admin)).json()["notifications"] == []


def test_profile_password_and_first_login(client: TestClient) -> None:
    account = _register(client, "Zainab")

    profile = client.put(
        "/users/profile",
        headers=_auth(account),
        json={"bio": "Community reporter", "avatar_url": "", "first_name": "Zee"},
    )
    assert profile.status_code == 200
    assert profile.json()["bio"] == "Community reporter"
    assert profile.json()["first_name"] == "Zee"
    assert profile.json()["avatar_url"] == ""

    wrong = client.put(
        "/users/password",
        headers=_auth(account),
        json={"current_password": "nope-nope", "new_password": "new-password"},
    )
    assert wrong.status_code == 400
    assert wrong.json() == {"error": "Current password is incorrect"}

    changed = client.put(
        "/users/password",
        headers=_auth(account),
        json={"current_password": "password123", "new_password": "new-password"},
    )
    assert changed.status_code == 200
    assert client.post("/auth/login", json={"email": "zainab@example.com", "password": "new-password"}).status_code == 200
    client.cookies.clear()

    assert client.get("/users/profile", headers=_auth(account)).json()["first_login_shown"] is False
    for _ in range(2):
        shown = client.put("/users/first-login-shown", headers=_auth(account))
        assert shown.status_code == 200
        assert shown.json()["first_login_shown"] is True


def test_websocket_register_receives_status_push(client: TestClient, mailer: FakeMailer) -> None:
    owner = _register(client, "Musa")
    admin = _register(client, "Halima")
    _promote_to_admin(admin)
    report = client.post(
        "/reports",
        headers=_auth(owner),
        json={"title": "Pothole", "description": "Large pothole", "location": "Main St"},
    ).json()["report"]
    _drain(client)
    mailer.sent.clear()

    with client.websocket_connect(f"/ws?token={owner['token']}") as socket:
        assert socket.receive_json()["event"] == "ready"

        socket.send_json({"event": "register", "data": admin["user"]["id"]})
        assert socket.receive_json()["event"] == "error"

        socket.send_json({"event": "register", "data": owner["user"]["id"]})
        registered = socket.receive_json()
        assert registered == {"event": "registered", "data": {"user_id": owner["user"]["id"]}}
        assert client.get("/health").json()["online_users"] == 1

        response = client.put(f"/reports/{report['id']}/status", headers=_auth(admin), json={"status": "rejected"})
        assert response.status_code == 200

        frames = [socket.receive_json(), socket.receive_json()]
        events = sorted(frame["event"] for frame in frames)
        assert events == ["notification:new", "report:updated"]
        pushed = next(frame for frame in frames if frame["event"] == "notification:new")
        assert pushed["data"]["message"] == 'Your report "Pothole" is now "rejected"'

    _drain(client)
    assert mailer.sent == []



def test_websocket_without_session_cannot_register(client: TestClient) -> None:
    account = _register(client, "Bisi")

    with client.websocket_connect("/ws") as socket:
        assert socket.receive_json()["event"] == "ready"
        socket.send_text("ping")
        assert socket.receive_json()["event"] == "pong"
        socket.send_json({"event": "register", "data": account["user"]["id"]})
        assert socket.receive_json() == {"event": "error", "data": {"message": "Authentication required"}}


def test_websocket_ignores_binary_frames(client: TestClient) -> None:
    with client.websocket_connect("/ws") as socket:
        assert socket.receive_json()["event"] == "ready"
        socket.send_bytes(b"\x00\x01")
        socket.send_text("ping")
        assert socket.receive_json()["event"] == "pong"
