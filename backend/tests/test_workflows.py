"""End-to-end workflows across users, events, participants and email.

Each test walks a complete scenario through the public API the way a client
application would, asserting the state after every step.
"""
from event_manager.models.participant import Participant
from tests.conftest import (
    DEFAULT_PASSWORD,
    create_admin,
    create_test_event,
    create_verified_user,
    extract_token,
    register_user,
)


class TestAccountLifecycle:

    def test_register_verify_login(self, client, mailer):
        register_user(client, name="Dana", email="dana@example.com")
        credentials = {"email": "dana@example.com", "password": DEFAULT_PASSWORD}

        assert client.post("/api/users/login", json=credentials).status_code == 403

        token = extract_token(mailer, "dana@example.com", "verify-email")
        assert client.get(f"/api/users/verify-email/{token}").status_code == 200
        # verifying again is harmless
        assert client.get(f"/api/users/verify-email/{token}").status_code == 200

        resp = client.post("/api/users/login", json=credentials)
        assert resp.status_code == 200
        headers = {"Authorization": f"Bearer {resp.json()['token']}"}
        assert client.get("/api/users/profile", headers=headers).json()["name"] == "Dana"


class TestEventLifecycle:

    def test_create_invite_approve_accept(self, client, mailer, db):
        owner = create_verified_user(client, mailer, name="Owner", email="owner@example.com")
        guest = create_verified_user(client, mailer, name="Guest", email="guest@example.com")
        admin = create_admin(client, mailer, db)

        event = create_test_event(client, owner["headers"], title="Launch")
        invitation = client.post("/api/invitations/invite", headers=owner["headers"], json={
            "eventId": event["eventId"], "userId": guest["userId"],
        }).json()
        assert not [m for m in mailer.to("guest@example.com") if "Launch" in m.subject]

        client.put(f"/api/events/{event['eventId']}/approve", headers=admin["headers"],
                   json={"status": "approved"})
        subjects = [m.subject for m in mailer.to("guest@example.com")]
        assert subjects.count("Launch has been approved") == 1

        pending = client.get("/api/invitations/my-invitations", headers=guest["headers"]).json()
        assert [i["participantId"] for i in pending] == [invitation["participantId"]]

        resp = client.put("/api/invitations/respond", headers=guest["headers"], json={
            "invitationId": invitation["participantId"], "status": "accepted",
        })
        assert resp.status_code == 200
        assert client.get("/api/invitations/my-invitations", headers=guest["headers"]).json() == []

        events = client.get("/api/events/", headers=guest["headers"]).json()["events"]
        assert events[0]["hasJoined"] is True

    def test_approval_happens_once(self, client, mailer, db):
        owner = create_verified_user(client, mailer, email="owner@example.com")
        guest = create_verified_user(client, mailer, email="guest@example.com")
        admin = create_admin(client, mailer, db)
        event = create_test_event(client, owner["headers"], title="Once")
        client.post("/api/participants/join", headers=guest["headers"], json={"eventId": event["eventId"]})

        url = f"/api/events/{event['eventId']}/approve"
        assert client.put(url, headers=admin["headers"], json={"status": "approved"}).status_code == 200
        resp = client.put(url, headers=admin["headers"], json={"status": "approved"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Event is already approved"
        assert len([m for m in mailer.sent if m.subject == "Once has been approved"]) == 1

    def test_join_leave_rejoin_keeps_one_row(self, client, mailer, db):
        owner = create_verified_user(client, mailer, email="owner@example.com")
        guest = create_verified_user(client, mailer, email="guest@example.com")
        event = create_test_event(client, owner["headers"])
        join = {"eventId": event["eventId"]}

        assert client.post("/api/participants/join", headers=guest["headers"], json=join).status_code == 201
        assert client.post("/api/participants/join", headers=guest["headers"], json=join).status_code == 400
        assert client.delete(f"/api/participants/{event['eventId']}/leave",
                             headers=guest["headers"]).status_code == 200
        assert client.post("/api/participants/join", headers=guest["headers"], json=join).status_code == 201

        rows = db.query(Participant).filter(
            Participant.event_id == event["eventId"], Participant.user_id == guest["userId"],
        ).count()
        assert rows == 1

    def test_pagination_walk(self, client, mailer):
        owner = create_verified_user(client, mailer, email="owner@example.com")
        for i in range(12):
            create_test_event(client, owner["headers"], title=f"Event {i:02d}", days_ahead=i + 1)

        seen = []
        for page in (1, 2, 3):
            data = client.get("/api/events/", params={"page": page, "limit": 5}).json()
            assert data["total"] == 12
            assert data["totalPages"] == 3
            assert data["page"] == page
            seen.extend(e["title"] for e in data["events"])
        assert seen == [f"Event {i:02d}" for i in range(12)]

        beyond = client.get("/api/events/", params={"page": 4, "limit": 5}).json()
        assert beyond["events"] == []
        assert beyond["total"] == 12
