"""Tests for the invitation lifecycle.

Covers:
- Only the event creator may invite; duplicates are refused
- Invitee responds once: pending → accepted | declined
- Past events cannot be accepted
- Both route families (/api/invitations and /api/participants)
"""
from tests.conftest import create_test_event, create_verified_user

MISSING_ID = "00000000-0000-4000-8000-000000000000"


def _setup(client, mailer, days_ahead: float = 7):
    owner = create_verified_user(client, mailer, name="Owner", email="owner@example.com")
    guest = create_verified_user(client, mailer, name="Guest", email="guest@example.com")
    event = create_test_event(client, owner["headers"], title="Party", days_ahead=days_ahead)
    return owner, guest, event


def _invite(client, inviter, event_id, user_id):
    return client.post("/api/invitations/invite", headers=inviter["headers"], json={
        "eventId": event_id, "userId": user_id,
    })


def _respond(client, user, invitation_id, status):
    return client.put("/api/invitations/respond", headers=user["headers"], json={
        "invitationId": invitation_id, "status": status,
    })


class TestInvite:

    def test_invite_creates_pending_invitation(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        resp = _invite(client, owner, event["eventId"], guest["userId"])
        assert resp.status_code == 201
        data = resp.json()
        assert data["invitationStatus"] == "pending"
        assert data["userId"] == guest["userId"]
        assert data["eventId"] == event["eventId"]

    def test_only_creator_can_invite(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        third = create_verified_user(client, mailer, email="third@example.com")
        resp = _invite(client, guest, event["eventId"], third["userId"])
        assert resp.status_code == 403
        assert resp.json()["message"] == "Only the event creator can send invitations"

    def test_invite_twice(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        _invite(client, owner, event["eventId"], guest["userId"])
        resp = _invite(client, owner, event["eventId"], guest["userId"])
        assert resp.status_code == 400
        assert resp.json()["message"] == "User already invited or joined"

    def test_invite_user_who_already_joined(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        client.post("/api/participants/join", headers=guest["headers"], json={"eventId": event["eventId"]})
        resp = _invite(client, owner, event["eventId"], guest["userId"])
        assert resp.status_code == 400

    def test_invite_missing_user(self, client, mailer):
        owner, _, event = _setup(client, mailer)
        resp = _invite(client, owner, event["eventId"], MISSING_ID)
        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found"

    def test_invite_missing_event(self, client, mailer):
        owner, guest, _ = _setup(client, mailer)
        resp = _invite(client, owner, MISSING_ID, guest["userId"])
        assert resp.status_code == 404
        assert resp.json()["message"] == "Event not found"

    def test_invite_malformed_user_id(self, client, mailer):
        owner, _, event = _setup(client, mailer)
        resp = _invite(client, owner, event["eventId"], "bogus")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid User ID format"

    def test_send_invitation_alias(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        resp = client.post("/api/participants/send-invitation", headers=owner["headers"], json={
            "eventId": event["eventId"], "userId": guest["userId"],
        })
        assert resp.status_code == 201
        assert resp.json()["invitationStatus"] == "pending"


class TestRespond:

    def test_accept(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        invitation = _invite(client, owner, event["eventId"], guest["userId"]).json()
        resp = _respond(client, guest, invitation["participantId"], "accepted")
        assert resp.status_code == 200
        assert resp.json()["invitationStatus"] == "accepted"

    def test_decline(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        invitation = _invite(client, owner, event["eventId"], guest["userId"]).json()
        resp = _respond(client, guest, invitation["participantId"], "declined")
        assert resp.status_code == 200
        assert resp.json()["invitationStatus"] == "declined"

    def test_accept_twice(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        invitation = _invite(client, owner, event["eventId"], guest["userId"]).json()
        _respond(client, guest, invitation["participantId"], "accepted")
        resp = _respond(client, guest, invitation["participantId"], "accepted")
        assert resp.status_code == 400
        assert resp.json()["message"] == "You have already joined this event"

    def test_accept_after_decline(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        invitation = _invite(client, owner, event["eventId"], guest["userId"]).json()
        _respond(client, guest, invitation["participantId"], "declined")
        resp = _respond(client, guest, invitation["participantId"], "accepted")
        assert resp.status_code == 400
        assert resp.json()["message"] == "You have already declined this invitation"

    def test_invalid_response(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        invitation = _invite(client, owner, event["eventId"], guest["userId"]).json()
        resp = _respond(client, guest, invitation["participantId"], "maybe")
        assert resp.status_code == 400

    def test_respond_to_someone_elses_invitation(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        invitation = _invite(client, owner, event["eventId"], guest["userId"]).json()
        resp = _respond(client, owner, invitation["participantId"], "accepted")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Invitation not found"

    def test_accept_past_event(self, client, mailer):
        owner, guest, event = _setup(client, mailer, days_ahead=-1)
        invitation = _invite(client, owner, event["eventId"], guest["userId"]).json()
        resp = _respond(client, guest, invitation["participantId"], "accepted")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Event has already taken place"

    def test_decline_past_event_allowed(self, client, mailer):
        owner, guest, event = _setup(client, mailer, days_ahead=-1)
        invitation = _invite(client, owner, event["eventId"], guest["userId"]).json()
        resp = _respond(client, guest, invitation["participantId"], "declined")
        assert resp.status_code == 200

    def test_accept_and_decline_aliases(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        other_event = create_test_event(client, owner["headers"], title="Other")
        first = _invite(client, owner, event["eventId"], guest["userId"]).json()
        second = _invite(client, owner, other_event["eventId"], guest["userId"]).json()

        resp = client.post("/api/participants/accept-invitation", headers=guest["headers"],
                           json={"invitationId": first["participantId"]})
        assert resp.status_code == 200
        assert resp.json()["invitationStatus"] == "accepted"

        resp = client.post("/api/participants/decline-invitation", headers=guest["headers"],
                           json={"invitationId": second["participantId"]})
        assert resp.status_code == 200
        assert resp.json()["invitationStatus"] == "declined"


class TestMyInvitations:

    def test_lists_pending_future_invitations(self, client, mailer):
        owner, guest, event = _setup(client, mailer)
        past = create_test_event(client, owner["headers"], title="Gone", days_ahead=-2)
        answered = create_test_event(client, owner["headers"], title="Answered")
        _invite(client, owner, event["eventId"], guest["userId"])
        _invite(client, owner, past["eventId"], guest["userId"])
        done = _invite(client, owner, answered["eventId"], guest["userId"]).json()
        _respond(client, guest, done["participantId"], "declined")

        for url in ("/api/invitations/my-invitations", "/api/participants/my-invitations"):
            resp = client.get(url, headers=guest["headers"])
            assert resp.status_code == 200
            data = resp.json()
            assert [i["event"]["title"] for i in data] == ["Party"]
            assert data[0]["invitationStatus"] == "pending"
