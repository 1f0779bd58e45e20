from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from huddle.auth.identity import Identity
from huddle.models import EventAttendee
from huddle.services import events_service, invitation_service
from huddle.services.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from huddle.services.invitation_service import InviteStatus


def _rows(db_session, event_id: int) -> list[EventAttendee]:
    db_session.expire_all()
    return list(
        db_session.scalars(
            select(EventAttendee)
            .where(EventAttendee.event_id == event_id)
            .order_by(EventAttendee.id)
        )
    )


def test_invite_is_idempotent(client: TestClient, make_account, create_event, db_session):
    organizer = make_account("org@example.com")
    guest = make_account("guest@example.com")
    event = create_event(organizer)
    url = f"/v1/events/{event['id']}/invite"

    first = client.post(url, json={"user_id": guest.user_id}, headers=organizer.headers)
    assert first.status_code == 200
    assert first.json() == {"status": "invited", "event_id": event["id"], "user_id": guest.user_id}

    second = client.post(url, json={"user_id": guest.user_id}, headers=organizer.headers)
    assert second.status_code == 200
    assert second.json()["status"] == "already_participant"

    guest_rows = [r for r in _rows(db_session, event["id"]) if r.user_id == guest.user_id]
    assert len(guest_rows) == 1
    assert guest_rows[0].role == "attendee"
    assert guest_rows[0].status == ""


def test_inviting_organizer_is_rejected(client: TestClient, make_account, create_event, db_session):
    organizer = make_account("org@example.com")
    event = create_event(organizer)

    resp = client.post(
        f"/v1/events/{event['id']}/invite", json={"user_id": organizer.user_id}, headers=organizer.headers
    )
    assert resp.status_code == 422
    assert resp.json()["detail"] == {"code": "ALREADY_ORGANIZER", "message": "user is already organizer"}

    rows = _rows(db_session, event["id"])
    assert [(r.user_id, r.role) for r in rows] == [(organizer.user_id, "organizer")]


def test_non_organizer_cannot_invite(client: TestClient, make_account, create_event, db_session):
    organizer = make_account("org@example.com")
    outsider = make_account("outsider@example.com")
    guest = make_account("guest@example.com")
    event = create_event(organizer)

    resp = client.post(
        f"/v1/events/{event['id']}/invite", json={"user_id": guest.user_id}, headers=outsider.headers
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_ORGANIZER"
    assert len(_rows(db_session, event["id"])) == 1


def test_invite_unknown_user_is_not_found(client: TestClient, make_account, create_event):
    organizer = make_account("org@example.com")
    event = create_event(organizer)

    resp = client.post(
        f"/v1/events/{event['id']}/invite", json={"user_id": 9999}, headers=organizer.headers
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "USER_NOT_FOUND"


def test_invite_to_unknown_event_is_not_found(client: TestClient, make_account):
    organizer = make_account("org@example.com")
    guest = make_account("guest@example.com")

    resp = client.post("/v1/events/9999/invite", json={"user_id": guest.user_id}, headers=organizer.headers)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "EVENT_NOT_FOUND"


def test_invite_rejects_non_positive_user_id(client: TestClient, make_account, create_event):
    organizer = make_account("org@example.com")
    event = create_event(organizer)

    resp = client.post(
        f"/v1/events/{event['id']}/invite", json={"user_id": 0}, headers=organizer.headers
    )
    assert resp.status_code == 422


def test_invite_after_self_rsvp_keeps_status(client: TestClient, make_account, create_event, db_session):
    organizer = make_account("org@example.com")
    guest = make_account("guest@example.com")
    event = create_event(organizer)

    client.post(f"/v1/events/{event['id']}/respond", json={"status": "Going"}, headers=guest.headers)
    resp = client.post(
        f"/v1/events/{event['id']}/invite", json={"user_id": guest.user_id}, headers=organizer.headers
    )
    assert resp.json()["status"] == "already_participant"

    guest_rows = [r for r in _rows(db_session, event["id"]) if r.user_id == guest.user_id]
    assert [r.status for r in guest_rows] == ["Going"]


def test_invited_list_and_attendee_visibility(client: TestClient, make_account, create_event):
    organizer = make_account("org@example.com")
    guest = make_account("guest@example.com")
    later = create_event(organizer, title="Later", date="2024-07-01")
    sooner = create_event(organizer, title="Sooner", date="2024-05-01")
    create_event(organizer, title="Not invited", date="2024-06-01")

    for event in (later, sooner):
        client.post(
            f"/v1/events/{event['id']}/invite", json={"user_id": guest.user_id}, headers=organizer.headers
        )

    invited = client.get("/v1/events/invited", headers=guest.headers)
    assert invited.status_code == 200
    assert [e["title"] for e in invited.json()] == ["Sooner", "Later"]

    # organizers never see their own events in the invited list
    assert client.get("/v1/events/invited", headers=organizer.headers).json() == []

    denied = client.get(f"/v1/events/{later['id']}/attendees", headers=guest.headers)
    assert denied.status_code == 403

    attendees = client.get(f"/v1/events/{later['id']}/attendees", headers=organizer.headers)
    assert attendees.status_code == 200
    assert [(a["user_id"], a["role"]) for a in attendees.json()] == [
        (organizer.user_id, "organizer"),
        (guest.user_id, "attendee"),
    ]


def test_invite_service_order_of_checks(db_session, make_user):
    organizer = make_user("org@example.com")
    outsider = make_user("outsider@example.com")
    event = events_service.create_event(
        db_session, Identity(organizer.id), title="Offsite", date="2024-06-01"
    )

    # permission is checked before the invitee lookup
    with pytest.raises(PermissionDeniedError):
        invitation_service.invite(db_session, Identity(outsider.id), event.id, 9999)

    with pytest.raises(NotFoundError):
        invitation_service.invite(db_session, Identity(organizer.id), event.id, 9999)

    with pytest.raises(ValidationError):
        invitation_service.invite(db_session, Identity(organizer.id), event.id, organizer.id)

    result = invitation_service.invite(db_session, Identity(organizer.id), event.id, outsider.id)
    assert result.status == InviteStatus.INVITED
    count = db_session.scalar(
        select(func.count()).select_from(EventAttendee).where(EventAttendee.event_id == event.id)
    )
    assert count == 2


def test_invite_losing_insert_race_reports_already_participant(db_session, make_user, monkeypatch):
    organizer = make_user("org@example.com")
    guest = make_user("guest@example.com")
    event = events_service.create_event(
        db_session, Identity(organizer.id), title="Offsite", date="2024-06-01"
    )
    first = invitation_service.invite(db_session, Identity(organizer.id), event.id, guest.id)
    assert first.status == InviteStatus.INVITED

    # Another request wrote the row between the existence check and the insert.
    monkeypatch.setattr(invitation_service, "find_attendance", lambda db, event_id, user_id: None)
    again = invitation_service.invite(db_session, Identity(organizer.id), event.id, guest.id)
    assert again.status == InviteStatus.ALREADY_PARTICIPANT

    count = db_session.scalar(
        select(func.count())
        .select_from(EventAttendee)
        .where(EventAttendee.event_id == event.id, EventAttendee.user_id == guest.id)
    )
    assert count == 1


def test_attendance_pair_is_unique_in_storage(db_session, make_user):
    organizer = make_user("org@example.com")
    guest = make_user("guest@example.com")
    event = events_service.create_event(
        db_session, Identity(organizer.id), title="Offsite", date="2024-06-01"
    )

    db_session.add(EventAttendee(event_id=event.id, user_id=guest.id, role="attendee", status=""))
    db_session.commit()
    db_session.add(EventAttendee(event_id=event.id, user_id=guest.id, role="attendee", status="Going"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    rows = _rows(db_session, event.id)
    assert [(r.user_id, r.status) for r in rows] == [(organizer.id, ""), (guest.id, "")]
