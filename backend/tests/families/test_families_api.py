from datetime import datetime, timezone

import pytest

from devocionales.models import Family, TimelineEvent

OLD_STAMP = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
OLD_TOKEN = "2024-01-01T12:00:00.000Z"


def _age_family(db_session, family_id: int) -> None:
    family = db_session.get(Family, family_id)
    family.updated_at = OLD_STAMP
    db_session.commit()


def test_create_family_returns_version_token(make_family, world):
    family = make_family(name="Familia Rojas")
    assert family["name"] == "Familia Rojas"
    assert family["member_count"] == 0
    assert family["active"] is True
    assert family["status"] == "active"
    assert family["updated_at"].endswith("Z")


def test_create_requires_authentication(api_client, world):
    res = api_client.post("/families", json={"name": "Anon"})
    assert res.status_code == 401, res.text
    assert res.json()["detail"]["code"] == "UNAUTHENTICATED"


def test_invalid_token_is_unauthenticated(api_client, world):
    res = api_client.post(
        "/families", json={"name": "Anon"}, headers={"Authorization": "Bearer not-a-token"}
    )
    assert res.status_code == 401


def test_concurrent_edit_conflict(api_client, auth_headers, make_family, db_session):
    family = make_family()
    _age_family(db_session, family["id"])

    first = api_client.patch(
        f"/families/{family['id']}",
        json={"phone": "555-0101", "last_updated_at": OLD_TOKEN},
        headers=auth_headers,
    )
    assert first.status_code == 200, first.text
    assert first.json()["updated_at"] != OLD_TOKEN

    second = api_client.patch(
        f"/families/{family['id']}",
        json={"phone": "555-0202", "last_updated_at": OLD_TOKEN},
        headers=auth_headers,
    )
    assert second.status_code == 409, second.text
    detail = second.json()["detail"]
    assert detail["code"] == "EDIT_CONFLICT"
    assert detail["server_version"] == first.json()["updated_at"]
    assert detail["server_snapshot"]["phone"] == "555-0101"

    fetched = api_client.get(f"/families/{family['id']}", headers=auth_headers).json()
    assert fetched["phone"] == "555-0101"


def test_update_with_current_token_succeeds(api_client, auth_headers, make_family, db_session):
    family = make_family()
    _age_family(db_session, family["id"])
    res = api_client.patch(
        f"/families/{family['id']}",
        json={"notes": "Prefers evenings", "last_updated_at": OLD_TOKEN},
        headers=auth_headers,
    )
    assert res.status_code == 200, res.text
    assert res.json()["notes"] == "Prefers evenings"


def test_update_without_token_is_last_writer_wins(api_client, auth_headers, make_family, db_session):
    family = make_family()
    _age_family(db_session, family["id"])
    for phone in ("111", "222"):
        res = api_client.patch(f"/families/{family['id']}", json={"phone": phone}, headers=auth_headers)
        assert res.status_code == 200, res.text
    assert api_client.get(f"/families/{family['id']}", headers=auth_headers).json()["phone"] == "222"


def test_missing_and_foreign_families_are_not_found(api_client, auth_headers, outsider_headers, make_family):
    assert api_client.patch("/families/9999", json={"phone": "1"}, headers=auth_headers).status_code == 404
    family = make_family()
    res = api_client.patch(f"/families/{family['id']}", json={"phone": "1"}, headers=outsider_headers)
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "NOT_FOUND"


def test_unknown_nucleo_is_bad_request(api_client, auth_headers, world):
    res = api_client.post(
        "/families", json={"name": "Lost", "nucleo_id": 4242}, headers=auth_headers
    )
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "BAD_REQUEST"


def test_collaborator_scoped_to_own_nucleo(api_client, collaborator_headers, make_family, world):
    own = make_family(name="Own", nucleo_id=world.nucleo_a)
    other = make_family(name="Other", nucleo_id=world.nucleo_b)

    listed = api_client.get("/families", headers=collaborator_headers)
    assert listed.status_code == 200
    assert [row["name"] for row in listed.json()] == ["Own"]

    assert api_client.get(f"/families/{other['id']}", headers=collaborator_headers).status_code == 403

    ok = api_client.patch(f"/families/{own['id']}", json={"phone": "1"}, headers=collaborator_headers)
    assert ok.status_code == 200, ok.text

    denied = api_client.patch(f"/families/{other['id']}", json={"phone": "1"}, headers=collaborator_headers)
    assert denied.status_code == 403
    assert denied.json()["detail"]["code"] == "FORBIDDEN"

    moved = api_client.patch(
        f"/families/{own['id']}", json={"nucleo_id": world.nucleo_b}, headers=collaborator_headers
    )
    assert moved.status_code == 403


def test_collaborator_can_create_anywhere(make_family, collaborator_headers, world):
    family = make_family(name="Elsewhere", nucleo_id=world.nucleo_b, headers=collaborator_headers)
    assert family["nucleo_id"] == world.nucleo_b


def test_visitor_cannot_touch_families(api_client, visitor_headers, make_family):
    family = make_family()
    assert api_client.post("/families", json={"name": "X"}, headers=visitor_headers).status_code == 403
    assert api_client.patch(f"/families/{family['id']}", json={"phone": "1"}, headers=visitor_headers).status_code == 403
    assert api_client.get("/families", headers=visitor_headers).json() == []


def test_delete_is_soft_and_audited(api_client, auth_headers, make_family, db_session):
    family = make_family(name="Gone")
    res = api_client.delete(f"/families/{family['id']}", headers=auth_headers)
    assert res.status_code == 200, res.text
    assert res.json() is True

    db_session.expire_all()
    assert db_session.get(Family, family["id"]).active is False
    assert api_client.get("/families", headers=auth_headers).json() == []

    events = (
        db_session.query(TimelineEvent)
        .filter(TimelineEvent.entity_type == "Family", TimelineEvent.entity_id == str(family["id"]))
        .order_by(TimelineEvent.id)
        .all()
    )
    assert [event.action_type for event in events] == ["create", "delete"]


def test_update_records_changed_fields(api_client, auth_headers, make_family, db_session):
    family = make_family(name="Audit")
    api_client.patch(f"/families/{family['id']}", json={"phone": "999", "name": "Audit"}, headers=auth_headers)
    event = (
        db_session.query(TimelineEvent)
        .filter(TimelineEvent.action_type == "update")
        .order_by(TimelineEvent.id.desc())
        .first()
    )
    assert event.metadata_json["changed_fields"] == ["phone"]
    assert event.summary == 'Ana Admin edited the family "Audit" (phone)'
    assert event.nucleo_id == family["nucleo_id"]


def test_family_detail_includes_members(api_client, auth_headers, make_family, make_member, world):
    family = make_family()
    make_member(first_name="Lucia", family_id=family["id"])
    detail = api_client.get(f"/families/{family['id']}", headers=auth_headers)
    assert detail.status_code == 200, detail.text
    body = detail.json()
    assert body["member_count"] == 1
    assert [member["first_name"] for member in body["members"]] == ["Lucia"]
    assert body["nucleo"]["id"] == world.nucleo_a
    assert body["barrio"]["id"] == world.barrio_id
    assert body["visits"] == []


@pytest.mark.parametrize("field", ["name", "status", "active"])
def test_null_required_field_is_bad_request(api_client, auth_headers, make_family, field):
    family = make_family(name="Familia Luna")
    res = api_client.patch(f"/families/{family['id']}", json={field: None}, headers=auth_headers)
    assert res.status_code == 400, res.text
    assert res.json()["detail"]["code"] == "BAD_REQUEST"

    fetched = api_client.get(f"/families/{family['id']}", headers=auth_headers).json()
    assert fetched["name"] == "Familia Luna"
    assert fetched[field] == family[field]


def test_null_optional_field_is_cleared(api_client, auth_headers, make_family):
    family = make_family(phone="555-0303")
    res = api_client.patch(f"/families/{family['id']}", json={"phone": None}, headers=auth_headers)
    assert res.status_code == 200, res.text
    assert res.json()["phone"] is None
