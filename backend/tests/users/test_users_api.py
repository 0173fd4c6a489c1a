from devocionales.core.settings import settings
from devocionales.models import Community, User
from devocionales.services.users import seed_initial_admin


def test_invite_from_member(api_client, auth_headers, make_member):
    member = make_member(first_name="Rosa", last_name="Luna", email="rosa@example.com")
    res = api_client.post(
        "/users/from-member", json={"member_id": member["id"], "role": "collaborator"}, headers=auth_headers
    )
    assert res.status_code == 201, res.text
    body = res.json()
    assert len(body["temp_password"]) == settings.temp_password_length
    assert body["user"]["email"] == "rosa@example.com"
    assert body["user"]["must_change_password"] is True

    login = api_client.post(
        "/auth/login", json={"email": "rosa@example.com", "password": body["temp_password"]}
    )
    assert login.status_code == 200, login.text
    assert login.json()["must_change_password"] is True

    linked = api_client.get(f"/members/{member['id']}", headers=auth_headers).json()
    assert linked["user_id"] == body["user"]["id"]

    again = api_client.post(
        "/users/from-member", json={"member_id": member["id"], "role": "visitor"}, headers=auth_headers
    )
    assert again.status_code == 400


def test_invite_requires_member_email(api_client, auth_headers, make_member):
    member = make_member(first_name="Sin Correo")
    res = api_client.post("/users/from-member", json={"member_id": member["id"]}, headers=auth_headers)
    assert res.status_code == 400


def test_invite_rejects_email_in_use(api_client, auth_headers, make_member):
    member = make_member(first_name="Copy", email="visitor@example.com")
    res = api_client.post("/users/from-member", json={"member_id": member["id"]}, headers=auth_headers)
    assert res.status_code == 400


def test_collaborator_invites_limited_roles(api_client, collaborator_headers, make_member):
    member = make_member(first_name="Nuevo", email="nuevo@example.com")
    denied = api_client.post(
        "/users/from-member", json={"member_id": member["id"], "role": "admin"}, headers=collaborator_headers
    )
    assert denied.status_code == 403
    allowed = api_client.post(
        "/users/from-member", json={"member_id": member["id"], "role": "visitor"}, headers=collaborator_headers
    )
    assert allowed.status_code == 201, allowed.text


def test_visitor_cannot_invite(api_client, visitor_headers, make_member):
    member = make_member(first_name="Nadie", email="nadie@example.com")
    res = api_client.post("/users/from-member", json={"member_id": member["id"]}, headers=visitor_headers)
    assert res.status_code == 403


def test_regenerate_credentials(api_client, auth_headers, world):
    res = api_client.post(f"/users/from-member/{world.collaborator_member_id}/regenerate", headers=auth_headers)
    assert res.status_code == 200, res.text
    temp_password = res.json()["temp_password"]
    login = api_client.post("/auth/login", json={"email": "colab@example.com", "password": temp_password})
    assert login.status_code == 200
    assert login.json()["must_change_password"] is True


def test_list_users_admin_only(api_client, auth_headers, collaborator_headers, world):
    res = api_client.get("/users", headers=auth_headers)
    assert res.status_code == 200
    emails = {user["email"] for user in res.json()}
    assert emails == {"admin@example.com", "colab@example.com", "visitor@example.com"}
    assert api_client.get("/users", headers=collaborator_headers).status_code == 403


def test_role_change(api_client, auth_headers, collaborator_headers, world):
    res = api_client.patch(f"/users/{world.visitor_id}/role", json={"role": "collaborator"}, headers=auth_headers)
    assert res.status_code == 200, res.text
    assert res.json()["role"] == "collaborator"

    bad = api_client.patch(f"/users/{world.visitor_id}/role", json={"role": "wizard"}, headers=auth_headers)
    assert bad.status_code == 400

    denied = api_client.patch(
        f"/users/{world.visitor_id}/role", json={"role": "admin"}, headers=collaborator_headers
    )
    assert denied.status_code == 403

    foreign = api_client.patch(f"/users/{world.outsider_id}/role", json={"role": "visitor"}, headers=auth_headers)
    assert foreign.status_code == 404


def test_seed_initial_admin_runs_once(db_session):
    assert seed_initial_admin(
        db_session, email="Root@Example.com", password="SeedPassword123", community_name="Semilla"
    )
    admin = db_session.query(User).one()
    assert admin.email == "root@example.com"
    assert admin.must_change_password is True
    assert db_session.get(Community, admin.community_id).name == "Semilla"

    assert not seed_initial_admin(
        db_session, email="other@example.com", password="SeedPassword123", community_name="Otra"
    )
    assert db_session.query(User).count() == 1
