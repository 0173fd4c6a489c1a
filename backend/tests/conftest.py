import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from devocionales.core.security import create_access_token, hash_password
from devocionales.core.settings import jwt_secret, settings
from devocionales.db.session import get_db
from devocionales.main import app
from devocionales.models import Barrio, Base, Community, Member, Nucleo, Role, User

PASSWORD = "ChangeMe12345!"


@pytest.fixture(scope="session")
def password_hash():
    return hash_password(PASSWORD)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def api_client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def world(db_session, password_hash):
    """One community with a barrio, two nucleos and a user per role tier.

    The collaborator is linked to a member in nucleo A; a second community
    exists so cross-community lookups can be exercised.
    """
    community = Community(name="Comunidad Norte")
    other_community = Community(name="Comunidad Sur")
    db_session.add_all([community, other_community])
    db_session.flush()

    barrio = Barrio(name="Centro", community_id=community.id)
    other_barrio = Barrio(name="Lejano", community_id=other_community.id)
    db_session.add_all([barrio, other_barrio])
    db_session.flush()

    nucleo_a = Nucleo(name="Nucleo A", barrio_id=barrio.id, community_id=community.id)
    nucleo_b = Nucleo(name="Nucleo B", barrio_id=barrio.id, community_id=community.id)
    db_session.add_all([nucleo_a, nucleo_b])
    db_session.flush()

    def _user(email, first_name, last_name, role, community_id=community.id):
        return User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            hashed_password=password_hash,
            community_id=community_id,
        )

    admin = _user("admin@example.com", "Ana", "Admin", Role.admin)
    collaborator = _user("colab@example.com", "Carlos", "Colab", Role.collaborator)
    visitor = _user("visitor@example.com", "Vera", "Visit", Role.visitor)
    outsider = _user("outsider@example.com", "Otto", "Out", Role.admin, other_community.id)
    db_session.add_all([admin, collaborator, visitor, outsider])
    db_session.flush()

    collaborator_member = Member(
        first_name="Carlos",
        last_name="Colab",
        user_id=collaborator.id,
        barrio_id=barrio.id,
        nucleo_id=nucleo_a.id,
        community_id=community.id,
    )
    db_session.add(collaborator_member)
    db_session.commit()

    return SimpleNamespace(
        community_id=community.id,
        other_community_id=other_community.id,
        barrio_id=barrio.id,
        other_barrio_id=other_barrio.id,
        nucleo_a=nucleo_a.id,
        nucleo_b=nucleo_b.id,
        admin_id=admin.id,
        collaborator_id=collaborator.id,
        collaborator_member_id=collaborator_member.id,
        visitor_id=visitor.id,
        outsider_id=outsider.id,
    )


def bearer(user_id: int) -> dict[str, str]:
    token = create_access_token(
        subject=str(user_id),
        secret=jwt_secret(),
        alg=settings.jwt_alg,
        expires_minutes=30,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers(world):
    return bearer(world.admin_id)


@pytest.fixture()
def collaborator_headers(world):
    return bearer(world.collaborator_id)


@pytest.fixture()
def visitor_headers(world):
    return bearer(world.visitor_id)


@pytest.fixture()
def outsider_headers(world):
    return bearer(world.outsider_id)


@pytest.fixture()
def make_family(api_client, auth_headers, world):
    def _make(name="Familia Perez", nucleo_id=None, headers=None, **extra):
        payload = {
            "name": name,
            "barrio_id": world.barrio_id,
            "nucleo_id": world.nucleo_a if nucleo_id is None else nucleo_id,
            **extra,
        }
        response = api_client.post("/families", json=payload, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture()
def make_member(api_client, auth_headers, world):
    def _make(first_name="Lucia", headers=None, **extra):
        payload = {"first_name": first_name, "nucleo_id": world.nucleo_a, **extra}
        response = api_client.post("/members", json=payload, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
