from datetime import datetime, timedelta, timezone

from devocionales.models.family import Family
from devocionales.models.user import Role, User
from devocionales.services.concurrency import (
    VersionConflict,
    VersionOk,
    check_version,
    snapshot_record,
    strip_version_token,
    version_token,
)

STAMP = datetime(2025, 3, 4, 5, 6, 7, 891000, tzinfo=timezone.utc)


def test_version_token_format():
    assert version_token(STAMP) == "2025-03-04T05:06:07.891Z"


def test_version_token_treats_naive_as_utc():
    assert version_token(STAMP.replace(tzinfo=None)) == version_token(STAMP)


def test_version_token_normalises_offsets():
    shifted = STAMP.astimezone(timezone(timedelta(hours=-5)))
    assert version_token(shifted) == "2025-03-04T05:06:07.891Z"


def test_missing_token_skips_check():
    family = Family(name="Perez", updated_at=STAMP)
    assert isinstance(check_version(family, None), VersionOk)
    assert isinstance(check_version(family, ""), VersionOk)


def test_matching_token_passes():
    family = Family(name="Perez", updated_at=STAMP)
    assert isinstance(check_version(family, "2025-03-04T05:06:07.891Z"), VersionOk)


def test_stale_token_conflicts_with_server_state():
    family = Family(id=5, name="Perez", updated_at=STAMP, member_count=2)
    result = check_version(family, "2025-03-04T05:06:07.000Z")
    assert isinstance(result, VersionConflict)
    assert result.server_version == "2025-03-04T05:06:07.891Z"
    assert result.server_snapshot["id"] == 5
    assert result.server_snapshot["name"] == "Perez"
    assert result.server_snapshot["updated_at"] == "2025-03-04T05:06:07.891Z"


def test_snapshot_never_exposes_password_hash():
    user = User(email="a@example.com", hashed_password="secret-hash", role=Role.admin)
    snapshot = snapshot_record(user)
    assert "hashed_password" not in snapshot
    assert snapshot["role"] == "admin"


def test_strip_version_token_leaves_payload_untouched():
    payload = {"name": "Perez", "last_updated_at": "2025-03-04T05:06:07.891Z"}
    token, data = strip_version_token(payload)
    assert token == "2025-03-04T05:06:07.891Z"
    assert data == {"name": "Perez"}
    assert "last_updated_at" in payload
