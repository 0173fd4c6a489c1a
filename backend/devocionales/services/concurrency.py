"""Optimistic concurrency guard.

The version token is the record's ``updated_at`` serialised as an ISO-8601
UTC string with millisecond precision. Clients echo it back unchanged; any
difference from the stored value is a conflict.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
import enum
from typing import Any

from sqlalchemy import inspect

VERSION_TOKEN_FIELD = "last_updated_at"


def version_token(value: datetime) -> str:
    if value.tzinfo is None:
        # SQLite hands back naive datetimes; stored values are always UTC.
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return version_token(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    return value


def snapshot_record(obj: Any | None) -> dict | None:
    if obj is None:
        return None
    data: dict[str, Any] = {}
    mapper = inspect(obj).mapper
    for column in mapper.columns:
        if column.key == "hashed_password":
            continue
        data[column.key] = to_jsonable(getattr(obj, column.key))
    return data


@dataclass(frozen=True)
class VersionOk:
    pass


@dataclass(frozen=True)
class VersionConflict:
    server_version: str
    server_snapshot: dict


def check_version(record: Any, client_token: str | None) -> VersionOk | VersionConflict:
    """Compare the client's token with the stored version. A missing token skips the check."""
    if not client_token:
        return VersionOk()
    server_version = version_token(record.updated_at)
    if client_token != server_version:
        return VersionConflict(server_version=server_version, server_snapshot=snapshot_record(record))
    return VersionOk()


def strip_version_token(payload: dict[str, Any]) -> tuple[str | None, dict[str, Any]]:
    data = dict(payload)
    token = data.pop(VERSION_TOKEN_FIELD, None)
    return token, data
