from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorCode(str, enum.Enum):
    unauthenticated = "UNAUTHENTICATED"
    forbidden = "FORBIDDEN"
    not_found = "NOT_FOUND"
    bad_request = "BAD_REQUEST"
    edit_conflict = "EDIT_CONFLICT"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    code: ErrorCode
    message: str
    extensions: dict[str, Any] = field(default_factory=dict)


Result = Union[Success[T], Failure]


def unauthenticated(message: str = "Not authenticated") -> Failure:
    return Failure(ErrorCode.unauthenticated, message)


def forbidden(message: str = "Forbidden") -> Failure:
    return Failure(ErrorCode.forbidden, message)


def not_found(message: str) -> Failure:
    return Failure(ErrorCode.not_found, message)


def bad_request(message: str) -> Failure:
    return Failure(ErrorCode.bad_request, message)
