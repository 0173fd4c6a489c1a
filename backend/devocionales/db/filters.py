"""Declarative filter predicates compiled to SQLAlchemy expressions.

Predicates are plain frozen dataclasses so permission rules can build and
compare them without touching a session. Field names may be dotted to walk
relationships, e.g. ``Eq("family.community_id", 3)`` on ``Visit``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from sqlalchemy import and_, false, inspect, or_, true
from sqlalchemy.sql.elements import ColumnElement


@dataclass(frozen=True)
class Eq:
    field: str
    value: Any


@dataclass(frozen=True)
class In:
    field: str
    values: tuple

    def __init__(self, field: str, values) -> None:
        object.__setattr__(self, "field", field)
        object.__setattr__(self, "values", tuple(values))


@dataclass(frozen=True)
class Range:
    field: str
    gte: Any = None
    lte: Any = None
    gt: Any = None
    lt: Any = None


@dataclass(frozen=True)
class And:
    clauses: tuple = ()


@dataclass(frozen=True)
class Or:
    clauses: tuple = ()


Predicate = Union[Eq, In, Range, And, Or]

# An empty conjunction matches every row; an empty disjunction matches none.
MATCH_ALL = And(())
MATCH_NONE = Or(())


@dataclass(frozen=True)
class Sort:
    field: str
    descending: bool = False


def all_of(*clauses: Predicate | None) -> Predicate:
    kept = tuple(c for c in clauses if c is not None and c != MATCH_ALL)
    if any(c == MATCH_NONE for c in kept):
        return MATCH_NONE
    if len(kept) == 1:
        return kept[0]
    return And(kept)


def any_of(*clauses: Predicate | None) -> Predicate:
    kept = tuple(c for c in clauses if c is not None and c != MATCH_NONE)
    if any(c == MATCH_ALL for c in kept):
        return MATCH_ALL
    if len(kept) == 1:
        return kept[0]
    return Or(kept)


def _leaf(predicate: Eq | In | Range, column) -> ColumnElement[bool]:
    if isinstance(predicate, Eq):
        if predicate.value is None:
            return column.is_(None)
        return column == predicate.value
    if isinstance(predicate, In):
        if not predicate.values:
            return false()
        return column.in_(predicate.values)
    bounds = []
    if predicate.gte is not None:
        bounds.append(column >= predicate.gte)
    if predicate.lte is not None:
        bounds.append(column <= predicate.lte)
    if predicate.gt is not None:
        bounds.append(column > predicate.gt)
    if predicate.lt is not None:
        bounds.append(column < predicate.lt)
    if not bounds:
        return true()
    return and_(*bounds)


def _resolve(model, path: list[str], predicate) -> ColumnElement[bool]:
    head, rest = path[0], path[1:]
    if not rest:
        return _leaf(predicate, getattr(model, head))
    relationship = inspect(model).relationships.get(head)
    if relationship is None:
        raise ValueError(f"{model.__name__} has no relationship {head!r}")
    attr = getattr(model, head)
    inner = _resolve(relationship.mapper.class_, rest, predicate)
    if relationship.uselist:
        return attr.any(inner)
    return attr.has(inner)


def compile_filter(model, predicate: Predicate | None) -> ColumnElement[bool]:
    if predicate is None:
        return true()
    if isinstance(predicate, And):
        if not predicate.clauses:
            return true()
        return and_(*(compile_filter(model, c) for c in predicate.clauses))
    if isinstance(predicate, Or):
        if not predicate.clauses:
            return false()
        return or_(*(compile_filter(model, c) for c in predicate.clauses))
    return _resolve(model, predicate.field.split("."), predicate)


def compile_sort(model, sort: Sort | list[Sort] | None) -> list:
    if sort is None:
        return []
    sorts = sort if isinstance(sort, list) else [sort]
    columns = []
    for item in sorts:
        column = getattr(model, item.field)
        columns.append(column.desc() if item.descending else column.asc())
    return columns
