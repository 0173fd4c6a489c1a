from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from devocionales.db.filters import Predicate, Sort, compile_filter, compile_sort
from devocionales.models.base import utcnow

ModelT = TypeVar("ModelT")


class Store:
    """CRUD and filtered reads over a Session.

    Writes flush but never commit; the caller owns the transaction boundary.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, model: type[ModelT], record_id: Any) -> ModelT | None:
        if record_id is None:
            return None
        return self.db.get(model, record_id)

    def find_one(self, model: type[ModelT], where: Predicate | None = None) -> ModelT | None:
        stmt = select(model).where(compile_filter(model, where)).limit(1)
        return self.db.scalar(stmt)

    def find_many(
        self,
        model: type[ModelT],
        where: Predicate | None = None,
        sort: Sort | list[Sort] | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[ModelT]:
        stmt = select(model).where(compile_filter(model, where))
        order = compile_sort(model, sort)
        if order:
            stmt = stmt.order_by(*order)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        return list(self.db.scalars(stmt))

    def count(self, model, where: Predicate | None = None) -> int:
        stmt = select(func.count()).select_from(model).where(compile_filter(model, where))
        return int(self.db.scalar(stmt) or 0)

    def create(self, model: type[ModelT], payload: dict[str, Any]) -> ModelT:
        record = model(**payload)
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, model: type[ModelT], record_id: Any, payload: dict[str, Any]) -> ModelT | None:
        record = self.find_by_id(model, record_id)
        if record is None:
            return None
        for key, value in payload.items():
            setattr(record, key, value)
        if hasattr(record, "updated_at"):
            record.updated_at = utcnow()
        self.db.add(record)
        self.db.flush()
        return record

    def delete(self, model, record_id: Any) -> bool:
        record = self.find_by_id(model, record_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        return True
