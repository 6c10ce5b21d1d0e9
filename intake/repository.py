"""
intake/repository.py

Data access for clients and field-visit records.

Repositories wrap the caller's session and never commit; transaction
boundaries belong to the import orchestrator and the API layer.
"""

from __future__ import annotations

from typing import Any, Sequence, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from db.base import Base
from db.models.client import Client

RecordT = TypeVar("RecordT", bound=Base)


class ClientRepository:
    """
    Lookup and creation of owner records.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_any(
        self,
        *,
        national_id: str | None = None,
        phone: str | None = None,
        name: str | None = None,
    ) -> Client | None:
        """
        Oldest client matching any of the given keys, or None.
        """

        conditions = []
        if national_id:
            conditions.append(Client.national_id == national_id)
        if phone:
            conditions.append(Client.phone == phone)
        if name:
            conditions.append(Client.name == name)
        if not conditions:
            return None

        stmt = select(Client).where(or_(*conditions)).order_by(Client.created_at.asc()).limit(1)
        return self._session.scalars(stmt).first()

    def find_by_national_id(self, national_id: str) -> Client | None:
        stmt = (
            select(Client)
            .where(Client.national_id == national_id)
            .order_by(Client.created_at.asc())
            .limit(1)
        )
        return self._session.scalars(stmt).first()

    def add(self, client: Client) -> Client:
        self._session.add(client)
        self._session.flush()
        return client

    def count(self) -> int:
        return int(self._session.scalar(select(func.count()).select_from(Client)) or 0)


class FieldRecordRepository:
    """
    Persistence and filtered listing for one field-visit record model.
    """

    def __init__(self, session: Session, model: type[RecordT]) -> None:
        self._session = session
        self._model = model

    @property
    def model(self) -> type[RecordT]:
        return self._model

    def add(self, record: RecordT) -> RecordT:
        self._session.add(record)
        self._session.flush()
        return record

    def search(
        self,
        *,
        predicates: Sequence[Any] = (),
        order_by: Sequence[Any] = (),
        offset: int = 0,
        limit: int | None = None,
    ) -> list[RecordT]:
        stmt = select(self._model)
        for predicate in predicates:
            stmt = stmt.where(predicate)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self._session.scalars(stmt).unique().all())

    def count(self, *, predicates: Sequence[Any] = ()) -> int:
        stmt = select(func.count()).select_from(self._model)
        for predicate in predicates:
            stmt = stmt.where(predicate)
        return int(self._session.scalar(stmt) or 0)
