from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Any, Iterator, Mapping, Optional
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gateway import (
    DomainViolation,
    ForeignKeyViolation,
    GatewayFailure,
    InsertedTransaction,
    PersistenceGateway,
    UniqueViolation,
    to_transaction_record,
    to_user_record,
)
from models import Transaction, User
from schemas import TransactionRecord, UserRecord


def _constraint_name(exc: IntegrityError) -> str:
    diag = getattr(exc.orig, "diag", None)
    return (getattr(diag, "constraint_name", None) or "").lower()


def integrity_failure(exc: IntegrityError, values: Mapping[str, Any]) -> GatewayFailure:
    """Classify a driver integrity error into a tagged gateway failure."""
    message = str(exc.orig)
    text = f"{_constraint_name(exc)} {message}".lower()
    if "foreign key" in text or "_fkey" in text:
        return ForeignKeyViolation("user_id", message)
    if "ck_transactions_category" in text or "check constraint" in text:
        return DomainViolation("category", values.get("category"), message)
    if "unique" in text or "duplicate key" in text:
        if "username" in text:
            return UniqueViolation("uq_users_username", message)
        if "email" in text:
            return UniqueViolation("uq_users_email", message)
        return UniqueViolation(_constraint_name(exc) or "unknown", message)
    return GatewayFailure(message)


class SqlGateway(PersistenceGateway):
    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _reading(self) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise GatewayFailure(str(exc)) from exc

    @contextmanager
    def _writing(self, values: Optional[Mapping[str, Any]] = None) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise integrity_failure(exc, values or {}) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise GatewayFailure(str(exc)) from exc

    def select_users(self) -> list[UserRecord]:
        with self._reading():
            rows = self.session.scalars(select(User).order_by(User.username)).all()
            return [to_user_record(row) for row in rows]

    def select_user(self, user_id: UUID) -> Optional[UserRecord]:
        with self._reading():
            row = self.session.get(User, user_id)
            return to_user_record(row) if row else None

    def insert_user(self, user: UserRecord) -> UUID:
        values: dict[str, Any] = {
            "username": user.username,
            "email": user.email,
            "budget": user.budget,
        }
        if user.id is not None:
            values["id"] = user.id
        row = User(**values)
        with self._writing(values):
            self.session.add(row)
        return row.id

    def update_user(self, user_id: UUID, fields: Mapping[str, Any]) -> int:
        with self._writing(fields):
            result = self.session.execute(
                update(User).where(User.id == user_id).values(**fields)
            )
        return result.rowcount or 0

    def delete_user(self, user_id: UUID) -> int:
        with self._writing():
            row = self.session.get(User, user_id)
            if row is None:
                return 0
            self.session.delete(row)
        return 1

    def select_transactions(self) -> list[TransactionRecord]:
        with self._reading():
            rows = self.session.scalars(
                select(Transaction).order_by(Transaction.created_time.desc())
            ).all()
            return [to_transaction_record(row) for row in rows]

    def select_transaction(self, transaction_id: UUID) -> Optional[TransactionRecord]:
        with self._reading():
            row = self.session.get(Transaction, transaction_id)
            return to_transaction_record(row) if row else None

    def select_transactions_by_user(self, user_id: UUID) -> list[TransactionRecord]:
        with self._reading():
            rows = self.session.scalars(
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .order_by(Transaction.created_time.desc())
            ).all()
            return [to_transaction_record(row) for row in rows]

    def insert_transaction(
        self, fields: Mapping[str, Any]
    ) -> Optional[InsertedTransaction]:
        row = Transaction(**fields)
        with self._writing(fields):
            self.session.add(row)
        with self._reading():
            return InsertedTransaction(row.id, row.created_time, row.created_date)

    def update_transaction(
        self, transaction_id: UUID, fields: Mapping[str, Any]
    ) -> int:
        with self._writing(fields):
            result = self.session.execute(
                update(Transaction)
                .where(Transaction.id == transaction_id)
                .values(**fields)
            )
        return result.rowcount or 0

    def delete_transaction(self, transaction_id: UUID) -> int:
        with self._writing():
            result = self.session.execute(
                delete(Transaction).where(Transaction.id == transaction_id)
            )
        return result.rowcount or 0

    def count_by_username(
        self, username: str, exclude_id: Optional[UUID] = None
    ) -> Optional[int]:
        stmt = select(func.count()).select_from(User).where(User.username == username)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        with self._reading():
            return self.session.scalar(stmt)

    def count_by_email(
        self, email: str, exclude_id: Optional[UUID] = None
    ) -> Optional[int]:
        stmt = select(func.count()).select_from(User).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        with self._reading():
            return self.session.scalar(stmt)

    def sum_spend_since(self, user_id: UUID, since: date) -> Optional[float]:
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0.0)).where(
            Transaction.user_id == user_id,
            Transaction.created_date >= since,
            Transaction.amount > 0,
        )
        with self._reading():
            return self.session.scalar(stmt)
