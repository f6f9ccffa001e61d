"""Persistence gateway contract shared by the SQL and in-memory backends.

Backends report constraint problems with the tagged failures below; the
services match on the failure type and never inspect driver messages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional
from uuid import UUID

from schemas import TransactionRecord, UserRecord


class GatewayFailure(Exception):
    """Generic or unavailable storage failure."""


class ForeignKeyViolation(GatewayFailure):
    def __init__(self, column: str, message: str = "") -> None:
        self.column = column
        super().__init__(message or f"foreign key violation on {column}")


class DomainViolation(GatewayFailure):
    def __init__(self, column: str, value: Any = None, message: str = "") -> None:
        self.column = column
        self.value = value
        super().__init__(message or f"value {value!r} not allowed for {column}")


class UniqueViolation(GatewayFailure):
    def __init__(self, constraint: str, message: str = "") -> None:
        self.constraint = constraint
        super().__init__(message or f"unique constraint {constraint} violated")


@dataclass(frozen=True)
class InsertedTransaction:
    id: UUID
    created_time: Optional[datetime]
    created_date: Optional[date]


def to_user_record(row: Any) -> UserRecord:
    return UserRecord.model_validate(row)


def to_transaction_record(row: Any) -> TransactionRecord:
    return TransactionRecord.model_validate(row)


class PersistenceGateway(ABC):
    """Read/write/aggregate primitives over users and transactions.

    Every write is a single durable statement. Transaction listings are
    ordered newest first.
    """

    @abstractmethod
    def select_users(self) -> list[UserRecord]: ...

    @abstractmethod
    def select_user(self, user_id: UUID) -> Optional[UserRecord]: ...

    @abstractmethod
    def insert_user(self, user: UserRecord) -> UUID:
        """Insert a user, keeping ``user.id`` when set, else generating one."""

    @abstractmethod
    def update_user(self, user_id: UUID, fields: Mapping[str, Any]) -> int: ...

    @abstractmethod
    def delete_user(self, user_id: UUID) -> int:
        """Delete a user and, by cascade, the user's transactions."""

    @abstractmethod
    def select_transactions(self) -> list[TransactionRecord]: ...

    @abstractmethod
    def select_transaction(self, transaction_id: UUID) -> Optional[TransactionRecord]: ...

    @abstractmethod
    def select_transactions_by_user(self, user_id: UUID) -> list[TransactionRecord]: ...

    @abstractmethod
    def insert_transaction(
        self, fields: Mapping[str, Any]
    ) -> Optional[InsertedTransaction]:
        """Insert and return the generated id and creation stamps."""

    @abstractmethod
    def update_transaction(
        self, transaction_id: UUID, fields: Mapping[str, Any]
    ) -> int: ...

    @abstractmethod
    def delete_transaction(self, transaction_id: UUID) -> int: ...

    @abstractmethod
    def count_by_username(
        self, username: str, exclude_id: Optional[UUID] = None
    ) -> Optional[int]: ...

    @abstractmethod
    def count_by_email(
        self, email: str, exclude_id: Optional[UUID] = None
    ) -> Optional[int]: ...

    @abstractmethod
    def sum_spend_since(self, user_id: UUID, since: date) -> Optional[float]:
        """Sum of positive amounts created on or after ``since``."""
