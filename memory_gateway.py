"""Transient gateway for tests and low-stakes deployments.

Transactions live in a map keyed by a monotonically increasing sequence
number. Every read copies a snapshot under the lock.
"""

from __future__ import annotations

import itertools
import threading
import uuid
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional
from uuid import UUID

from config import local_now
from gateway import (
    DomainViolation,
    ForeignKeyViolation,
    InsertedTransaction,
    PersistenceGateway,
    UniqueViolation,
    to_transaction_record,
    to_user_record,
)
from models import CATEGORY_VALUES
from schemas import TransactionRecord, UserRecord


class InMemoryGateway(PersistenceGateway):
    def __init__(self, clock: Callable[[], datetime] = local_now) -> None:
        self.clock = clock
        self._lock = threading.Lock()
        self._seq = itertools.count(1)
        self._users: dict[UUID, dict[str, Any]] = {}
        self._transactions: dict[int, dict[str, Any]] = {}
        self._seq_by_id: dict[UUID, int] = {}

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
            self._transactions.clear()
            self._seq_by_id.clear()
            self._seq = itertools.count(1)

    def _check_unique(self, fields: Mapping[str, Any], exclude_id: Optional[UUID]) -> None:
        for other_id, other in self._users.items():
            if other_id == exclude_id:
                continue
            if "username" in fields and other["username"] == fields["username"]:
                raise UniqueViolation("uq_users_username")
            if "email" in fields and other["email"] == fields["email"]:
                raise UniqueViolation("uq_users_email")

    def _newest_first(self, rows: list[tuple[int, dict[str, Any]]]) -> list[TransactionRecord]:
        rows.sort(key=lambda item: (item[1]["created_time"], item[0]), reverse=True)
        return [to_transaction_record(row) for _, row in rows]

    def select_users(self) -> list[UserRecord]:
        with self._lock:
            rows = sorted(self._users.values(), key=lambda row: row["username"])
            return [to_user_record(row) for row in rows]

    def select_user(self, user_id: UUID) -> Optional[UserRecord]:
        with self._lock:
            row = self._users.get(user_id)
            return to_user_record(row) if row else None

    def insert_user(self, user: UserRecord) -> UUID:
        user_id = user.id or uuid.uuid4()
        row = {
            "id": user_id,
            "username": user.username,
            "email": user.email,
            "budget": user.budget,
        }
        with self._lock:
            if user_id in self._users:
                raise UniqueViolation("users_pkey")
            self._check_unique(row, exclude_id=None)
            self._users[user_id] = row
        return user_id

    def update_user(self, user_id: UUID, fields: Mapping[str, Any]) -> int:
        with self._lock:
            row = self._users.get(user_id)
            if row is None:
                return 0
            self._check_unique(fields, exclude_id=user_id)
            row.update(fields)
            return 1

    def delete_user(self, user_id: UUID) -> int:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                return 0
            owned = [
                seq
                for seq, row in self._transactions.items()
                if row["user_id"] == user_id
            ]
            for seq in owned:
                row = self._transactions.pop(seq)
                self._seq_by_id.pop(row["id"], None)
            return 1

    def select_transactions(self) -> list[TransactionRecord]:
        with self._lock:
            rows = [(seq, dict(row)) for seq, row in self._transactions.items()]
        return self._newest_first(rows)

    def select_transaction(self, transaction_id: UUID) -> Optional[TransactionRecord]:
        with self._lock:
            seq = self._seq_by_id.get(transaction_id)
            if seq is None:
                return None
            return to_transaction_record(self._transactions[seq])

    def select_transactions_by_user(self, user_id: UUID) -> list[TransactionRecord]:
        with self._lock:
            rows = [
                (seq, dict(row))
                for seq, row in self._transactions.items()
                if row["user_id"] == user_id
            ]
        return self._newest_first(rows)

    def insert_transaction(
        self, fields: Mapping[str, Any]
    ) -> Optional[InsertedTransaction]:
        if fields.get("category") not in CATEGORY_VALUES:
            raise DomainViolation("category", fields.get("category"))
        now = self.clock()
        row = {
            "id": uuid.uuid4(),
            "user_id": fields["user_id"],
            "description": fields["description"],
            "amount": fields["amount"],
            "category": fields["category"],
            "created_time": now,
            "created_date": now.date(),
        }
        with self._lock:
            if row["user_id"] not in self._users:
                raise ForeignKeyViolation("user_id")
            seq = next(self._seq)
            self._transactions[seq] = row
            self._seq_by_id[row["id"]] = seq
        return InsertedTransaction(row["id"], row["created_time"], row["created_date"])

    def update_transaction(
        self, transaction_id: UUID, fields: Mapping[str, Any]
    ) -> int:
        if "category" in fields and fields["category"] not in CATEGORY_VALUES:
            raise DomainViolation("category", fields["category"])
        with self._lock:
            seq = self._seq_by_id.get(transaction_id)
            if seq is None:
                return 0
            self._transactions[seq].update(fields)
            return 1

    def delete_transaction(self, transaction_id: UUID) -> int:
        with self._lock:
            seq = self._seq_by_id.pop(transaction_id, None)
            if seq is None:
                return 0
            del self._transactions[seq]
            return 1

    def count_by_username(
        self, username: str, exclude_id: Optional[UUID] = None
    ) -> Optional[int]:
        with self._lock:
            return sum(
                1
                for user_id, row in self._users.items()
                if row["username"] == username and user_id != exclude_id
            )

    def count_by_email(
        self, email: str, exclude_id: Optional[UUID] = None
    ) -> Optional[int]:
        with self._lock:
            return sum(
                1
                for user_id, row in self._users.items()
                if row["email"] == email and user_id != exclude_id
            )

    def sum_spend_since(self, user_id: UUID, since: date) -> Optional[float]:
        with self._lock:
            return sum(
                row["amount"]
                for row in self._transactions.values()
                if row["user_id"] == user_id
                and row["created_date"] >= since
                and row["amount"] > 0
            )
