from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional
from uuid import UUID

from errors import (
    BudgetError,
    DuplicateEmail,
    DuplicateUsername,
    InvalidCategory,
    InvalidUserId,
    StorageUnavailable,
    TransactionNotFound,
    UpdateFailed,
    UserNotFound,
)
from gateway import (
    DomainViolation,
    ForeignKeyViolation,
    GatewayFailure,
    PersistenceGateway,
    UniqueViolation,
)
from schemas import TransactionRecord, UserIn, UserRecord, UserUpdate
from validation import parse_budget, validate_transaction, validate_transaction_patch

logger = logging.getLogger(__name__)


def domain_error(failure: GatewayFailure, values: Mapping[str, Any]) -> BudgetError:
    if isinstance(failure, ForeignKeyViolation):
        return InvalidUserId(values.get("user_id"))
    if isinstance(failure, DomainViolation):
        value = failure.value if failure.value is not None else values.get(failure.column)
        return InvalidCategory(value)
    if isinstance(failure, UniqueViolation):
        if "username" in failure.constraint:
            return DuplicateUsername(values.get("username"))
        if "email" in failure.constraint:
            return DuplicateEmail(values.get("email"))
    return StorageUnavailable(str(failure) or "Storage unavailable")


@contextmanager
def translate_failures(values: Optional[Mapping[str, Any]] = None) -> Iterator[None]:
    """Re-raise gateway failures as domain errors."""
    try:
        yield
    except GatewayFailure as exc:
        error = domain_error(exc, values or {})
        if isinstance(error, StorageUnavailable):
            logger.exception(f"storage_failure: {exc}")
        else:
            logger.warning(f"constraint_rejected: {error}")
        raise error from exc


class UserService:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    def list_all(self) -> list[UserRecord]:
        with translate_failures():
            return self.gateway.select_users()

    def get(self, user_id: UUID) -> UserRecord:
        with translate_failures():
            user = self.gateway.select_user(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    def username_exists(self, username: str, exclude_id: Optional[UUID] = None) -> bool:
        with translate_failures():
            count = self.gateway.count_by_username(username, exclude_id)
        return bool(count)

    def email_exists(self, email: str, exclude_id: Optional[UUID] = None) -> bool:
        with translate_failures():
            count = self.gateway.count_by_email(email, exclude_id)
        return bool(count)

    def add(self, data: UserIn) -> UserRecord:
        user = UserRecord(
            id=data.id, username=data.username, email=data.email, budget=data.budget
        )
        with translate_failures(user.model_dump()):
            user.id = self.gateway.insert_user(user)
        logger.info(f"user_created: id={user.id} username={user.username}")
        return user

    def update(self, user_id: UUID, data: UserUpdate) -> UserRecord:
        """Patch a user in place; blank or missing fields keep their value."""
        existing = self.get(user_id)
        fields: dict[str, Any] = {}

        username = (data.username or "").strip()
        if username and username != existing.username:
            if self.username_exists(username, user_id):
                logger.warning(f"duplicate_username: {username}")
                raise DuplicateUsername(username)
            fields["username"] = username

        email = (data.email or "").strip()
        if email and email != existing.email:
            if self.email_exists(email, user_id):
                logger.warning(f"duplicate_email: {email}")
                raise DuplicateEmail(email)
            fields["email"] = email

        if data.budget is not None:
            fields["budget"] = parse_budget(data.budget)

        if not fields:
            return existing

        with translate_failures(fields):
            rows = self.gateway.update_user(user_id, fields)
        if rows == 0:
            raise UserNotFound(user_id)
        logger.info(f"user_updated: id={user_id} fields={sorted(fields)}")
        return self.get(user_id)

    def delete(self, user_id: UUID) -> bool:
        with translate_failures():
            rows = self.gateway.delete_user(user_id)
        if rows:
            logger.info(f"user_deleted: id={user_id}")
        else:
            logger.warning(f"user_delete_missed: id={user_id}")
        return rows > 0


class TransactionService:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    def list_all(self) -> list[TransactionRecord]:
        with translate_failures():
            return self.gateway.select_transactions()

    def list_for_user(self, user_id: UUID) -> list[TransactionRecord]:
        with translate_failures():
            return self.gateway.select_transactions_by_user(user_id)

    def get(self, transaction_id: UUID) -> TransactionRecord:
        with translate_failures():
            txn = self.gateway.select_transaction(transaction_id)
        if txn is None:
            raise TransactionNotFound(transaction_id)
        return txn

    def create(self, candidate: Mapping[str, Any]) -> TransactionRecord:
        fields = validate_transaction(candidate)
        with translate_failures(fields):
            inserted = self.gateway.insert_transaction(fields)
        if inserted is None:
            return TransactionRecord(**fields)
        txn = TransactionRecord(
            id=inserted.id,
            created_time=inserted.created_time,
            created_date=inserted.created_date,
            **fields,
        )
        logger.info(f"transaction_created: id={txn.id} user_id={txn.user_id}")
        return txn

    def update(self, transaction_id: UUID, patch: Mapping[str, Any]) -> TransactionRecord:
        existing = self.get(transaction_id)
        changes = validate_transaction_patch(patch)
        merged = existing.model_copy(update=changes)
        fields = {
            "description": merged.description,
            "amount": merged.amount,
            "category": merged.category,
        }
        with translate_failures(fields):
            rows = self.gateway.update_transaction(transaction_id, fields)
        if rows == 0:
            raise UpdateFailed(transaction_id)
        logger.info(f"transaction_updated: id={transaction_id} fields={sorted(changes)}")
        return self.get(transaction_id)

    def delete(self, transaction_id: UUID) -> bool:
        with translate_failures():
            rows = self.gateway.delete_transaction(transaction_id)
        if rows:
            logger.info(f"transaction_deleted: id={transaction_id}")
        return rows > 0

    def _require_user(self, user_id: UUID) -> None:
        with translate_failures():
            user = self.gateway.select_user(user_id)
        if user is None:
            logger.warning(f"user_not_found: id={user_id}")
            raise UserNotFound(user_id)

    def get_for_user(self, user_id: UUID, transaction_id: UUID) -> TransactionRecord:
        """Another user's transaction is reported exactly like a missing one."""
        self._require_user(user_id)
        with translate_failures():
            txn = self.gateway.select_transaction(transaction_id)
        if txn is None or txn.user_id != user_id:
            raise TransactionNotFound(transaction_id)
        return txn

    def create_for_user(
        self, user_id: UUID, candidate: Mapping[str, Any]
    ) -> TransactionRecord:
        self._require_user(user_id)
        return self.create({**candidate, "user_id": user_id})

    def update_for_user(
        self, user_id: UUID, transaction_id: UUID, patch: Mapping[str, Any]
    ) -> TransactionRecord:
        self.get_for_user(user_id, transaction_id)
        return self.update(transaction_id, patch)

    def delete_for_user(self, user_id: UUID, transaction_id: UUID) -> bool:
        try:
            self.get_for_user(user_id, transaction_id)
        except TransactionNotFound:
            return False
        return self.delete(transaction_id)
