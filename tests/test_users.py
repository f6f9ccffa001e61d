import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from database import Base, build_engine
from errors import (
    DuplicateEmail,
    DuplicateUsername,
    InvalidBudgetFormat,
    NegativeBudget,
    UserNotFound,
)
from memory_gateway import InMemoryGateway
from models import Transaction
from schemas import UserIn, UserUpdate
from services import TransactionService, UserService
from sql_gateway import SqlGateway


def _sql_session() -> Session:
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    return Session(engine)


def test_add_generates_identifier() -> None:
    with _sql_session() as session:
        users = UserService(SqlGateway(session))

        user = users.add(UserIn(username="alice", email="alice@example.com", budget=120.0))

        assert isinstance(user.id, uuid.UUID)
        assert users.get(user.id).budget == 120.0
        assert [u.username for u in users.list_all()] == ["alice"]


def test_add_keeps_supplied_identifier() -> None:
    with _sql_session() as session:
        users = UserService(SqlGateway(session))
        seeded_id = uuid.uuid4()

        user = users.add(
            UserIn(id=seeded_id, username="seed", email="seed@example.com", budget=10.0)
        )

        assert user.id == seeded_id
        assert users.get(seeded_id).username == "seed"


def test_username_and_email_exist_with_self_exclusion() -> None:
    with _sql_session() as session:
        users = UserService(SqlGateway(session))
        alice = users.add(UserIn(username="alice", email="alice@example.com"))

        assert users.username_exists("alice") is True
        assert users.username_exists("alice", alice.id) is False
        assert users.username_exists("nobody") is False
        assert users.email_exists("alice@example.com") is True
        assert users.email_exists("alice@example.com", alice.id) is False


def test_missing_count_is_treated_as_absent() -> None:
    class UnsureGateway(InMemoryGateway):
        def count_by_username(self, username, exclude_id=None):
            return None

    assert UserService(UnsureGateway()).username_exists("alice") is False


def test_store_uniqueness_violations_are_named() -> None:
    with _sql_session() as session:
        users = UserService(SqlGateway(session))
        users.add(UserIn(username="alice", email="alice@example.com"))

        with pytest.raises(DuplicateUsername):
            users.add(UserIn(username="alice", email="other@example.com"))
        with pytest.raises(DuplicateEmail):
            users.add(UserIn(username="other", email="alice@example.com"))
        assert len(users.list_all()) == 1


def test_update_is_in_place_and_keeps_transactions() -> None:
    with _sql_session() as session:
        gateway = SqlGateway(session)
        users = UserService(gateway)
        alice = users.add(UserIn(username="alice", email="alice@example.com", budget=100.0))
        TransactionService(gateway).create(
            {"user_id": alice.id, "description": "Tea", "amount": 3, "category": "FOOD"}
        )

        updated = users.update(alice.id, UserUpdate(username="alicia", budget=250.0))

        assert updated.id == alice.id
        assert updated.username == "alicia"
        assert updated.email == "alice@example.com"
        assert updated.budget == 250.0
        assert len(TransactionService(gateway).list_for_user(alice.id)) == 1


def test_update_checks_collisions_against_other_users_only() -> None:
    gateway = InMemoryGateway()
    users = UserService(gateway)
    alice = users.add(UserIn(username="alice", email="alice@example.com"))
    users.add(UserIn(username="bob", email="bob@example.com"))

    assert users.update(alice.id, UserUpdate(username="alice")).username == "alice"
    with pytest.raises(DuplicateUsername):
        users.update(alice.id, UserUpdate(username="bob"))
    with pytest.raises(DuplicateEmail):
        users.update(alice.id, UserUpdate(email="bob@example.com"))
    with pytest.raises(NegativeBudget):
        users.update(alice.id, UserUpdate(budget=-5.0))
    with pytest.raises(UserNotFound):
        users.update(uuid.uuid4(), UserUpdate(username="ghost"))


@pytest.mark.parametrize("budget", [float("nan"), float("inf"), float("-inf")])
def test_update_rejects_non_finite_budget(budget: float) -> None:
    gateway = InMemoryGateway()
    users = UserService(gateway)
    alice = users.add(UserIn(username="alice", email="alice@example.com", budget=80.0))

    with pytest.raises(InvalidBudgetFormat):
        users.update(alice.id, UserUpdate(budget=budget))
    assert users.get(alice.id).budget == 80.0


def test_delete_user_cascades_to_transactions() -> None:
    with _sql_session() as session:
        gateway = SqlGateway(session)
        users = UserService(gateway)
        transactions = TransactionService(gateway)
        alice = users.add(UserIn(username="alice", email="alice@example.com"))
        bob = users.add(UserIn(username="bob", email="bob@example.com"))
        for owner in (alice, alice, bob):
            transactions.create(
                {"user_id": owner.id, "description": "Lunch", "amount": 8, "category": "FOOD"}
            )

        assert users.delete(alice.id) is True
        assert users.delete(alice.id) is False

        assert gateway.select_transactions_by_user(alice.id) == []
        assert len(gateway.select_transactions_by_user(bob.id)) == 1
        remaining = session.scalar(select(func.count()).select_from(Transaction))
        assert remaining == 1


def test_memory_delete_user_cascades_to_transactions() -> None:
    gateway = InMemoryGateway()
    users = UserService(gateway)
    alice = users.add(UserIn(username="alice", email="alice@example.com"))
    txn = TransactionService(gateway).create(
        {"user_id": alice.id, "description": "Bus", "amount": 2, "category": "TRANSPORTATION"}
    )

    assert users.delete(alice.id) is True
    assert gateway.select_transactions_by_user(alice.id) == []
    assert gateway.select_transaction(txn.id) is None
