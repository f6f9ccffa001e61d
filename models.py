import uuid
from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from config import local_now
from database import Base


class TransactionCategory(str, Enum):
    food = "FOOD"
    transportation = "TRANSPORTATION"
    entertainment = "ENTERTAINMENT"
    utilities = "UTILITIES"
    shopping = "SHOPPING"
    healthcare = "HEALTHCARE"
    travel = "TRAVEL"
    education = "EDUCATION"
    other = "OTHER"


CATEGORY_VALUES = tuple(member.value for member in TransactionCategory)

_CATEGORY_CHECK = "category IN ({})".format(
    ", ".join(f"'{value}'" for value in CATEGORY_VALUES)
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    budget: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
    )


def _created_date(context) -> date:
    return context.get_current_parameters()["created_time"].date()


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    created_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime, default=local_now
    )
    created_date: Mapped[Optional[date]] = mapped_column(
        Date, default=_created_date
    )

    user: Mapped["User"] = relationship("User", back_populates="transactions")

    __table_args__ = (
        CheckConstraint(_CATEGORY_CHECK, name="ck_transactions_category"),
        Index("ix_transactions_user_created", "user_id", "created_time"),
    )
