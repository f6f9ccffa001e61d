from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    username: str
    email: str
    budget: float = 0.0


class TransactionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    user_id: UUID
    description: str
    amount: float
    category: str
    created_time: Optional[datetime] = None
    created_date: Optional[date] = None


class UserIn(BaseModel):
    id: Optional[UUID] = None
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=255)
    budget: float = 0.0


class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    budget: Optional[float] = None


class BudgetReport(BaseModel):
    user_id: UUID
    username: str
    total_budget: float
    total_spent: float
    remaining: float
    categories: dict[str, float] = Field(default_factory=dict)
    is_over_budget: bool
    warnings: str = ""
    has_warnings: bool = False


class WeeklySummary(BaseModel):
    username: str
    weekly_total: float
    transaction_count: int
    transactions: list[TransactionRecord] = Field(default_factory=list)
