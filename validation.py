"""Admission checks for transaction candidates and patches.

Everything here is pure: values in, cleaned values or a ValidationError out.
Nothing is written before these checks pass.
"""

import math
from decimal import Decimal
from numbers import Real
from typing import Any, Mapping
from uuid import UUID

from errors import (
    AmountNotPositive,
    BlankCategory,
    BlankDescription,
    InvalidAmountType,
    InvalidBudgetFormat,
    InvalidCategory,
    InvalidUserId,
    MissingCategory,
    MissingDescription,
    MissingUserId,
    NegativeBudget,
    NoValidFields,
)
from models import CATEGORY_VALUES

PATCHABLE_FIELDS = ("description", "amount", "category")


def validate_user_id(value: Any) -> UUID:
    if value is None:
        raise MissingUserId()
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise InvalidUserId(value) from exc


def validate_description(value: Any) -> str:
    if value is None:
        raise MissingDescription()
    if not isinstance(value, str) or not value.strip():
        raise BlankDescription()
    return value


def validate_amount(value: Any, *, allow_text: bool = False) -> float:
    if isinstance(value, bool):
        raise InvalidAmountType(value)
    if isinstance(value, (Real, Decimal)):
        amount = float(value)
    elif allow_text and isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError as exc:
            raise InvalidAmountType(value) from exc
    else:
        raise InvalidAmountType(value)
    if math.isnan(amount) or amount <= 0:
        raise AmountNotPositive(amount)
    if math.isinf(amount):
        raise InvalidAmountType(value)
    return amount


def validate_category(value: Any) -> str:
    if value is None:
        raise MissingCategory()
    if not isinstance(value, str):
        raise InvalidCategory(value)
    if not value.strip():
        raise BlankCategory()
    if value not in CATEGORY_VALUES:
        raise InvalidCategory(value)
    return value


def validate_transaction(candidate: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "user_id": validate_user_id(candidate.get("user_id")),
        "description": validate_description(candidate.get("description")),
        "amount": validate_amount(candidate.get("amount")),
        "category": validate_category(candidate.get("category")),
    }


def validate_transaction_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Validate only the supplied keys; unknown keys are ignored."""
    cleaned: dict[str, Any] = {}
    if "description" in patch:
        cleaned["description"] = validate_description(patch["description"])
    if "amount" in patch:
        cleaned["amount"] = validate_amount(patch["amount"], allow_text=True)
    if "category" in patch:
        cleaned["category"] = validate_category(patch["category"])
    if not cleaned:
        raise NoValidFields()
    return cleaned


def parse_budget(value: Any) -> float:
    """Coerce a number or numeric text into a non-negative finite budget."""
    if isinstance(value, bool):
        raise InvalidBudgetFormat(value)
    if isinstance(value, (Real, Decimal)):
        budget = float(value)
    elif isinstance(value, str):
        try:
            budget = float(value.strip())
        except ValueError as exc:
            raise InvalidBudgetFormat(value) from exc
    else:
        raise InvalidBudgetFormat(value)
    if math.isnan(budget) or math.isinf(budget):
        raise InvalidBudgetFormat(value)
    if budget < 0:
        raise NegativeBudget(budget)
    return budget
