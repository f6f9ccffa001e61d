from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional
from uuid import UUID

import analytics
from config import get_settings
from errors import UserNotFound
from gateway import GatewayFailure, PersistenceGateway
from schemas import BudgetReport, TransactionRecord, UserRecord, WeeklySummary
from services import translate_failures
from validation import parse_budget

logger = logging.getLogger(__name__)

USER_NOT_FOUND_TEXT = "User not found"


class ReportService:
    def __init__(
        self, gateway: PersistenceGateway, timezone: Optional[str] = None
    ) -> None:
        self.gateway = gateway
        self.timezone = timezone or get_settings().timezone

    def _today(self, today: Optional[date]) -> date:
        return today or analytics.today_in(self.timezone)

    def _find_user(self, user_id: UUID) -> Optional[UserRecord]:
        with translate_failures():
            return self.gateway.select_user(user_id)

    def _require_user(self, user_id: UUID) -> UserRecord:
        user = self._find_user(user_id)
        if user is None:
            logger.warning(f"report_user_not_found: id={user_id}")
            raise UserNotFound(user_id)
        return user

    def _transactions(self, user_id: UUID) -> list[TransactionRecord]:
        with translate_failures():
            return self.gateway.select_transactions_by_user(user_id)

    def budget_report(self, user_id: UUID) -> BudgetReport:
        user = self._require_user(user_id)
        transactions = self._transactions(user_id)
        spent = analytics.total_spent(transactions)
        left = user.budget - spent
        warning_text = analytics.warnings(user, transactions)
        return BudgetReport(
            user_id=user_id,
            username=user.username,
            total_budget=user.budget,
            total_spent=spent,
            remaining=left,
            categories=analytics.category_breakdown(transactions),
            is_over_budget=analytics.is_over_budget(left),
            warnings=warning_text,
            has_warnings=bool(warning_text),
        )

    def set_budget(self, user_id: UUID, patch: Mapping[str, Any]) -> UserRecord:
        user = self._require_user(user_id)
        if "budget" not in patch:
            return user
        budget = parse_budget(patch["budget"])
        with translate_failures():
            rows = self.gateway.update_user(user_id, {"budget": budget})
        if rows == 0:
            raise UserNotFound(user_id)
        logger.info(f"budget_updated: user_id={user_id} budget={budget:.2f}")
        return user.model_copy(update={"budget": budget})

    def budget_summary_text(self, user_id: UUID) -> str:
        user = self._find_user(user_id)
        if user is None:
            return USER_NOT_FOUND_TEXT
        return analytics.budget_summary(user, self._transactions(user_id))

    def warnings_text(self, user_id: UUID) -> str:
        user = self._find_user(user_id)
        if user is None:
            return USER_NOT_FOUND_TEXT
        return analytics.warnings(user, self._transactions(user_id))

    def monthly_summary(self, user_id: UUID, today: Optional[date] = None) -> str:
        user = self._find_user(user_id)
        if user is None:
            return USER_NOT_FOUND_TEXT
        return analytics.monthly_summary(
            user, self._transactions(user_id), self._today(today)
        )

    def weekly_transactions(
        self, user_id: UUID, today: Optional[date] = None
    ) -> list[TransactionRecord]:
        return analytics.weekly_window(self._transactions(user_id), self._today(today))

    def total_last_7_days(self, user_id: UUID, today: Optional[date] = None) -> float:
        since = analytics.week_start(self._today(today))
        try:
            total = self.gateway.sum_spend_since(user_id, since)
        except GatewayFailure as exc:
            logger.warning(f"weekly_total_unavailable: user_id={user_id} error={exc}")
            return 0.0
        return float(total) if total is not None else 0.0

    def weekly_summary(
        self, user_id: UUID, today: Optional[date] = None
    ) -> WeeklySummary:
        user = self._require_user(user_id)
        today = self._today(today)
        transactions = self.weekly_transactions(user_id, today)
        return WeeklySummary(
            username=user.username,
            weekly_total=self.total_last_7_days(user_id, today),
            transaction_count=len(transactions),
            transactions=transactions,
        )
