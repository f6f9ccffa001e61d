"""Budget arithmetic over one user's transaction history.

All functions are pure. Only positive amounts count as spend; a zero or
negative amount never moves a total.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from config import local_now
from schemas import TransactionRecord, UserRecord

NEAR_LIMIT_RATIO = 0.10
WEEK_WINDOW_DAYS = 7


def today_in(timezone: str) -> date:
    return datetime.now(ZoneInfo(timezone)).date()


def spend_entries(transactions: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    return [txn for txn in transactions if txn.amount > 0]


def total_spent(transactions: Iterable[TransactionRecord]) -> float:
    return float(sum(txn.amount for txn in spend_entries(transactions)))


def remaining(user: UserRecord, transactions: Iterable[TransactionRecord]) -> float:
    return user.budget - total_spent(transactions)


def is_over_budget(remaining_amount: float) -> bool:
    return remaining_amount < 0


def category_breakdown(transactions: Iterable[TransactionRecord]) -> dict[str, float]:
    totals: dict[str, float] = defaultdict(float)
    for txn in spend_entries(transactions):
        totals[txn.category] += txn.amount
    return dict(totals)


def ranked_breakdown(breakdown: dict[str, float]) -> list[tuple[str, float]]:
    # Name breaks ties so equal sums render in a stable order.
    return sorted(breakdown.items(), key=lambda item: (-item[1], item[0]))


def warnings(user: UserRecord, transactions: Iterable[TransactionRecord]) -> str:
    left = remaining(user, transactions)
    if left < 0:
        return f"OVER BUDGET! You have exceeded your budget by ${-left:.2f}\n"
    if left < user.budget * NEAR_LIMIT_RATIO:
        return f"Budget warning: near limit, only ${left:.2f} remaining (less than 10%)\n"
    return ""


def _newest_first(transactions: list[TransactionRecord]) -> list[TransactionRecord]:
    return sorted(
        transactions,
        key=lambda txn: txn.created_time or datetime.min,
        reverse=True,
    )


def week_start(today: date) -> date:
    return today - timedelta(days=WEEK_WINDOW_DAYS)


def weekly_window(
    transactions: Iterable[TransactionRecord], today: date
) -> list[TransactionRecord]:
    since = week_start(today)
    recent = [
        txn
        for txn in transactions
        if txn.created_date is not None and txn.created_date >= since
    ]
    return _newest_first(recent)


def total_last_7_days(transactions: Iterable[TransactionRecord], today: date) -> float:
    return total_spent(weekly_window(transactions, today))


def month_transactions(
    transactions: Iterable[TransactionRecord], today: date
) -> list[TransactionRecord]:
    return [
        txn
        for txn in transactions
        if txn.created_date is not None
        and txn.created_date.year == today.year
        and txn.created_date.month == today.month
    ]


def budget_summary(user: UserRecord, transactions: Iterable[TransactionRecord]) -> str:
    spent = total_spent(transactions)
    return (
        f"Budget Summary for {user.username}:\n"
        f"Total Budget: ${user.budget:.2f}\n"
        f"Total Spent: ${spent:.2f}\n"
        f"Remaining: ${user.budget - spent:.2f}"
    )


def monthly_summary(
    user: UserRecord,
    transactions: Iterable[TransactionRecord],
    today: Optional[date] = None,
) -> str:
    today = today or local_now().date()
    in_month = month_transactions(transactions, today)
    spent = total_spent(in_month)
    month_name = calendar.month_name[today.month].upper()

    lines = [
        f"Monthly Summary for {user.username} ({month_name} {today.year})",
        "",
        f"Total Budget: ${user.budget:.2f}",
        f"Total Spent: ${spent:.2f}",
        f"Remaining: ${user.budget - spent:.2f}",
        "",
        "Spending by Category:",
    ]
    for category, amount in ranked_breakdown(category_breakdown(in_month)):
        lines.append(f"- {category}: ${amount:.2f}")
    return "\n".join(lines) + "\n"
