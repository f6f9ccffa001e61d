import uuid
from datetime import date, datetime, timedelta

import analytics
from schemas import TransactionRecord, UserRecord

USER_ID = uuid.uuid4()
TODAY = date(2026, 10, 19)


def _txn(amount: float, category: str = "FOOD", days_ago: int = 0) -> TransactionRecord:
    created = datetime.combine(TODAY - timedelta(days=days_ago), datetime.min.time())
    return TransactionRecord(
        id=uuid.uuid4(),
        user_id=USER_ID,
        description="Entry",
        amount=amount,
        category=category,
        created_time=created,
        created_date=created.date(),
    )


def _user(budget: float) -> UserRecord:
    return UserRecord(id=USER_ID, username="alice", email="alice@example.com", budget=budget)


def test_total_spent_counts_only_positive_amounts() -> None:
    assert analytics.total_spent([]) == 0.0

    spends = [_txn(10.0), _txn(2.5)]
    assert analytics.total_spent(spends) == 12.5
    assert analytics.total_spent(spends + [_txn(-4.0), _txn(0.0)]) == 12.5


def test_remaining_and_near_limit_warning() -> None:
    user = _user(100.0)
    transactions = [_txn(95.0)]

    left = analytics.remaining(user, transactions)
    text = analytics.warnings(user, transactions)

    assert left == 5.0
    assert analytics.is_over_budget(left) is False
    assert "near" in text
    assert "5.00" in text


def test_over_budget_warning_takes_precedence() -> None:
    user = _user(50.0)
    transactions = [_txn(75.0)]

    left = analytics.remaining(user, transactions)
    text = analytics.warnings(user, transactions)

    assert left == -25.0
    assert analytics.is_over_budget(left) is True
    assert "OVER BUDGET" in text
    assert "25.00" in text
    assert "near" not in text


def test_no_warning_with_comfortable_margin() -> None:
    assert analytics.warnings(_user(100.0), [_txn(40.0)]) == ""
    assert analytics.warnings(_user(0.0), []) == ""


def test_category_breakdown_sums_per_category() -> None:
    transactions = [_txn(10.0, "FOOD"), _txn(30.0, "TRAVEL"), _txn(5.0, "FOOD"), _txn(-2.0, "FOOD")]

    breakdown = analytics.category_breakdown(transactions)

    assert breakdown == {"FOOD": 15.0, "TRAVEL": 30.0}
    assert analytics.ranked_breakdown(breakdown) == [("TRAVEL", 30.0), ("FOOD", 15.0)]


def test_weekly_window_is_newest_first_and_bounded() -> None:
    newest = _txn(1.0, days_ago=0)
    middle = _txn(2.0, days_ago=3)
    edge = _txn(3.0, days_ago=7)
    stale = _txn(4.0, days_ago=8)
    undated = _txn(5.0).model_copy(update={"created_date": None})

    window = analytics.weekly_window([edge, stale, newest, undated, middle], TODAY)

    assert [t.amount for t in window] == [1.0, 2.0, 3.0]


def test_total_last_7_days_over_window() -> None:
    transactions = [_txn(10.0, days_ago=1), _txn(1.0, days_ago=2), _txn(15.0, days_ago=6)]

    assert analytics.total_last_7_days(transactions, TODAY) == 26.0
    assert analytics.total_last_7_days([], TODAY) == 0.0


def test_monthly_summary_filters_to_current_month() -> None:
    user = _user(200.0)
    transactions = [
        _txn(20.0, "FOOD", days_ago=0),
        _txn(50.0, "TRAVEL", days_ago=2),
        _txn(5.0, "FOOD", days_ago=5),
        _txn(99.0, "SHOPPING", days_ago=30),
        _txn(7.0, "OTHER").model_copy(update={"created_date": None}),
    ]

    text = analytics.monthly_summary(user, transactions, TODAY)

    assert text.startswith("Monthly Summary for alice (OCTOBER 2026)")
    assert "Total Budget: $200.00" in text
    assert "Total Spent: $75.00" in text
    assert "Remaining: $125.00" in text
    assert "SHOPPING" not in text
    assert "OTHER" not in text
    assert text.index("- TRAVEL: $50.00") < text.index("- FOOD: $25.00")


def test_monthly_summary_ignores_insertion_order() -> None:
    user = _user(100.0)
    transactions = [_txn(3.0, "FOOD"), _txn(4.0, "UTILITIES"), _txn(6.0, "FOOD")]

    forward = analytics.monthly_summary(user, transactions, TODAY)
    backward = analytics.monthly_summary(user, list(reversed(transactions)), TODAY)

    assert forward == backward
    assert "- FOOD: $9.00" in forward


def test_budget_summary_text() -> None:
    text = analytics.budget_summary(_user(100.0), [_txn(30.0)])

    assert text == (
        "Budget Summary for alice:\n"
        "Total Budget: $100.00\n"
        "Total Spent: $30.00\n"
        "Remaining: $70.00"
    )
