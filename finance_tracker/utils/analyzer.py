from __future__ import annotations

import calendar
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from finance_tracker.models.analytics import AnalyticsData, CategoryBreakdownItem, MonthlyTrendPoint
from finance_tracker.models.category import CategoryInDB, TransactionType
from finance_tracker.models.transaction import TransactionInDB, to_utc, utcnow

if TYPE_CHECKING:
    from finance_tracker.db.base import Storage

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")
TREND_MONTHS = 6


def month_start(moment: datetime) -> datetime:
    """First instant of ``moment``'s calendar month, in UTC."""
    return to_utc(moment).replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def shift_months(start: datetime, months: int) -> datetime:
    # Only ever called with day=1, so every target month is valid.
    index = start.year * 12 + (start.month - 1) + months
    return start.replace(year=index // 12, month=index % 12 + 1)


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class MonthWindow:
    """Half-open date range ``[start, end)``; ``end=None`` means no upper bound."""

    start: datetime
    end: Optional[datetime] = None

    @classmethod
    def calendar_month(cls, start: datetime) -> "MonthWindow":
        return cls(start, shift_months(start, 1))

    def contains(self, moment: datetime) -> bool:
        return moment >= self.start and (self.end is None or moment < self.end)


@dataclass(frozen=True)
class PeriodTotals:
    income: Decimal = ZERO
    expenses: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses

    @property
    def savings_rate(self) -> Decimal:
        if self.income <= 0:
            return ZERO
        return self.net / self.income * HUNDRED


class AnalyticsAggregator:
    """
    Pure analytics over one user's transactions.

    Every sum is carried as ``Decimal``; values are only rounded (to cents,
    half-up) when they are placed into the returned ``AnalyticsData``.
    """

    def __init__(self, trend_months: int = TREND_MONTHS) -> None:
        self._trend_months = trend_months

    def totals(
        self,
        transactions: Iterable[TransactionInDB],
        window: Optional[MonthWindow] = None,
    ) -> PeriodTotals:
        income = ZERO
        expenses = ZERO
        for txn in transactions:
            if window is not None and not window.contains(txn.date):
                continue
            if txn.type == TransactionType.INCOME:
                income += txn.amount
            else:
                expenses += txn.amount
        return PeriodTotals(income=income, expenses=expenses)

    @staticmethod
    def percent_change(current: Decimal, previous: Decimal) -> Decimal:
        if previous <= 0:
            return ZERO
        return (current - previous) / previous * HUNDRED

    @staticmethod
    def balance_change(closing: Decimal, opening: Decimal) -> Decimal:
        """Change of the running balance over the current month, relative to where it opened."""
        if opening == 0:
            return ZERO
        return (closing - opening) / abs(opening) * HUNDRED

    def category_breakdown(
        self,
        transactions: Iterable[TransactionInDB],
        categories: Dict[str, CategoryInDB],
        window: MonthWindow,
    ) -> List[CategoryBreakdownItem]:
        totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in transactions:
            if txn.type != TransactionType.EXPENSE or not window.contains(txn.date):
                continue
            category = categories.get(txn.category_id)
            if category is None:
                logger.warning(
                    f"Transaction {txn.transaction_id} references unknown category {txn.category_id}; "
                    "left out of the category breakdown"
                )
                continue
            totals[category.name] += txn.amount

        grand_total = sum(totals.values(), ZERO)
        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        return [
            CategoryBreakdownItem(
                category=name,
                amount=quantize(amount),
                percentage=quantize(amount / grand_total * HUNDRED) if grand_total > 0 else ZERO,
            )
            for name, amount in ranked
        ]

    def monthly_trends(
        self,
        transactions: List[TransactionInDB],
        now: datetime,
    ) -> List[MonthlyTrendPoint]:
        current_start = month_start(now)
        points: List[MonthlyTrendPoint] = []
        for offset in range(self._trend_months - 1, -1, -1):
            start = shift_months(current_start, -offset)
            period = self.totals(transactions, MonthWindow.calendar_month(start))
            points.append(
                MonthlyTrendPoint(
                    month=calendar.month_abbr[start.month],
                    income=quantize(period.income),
                    expenses=quantize(period.expenses),
                )
            )
        return points

    def summarize(
        self,
        transactions: Iterable[TransactionInDB],
        categories: Iterable[CategoryInDB],
        now: datetime,
    ) -> AnalyticsData:
        transactions = list(transactions)
        category_map = {category.category_id: category for category in categories}

        current_start = month_start(now)
        last_start = shift_months(current_start, -1)
        current_window = MonthWindow(current_start)
        last_window = MonthWindow(last_start, current_start)

        current = self.totals(transactions, current_window)
        last = self.totals(transactions, last_window)
        all_time = self.totals(transactions)
        opening = self.totals(
            txn for txn in transactions if txn.date < current_start
        )

        return AnalyticsData(
            total_balance=quantize(all_time.net),
            monthly_income=quantize(current.income),
            monthly_expenses=quantize(current.expenses),
            savings_rate=quantize(current.savings_rate),
            balance_change=quantize(self.balance_change(all_time.net, opening.net)),
            income_change=quantize(self.percent_change(current.income, last.income)),
            expense_change=quantize(self.percent_change(current.expenses, last.expenses)),
            savings_change=quantize(current.savings_rate - last.savings_rate),
            category_breakdown=self.category_breakdown(transactions, category_map, current_window),
            monthly_trends=self.monthly_trends(transactions, now),
        )


class AnalyticsStrategy(ABC):
    """How an analytics snapshot is produced for a user."""

    @abstractmethod
    def snapshot(self, user_id: str, now: Optional[datetime] = None) -> AnalyticsData:
        raise NotImplementedError


class FullRecomputeStrategy(AnalyticsStrategy):
    """Reads the user's whole transaction history and recomputes every figure."""

    def __init__(self, store: "Storage", aggregator: Optional[AnalyticsAggregator] = None) -> None:
        self._store = store
        self._aggregator = aggregator or AnalyticsAggregator()

    def snapshot(self, user_id: str, now: Optional[datetime] = None) -> AnalyticsData:
        now = now or utcnow()
        # Store failures propagate; a snapshot is either complete or not produced.
        transactions = self._store.list_transactions(user_id)
        categories = self._store.list_categories()
        logger.debug(f"Computing analytics for user {user_id} over {len(transactions)} transactions")
        return self._aggregator.summarize(transactions, categories, now)
