from decimal import Decimal
from typing import Annotated, List

from pydantic import BaseModel, PlainSerializer

# Aggregates are exact Decimals internally and plain JSON numbers on the wire.
Number = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CategoryBreakdownItem(BaseModel):
    category: str
    amount: Number
    percentage: Number


class MonthlyTrendPoint(BaseModel):
    month: str
    income: Number
    expenses: Number


class AnalyticsData(BaseModel):
    total_balance: Number
    monthly_income: Number
    monthly_expenses: Number
    savings_rate: Number
    balance_change: Number
    income_change: Number
    expense_change: Number
    savings_change: Number
    category_breakdown: List[CategoryBreakdownItem]
    monthly_trends: List[MonthlyTrendPoint]
