"""
finance_tracker
~~~~~~~~~~~~~~~

Personal finance tracking API. Authenticated users record income and expense
transactions against a shared category catalog, query them with filters and
pagination, and read an analytics snapshot (balances, month-over-month
changes, category breakdown and a six month trend).
"""

__version__ = "1.0.0"
