"""
Filtering, sorting and pagination of a user's transactions.

Operates on the user's full transaction list as returned by the store, so the
same code serves every storage backend.
"""
from typing import Dict, Iterable, List, Tuple

from finance_tracker.models.category import CategoryInDB, CategoryPublic
from finance_tracker.models.transaction import (
    SortField,
    SortOrder,
    TransactionFilters,
    TransactionInDB,
    TransactionWithCategory,
)


def with_category(txn: TransactionInDB, category: CategoryInDB) -> TransactionWithCategory:
    return TransactionWithCategory(
        **txn.model_dump(exclude={"user_id"}),
        category=CategoryPublic(**category.model_dump()),
    )


def matches(txn: TransactionInDB, filters: TransactionFilters) -> bool:
    if filters.search and filters.search.lower() not in txn.description.lower():
        return False
    if filters.category_id and txn.category_id != filters.category_id:
        return False
    if filters.type and txn.type != filters.type:
        return False
    if filters.date_from and txn.date < filters.date_from:
        return False
    if filters.date_to and txn.date > filters.date_to:
        return False
    return True


def query_transactions(
    transactions: Iterable[TransactionInDB],
    categories: Iterable[CategoryInDB],
    filters: TransactionFilters,
) -> Tuple[List[TransactionWithCategory], int]:
    """
    Apply ``filters`` and return one page of results plus the total match count.

    Transactions whose category no longer resolves are dropped before counting.
    Sorting is stable on top of insertion order, so equal dates or amounts
    always come back in the order they were recorded.
    """
    category_map: Dict[str, CategoryInDB] = {c.category_id: c for c in categories}

    selected = [
        txn
        for txn in sorted(transactions, key=lambda t: (t.created_at, t.transaction_id))
        if txn.category_id in category_map and matches(txn, filters)
    ]

    if filters.sort_by == SortField.AMOUNT:
        sort_key = lambda t: t.amount  # noqa: E731
    else:
        sort_key = lambda t: t.date  # noqa: E731
    selected = sorted(selected, key=sort_key, reverse=filters.sort_order == SortOrder.DESC)

    offset = (filters.page - 1) * filters.limit
    page = selected[offset:offset + filters.limit]
    return [with_category(txn, category_map[txn.category_id]) for txn in page], len(selected)
