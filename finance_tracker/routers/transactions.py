from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from finance_tracker.core.config import settings
from finance_tracker.core.rate_limit import LIMIT_MESSAGE, limiter
from finance_tracker.db.base import Storage
from finance_tracker.db.dynamo import get_storage
from finance_tracker.models.category import TransactionType
from finance_tracker.models.transaction import (
    SortField,
    SortOrder,
    TransactionCreate,
    TransactionFilters,
    TransactionPage,
    TransactionUpdate,
    TransactionWithCategory,
)
from finance_tracker.models.user import UserInDB
from finance_tracker.routers.deps import can_write, get_current_user

router = APIRouter()
# One budget across every limited transaction route, per client
transaction_limit = limiter.shared_limit(
    settings.TRANSACTION_RATE_LIMIT, scope="transactions", error_message=LIMIT_MESSAGE
)


@router.get("", response_model=TransactionPage)
@transaction_limit
def list_transactions(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = None,
    category_id: Optional[str] = None,
    type: Optional[TransactionType] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    sort_by: SortField = SortField.DATE,
    sort_order: SortOrder = SortOrder.DESC,
    user: UserInDB = Depends(get_current_user),
    store: Storage = Depends(get_storage),
):
    """
    Page through the caller's transactions.

    Filters combine with AND; ``search`` is a case-insensitive match on the
    description and ``date_from``/``date_to`` are inclusive.
    """
    filters = TransactionFilters(
        page=page,
        limit=limit,
        search=search or None,
        category_id=category_id or None,
        type=type,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return store.query_transactions(user.user_id, filters)


@router.get("/{transaction_id}", response_model=TransactionWithCategory)
def get_transaction(
    transaction_id: str,
    user: UserInDB = Depends(get_current_user),
    store: Storage = Depends(get_storage),
):
    return store.get_transaction(user.user_id, transaction_id)


@router.post("", response_model=TransactionWithCategory, status_code=status.HTTP_201_CREATED)
@transaction_limit
def create_transaction(
    request: Request,
    transaction: TransactionCreate,
    user: UserInDB = Depends(can_write),
    store: Storage = Depends(get_storage),
):
    return store.create_transaction(user.user_id, transaction)


@router.put("/{transaction_id}", response_model=TransactionWithCategory)
@transaction_limit
def update_transaction(
    request: Request,
    transaction_id: str,
    transaction_update: TransactionUpdate,
    user: UserInDB = Depends(can_write),
    store: Storage = Depends(get_storage),
):
    return store.update_transaction(user.user_id, transaction_id, transaction_update)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
@transaction_limit
def delete_transaction(
    request: Request,
    transaction_id: str,
    user: UserInDB = Depends(can_write),
    store: Storage = Depends(get_storage),
):
    store.delete_transaction(user.user_id, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
