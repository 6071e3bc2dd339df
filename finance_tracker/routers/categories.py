from typing import List

from fastapi import APIRouter, Depends, status

from finance_tracker.db.base import Storage
from finance_tracker.db.dynamo import get_storage
from finance_tracker.models.category import CategoryCreate, CategoryPublic
from finance_tracker.models.user import UserInDB
from finance_tracker.routers.deps import admin_only, get_current_user

router = APIRouter()


@router.get("", response_model=List[CategoryPublic])
def list_categories(
    _: UserInDB = Depends(get_current_user),
    store: Storage = Depends(get_storage),
):
    return [CategoryPublic(**c.model_dump()) for c in store.list_categories()]


@router.post("", response_model=CategoryPublic, status_code=status.HTTP_201_CREATED)
def create_category(
    category: CategoryCreate,
    _: UserInDB = Depends(admin_only),
    store: Storage = Depends(get_storage),
):
    created = store.create_category(category)
    return CategoryPublic(**created.model_dump())
