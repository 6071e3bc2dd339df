from typing import List

from fastapi import APIRouter, Depends

from finance_tracker.db.base import Storage
from finance_tracker.db.dynamo import get_storage
from finance_tracker.models.user import UserInDB, UserPublic
from finance_tracker.routers.deps import admin_only

router = APIRouter()


@router.get("/users", response_model=List[UserPublic])
def list_users(
    _: UserInDB = Depends(admin_only),
    store: Storage = Depends(get_storage),
):
    return [UserPublic(**u.model_dump()) for u in store.list_users()]
