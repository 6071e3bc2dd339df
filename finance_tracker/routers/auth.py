import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from finance_tracker.core.config import settings
from finance_tracker.core.rate_limit import AUTH_LIMIT_MESSAGE, limiter
from finance_tracker.core.security import create_access_token, get_password_hash, verify_password
from finance_tracker.db.base import Storage
from finance_tracker.db.dynamo import get_storage
from finance_tracker.models.user import TokenResponse, UserCreate, UserInDB, UserLogin, UserPublic, UserRole
from finance_tracker.routers.deps import get_current_user

router = APIRouter()
logger = logging.getLogger(__name__)


def _token_response(user: UserInDB) -> TokenResponse:
    access_token = create_access_token(
        data={"sub": user.user_id, "email": user.email, "role": user.role.value},
        config=settings,
    )
    return TokenResponse(access_token=access_token, user=UserPublic(**user.model_dump()))


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT, error_message=AUTH_LIMIT_MESSAGE)
def register(request: Request, user: UserCreate, store: Storage = Depends(get_storage)):
    if store.get_user_by_email(user.email):
        raise HTTPException(status_code=400, detail="User already exists")
    if store.get_user_by_username(user.username):
        raise HTTPException(status_code=400, detail="Username already taken")

    # Self-registration never grants elevated roles.
    user_db = UserInDB(
        username=user.username,
        email=user.email,
        name=user.name,
        role=UserRole.USER,
        password_hash=get_password_hash(user.password),
    )
    store.put_user(user_db)
    logger.info(f"Registered user {user_db.user_id}")
    return _token_response(user_db)


@router.post("/login", response_model=TokenResponse)
def login(login_data: UserLogin, store: Storage = Depends(get_storage)):
    logger.info(f"Login attempt for email: {login_data.email}")
    user = store.get_user_by_email(login_data.email)

    if not user or not verify_password(login_data.password, user.password_hash):
        logger.warning(f"Invalid credentials for: {login_data.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return _token_response(user)


@router.get("/me", response_model=UserPublic)
def get_me(user: UserInDB = Depends(get_current_user)):
    """Get current user profile"""
    return UserPublic(**user.model_dump())
