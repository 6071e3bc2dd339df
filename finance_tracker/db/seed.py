"""First-run data: the default category catalog and three demo accounts."""
import logging

from finance_tracker.core.security import get_password_hash
from finance_tracker.db.base import Storage
from finance_tracker.models.category import CategoryCreate, TransactionType
from finance_tracker.models.user import UserInDB, UserRole

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Food & Dining", "icon": "fas fa-utensils", "color": "#ef4444", "type": TransactionType.EXPENSE},
    {"name": "Transportation", "icon": "fas fa-car", "color": "#f97316", "type": TransactionType.EXPENSE},
    {"name": "Entertainment", "icon": "fas fa-film", "color": "#8b5cf6", "type": TransactionType.EXPENSE},
    {"name": "Shopping", "icon": "fas fa-shopping-bag", "color": "#ec4899", "type": TransactionType.EXPENSE},
    {"name": "Utilities", "icon": "fas fa-bolt", "color": "#06b6d4", "type": TransactionType.EXPENSE},
    {"name": "Healthcare", "icon": "fas fa-heart", "color": "#10b981", "type": TransactionType.EXPENSE},
    {"name": "Education", "icon": "fas fa-graduation-cap", "color": "#3b82f6", "type": TransactionType.EXPENSE},
    {"name": "Salary", "icon": "fas fa-dollar-sign", "color": "#22c55e", "type": TransactionType.INCOME},
    {"name": "Freelance", "icon": "fas fa-laptop", "color": "#84cc16", "type": TransactionType.INCOME},
    {"name": "Investment", "icon": "fas fa-chart-line", "color": "#f59e0b", "type": TransactionType.INCOME},
    {"name": "Other", "icon": "fas fa-ellipsis-h", "color": "#6b7280", "type": TransactionType.EXPENSE},
]

DEMO_USERS = [
    {"username": "admin", "email": "admin@demo.com", "password": "admin123", "name": "Admin User", "role": UserRole.ADMIN},
    {"username": "user", "email": "user@demo.com", "password": "user123", "name": "Demo User", "role": UserRole.USER},
    {"username": "readonly", "email": "readonly@demo.com", "password": "readonly123", "name": "Read Only", "role": UserRole.READ_ONLY},
]


def seed_default_categories(store: Storage) -> int:
    """Create the default catalog if no category exists yet. Returns how many were created."""
    if store.list_categories():
        return 0
    for data in DEFAULT_CATEGORIES:
        store.create_category(CategoryCreate(**data))
    logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")
    return len(DEFAULT_CATEGORIES)


def seed_demo_users(store: Storage) -> int:
    created = 0
    for data in DEMO_USERS:
        if store.get_user_by_email(data["email"]):
            continue
        store.put_user(
            UserInDB(
                username=data["username"],
                email=data["email"],
                name=data["name"],
                role=data["role"],
                password_hash=get_password_hash(data["password"]),
            )
        )
        created += 1
    if created:
        logger.info(f"Seeded {created} demo users")
    return created
