"""SQLAlchemy models."""

from src.models.category_preference import UserCategoryPreference

__all__ = [
    "UserCategoryPreference",
]
