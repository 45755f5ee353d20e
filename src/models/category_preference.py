"""User category preference model for learned category overrides."""

from sqlalchemy import Column, Integer, String, UniqueConstraint

from src.database import Base, TimestampMixin


class UserCategoryPreference(Base, TimestampMixin):
    """A category a user assigned by hand to a normalized ingredient name.

    Rows are written the first time a user moves an item to a different
    category and are consulted before rule-based classification. They never
    expire; a later move for the same name overwrites the stored category.
    """

    __tablename__ = "user_category_preferences"
    __table_args__ = (
        UniqueConstraint("user_id", "normalized_key", name="uq_user_category_preference"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    normalized_key = Column(String(255), nullable=False, index=True)
    category = Column(String(50), nullable=False)  # CategoryTag value
