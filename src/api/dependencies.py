"""FastAPI dependencies for the caller identity, database and services."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from src.database import get_db
from src.services.categorization import CategoryClassifier
from src.services.consolidator import Consolidator
from src.services.preference_store import PreferenceStore, SqlAlchemyPreferenceStore
from src.services.shopping_list_service import ShoppingListService


def get_optional_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> int | None:
    """User id from the X-User-Id header, or None when the caller is anonymous."""
    if x_user_id is None or not x_user_id.strip():
        return None
    try:
        return int(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Id header must be an integer",
        ) from None


def get_current_user_id(
    user_id: Annotated[int | None, Depends(get_optional_user_id)],
) -> int:
    """User id for endpoints that read or write per-user preferences."""
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return user_id


def get_preference_store(
    db: Annotated[Session, Depends(get_db)],
) -> PreferenceStore:
    """Get preference store backed by the database session."""
    return SqlAlchemyPreferenceStore(db)


def get_classifier(
    store: Annotated[PreferenceStore, Depends(get_preference_store)],
) -> CategoryClassifier:
    """Get category classifier with the user preference store."""
    return CategoryClassifier(store)


def get_consolidator(
    classifier: Annotated[CategoryClassifier, Depends(get_classifier)],
) -> Consolidator:
    """Get consolidator with dependencies."""
    return Consolidator(classifier)


def get_shopping_list_service(
    classifier: Annotated[CategoryClassifier, Depends(get_classifier)],
    consolidator: Annotated[Consolidator, Depends(get_consolidator)],
) -> ShoppingListService:
    """Get shopping list service with dependencies."""
    return ShoppingListService(classifier, consolidator)
