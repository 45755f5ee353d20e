"""Category classification and preference API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.dependencies import (
    get_classifier,
    get_current_user_id,
    get_optional_user_id,
    get_preference_store,
)
from src.models.enums import CategoryTag
from src.schemas.category import (
    CategoryPreferenceResponse,
    CategoryPreferenceUpdate,
    ClassifyRequest,
    ClassifyResponse,
)
from src.services.categorization import CategoryClassifier
from src.services.normalizer import normalize
from src.services.preference_store import PreferenceStore

router = APIRouter(prefix="/api/v1", tags=["categories"])


@router.post("/categories/classify", response_model=ClassifyResponse)
def classify_item(
    request: ClassifyRequest,
    classifier: Annotated[CategoryClassifier, Depends(get_classifier)],
    user_id: Annotated[int | None, Depends(get_optional_user_id)],
):
    """Classify an item name, honouring the caller's saved preferences."""
    return classifier.categorize_item(
        request.name,
        category_hint=request.category_hint,
        brand=request.brand,
        user_id=user_id,
    )


@router.get("/categories/preferences", response_model=dict[str, CategoryTag])
def list_preferences(
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[PreferenceStore, Depends(get_preference_store)],
):
    """Get the caller's saved category preferences as {normalized_key: category}."""
    return store.all_for_user(user_id)


@router.put("/categories/preferences", response_model=CategoryPreferenceResponse)
def set_preference(
    update: CategoryPreferenceUpdate,
    user_id: Annotated[int, Depends(get_current_user_id)],
    classifier: Annotated[CategoryClassifier, Depends(get_classifier)],
):
    """Save a category for an item name."""
    try:
        key = classifier.record_preference(user_id, update.name, update.category)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return CategoryPreferenceResponse(normalized_key=key, category=update.category)


@router.delete("/categories/preferences/{key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_preference(
    key: str,
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[PreferenceStore, Depends(get_preference_store)],
):
    """Forget a saved preference."""
    if not store.delete(user_id, normalize(key)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preference not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
