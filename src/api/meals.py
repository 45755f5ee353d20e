"""Meal completion API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status

from src.schemas.inventory import MealCompletionResponse
from src.schemas.meal_plan import MealCompletionRequest
from src.services.inventory_matcher import match_completed_meal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["meals"])


@router.post("/meals/complete/match", response_model=MealCompletionResponse)
def match_meal_completion(request: MealCompletionRequest):
    """Pair a finished meal's ingredients with the inventory records they consume.

    Unmatched ingredients come back with match_type "none" so the caller can
    ask the user to pick a record by hand and resend it in ``selections``.
    Records created during completion go in ``added_items``.
    """
    entry = request.entry
    if entry.recipe is None and entry.simple_meal is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Meal entry has neither a recipe nor a simple meal",
        )

    matches = match_completed_meal(
        entry,
        request.inventory,
        request.completion_percentage,
        added_items=request.added_items,
        selections=request.selections,
    )

    matched = sum(1 for m in matches if m.inventory_item is not None)
    logger.info(f"Meal completion ({entry.entry_type}): {matched}/{len(matches)} matched")
    return MealCompletionResponse(
        matches=matches,
        matched=matched,
        unmatched=len(matches) - matched,
    )
