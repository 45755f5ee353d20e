"""Shopping list API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import (
    get_consolidator,
    get_current_user_id,
    get_optional_user_id,
    get_shopping_list_service,
)
from src.config import get_settings
from src.models.enums import CategoryTag
from src.schemas.meal_plan import GenerateShoppingListRequest
from src.schemas.shopping import (
    ConsolidateRequest,
    ExportTextRequest,
    FilterListRequest,
    MoveItemRequest,
    ResolvedItem,
    SelectInventoryRequest,
    ShoppingListOptions,
    ShoppingListResult,
    ShoppingListTextResponse,
    TogglePurchasedRequest,
)
from src.services.consolidator import Consolidator
from src.services.shopping_list_service import ShoppingListService

router = APIRouter(prefix="/api/v1", tags=["shopping-lists"])


@router.post("/shopping-lists/generate", response_model=ShoppingListResult)
def generate_shopping_list(
    request: GenerateShoppingListRequest,
    service: Annotated[ShoppingListService, Depends(get_shopping_list_service)],
    user_id: Annotated[int | None, Depends(get_optional_user_id)],
):
    """Build a categorized shopping list from meal plan entries and the inventory."""
    settings = get_settings()
    options = request.options or ShoppingListOptions(
        check_inventory=settings.default_check_inventory,
        combine_ingredients=settings.default_combine_ingredients,
    )
    return service.build_shopping_list(
        request.entries,
        request.inventory,
        options,
        previous=request.previous,
        user_id=user_id,
    )


@router.post("/shopping-lists/consolidate", response_model=dict[CategoryTag, list[ResolvedItem]])
def consolidate_entries(
    request: ConsolidateRequest,
    consolidator: Annotated[Consolidator, Depends(get_consolidator)],
    user_id: Annotated[int | None, Depends(get_optional_user_id)],
):
    """Merge entries of any supported shape into categorized items."""
    return consolidator.consolidate(request.entries, user_id=user_id)


@router.post("/shopping-lists/move-item", response_model=ShoppingListResult)
def move_item(
    request: MoveItemRequest,
    service: Annotated[ShoppingListService, Depends(get_shopping_list_service)],
    user_id: Annotated[int, Depends(get_current_user_id)],
):
    """Move an item to another category and remember the choice."""
    result = request.result
    moved = service.move_item(
        result,
        request.normalized_key,
        request.from_category,
        request.to_category,
        user_id=user_id,
        occurrence=request.occurrence,
    )
    if moved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return result


@router.post("/shopping-lists/toggle-purchased", response_model=ShoppingListResult)
def toggle_purchased(
    request: TogglePurchasedRequest,
    service: Annotated[ShoppingListService, Depends(get_shopping_list_service)],
):
    """Flip the purchased flag of one item."""
    result = request.result
    toggled = service.toggle_purchased(
        result, request.normalized_key, request.category, occurrence=request.occurrence
    )
    if toggled is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return result


@router.post("/shopping-lists/select-inventory", response_model=ShoppingListResult)
def select_inventory_item(
    request: SelectInventoryRequest,
    service: Annotated[ShoppingListService, Depends(get_shopping_list_service)],
):
    """Link an item to an inventory record picked by hand; a null record clears it."""
    result = request.result
    selected = service.select_inventory_item(
        result,
        request.normalized_key,
        request.record,
        category=request.category,
        occurrence=request.occurrence,
    )
    if selected is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return result


@router.post("/shopping-lists/mark-all-purchased", response_model=ShoppingListResult)
def mark_all_purchased(
    result: ShoppingListResult,
    service: Annotated[ShoppingListService, Depends(get_shopping_list_service)],
):
    """Mark every item purchased."""
    return service.mark_all_purchased(result)


@router.post("/shopping-lists/clear-purchased", response_model=ShoppingListResult)
def clear_purchased(
    result: ShoppingListResult,
    service: Annotated[ShoppingListService, Depends(get_shopping_list_service)],
):
    """Reset every purchased flag."""
    return service.clear_purchased(result)


@router.post("/shopping-lists/filter", response_model=dict[CategoryTag, list[ResolvedItem]])
def filter_items(request: FilterListRequest):
    """Items for one view of the list (all, need_to_buy, in_inventory, purchased)."""
    return ShoppingListService.filter_items(request.result, request.view)


@router.post("/shopping-lists/export-text", response_model=ShoppingListTextResponse)
def export_text(request: ExportTextRequest):
    """Plain-text rendering of a list."""
    return ShoppingListTextResponse(text=ShoppingListService.render_text(request.result, request.title))
