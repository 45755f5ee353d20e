"""Inventory matching API endpoints."""

from fastapi import APIRouter

from src.schemas.inventory import InventoryMatchRequest, InventoryMatchResponse
from src.services.inventory_matcher import candidate_matches, find_best_match
from src.services.normalizer import normalize

router = APIRouter(prefix="/api/v1", tags=["inventory"])


@router.post("/inventory/match", response_model=InventoryMatchResponse)
def match_inventory(request: InventoryMatchRequest):
    """Find the inventory record for a name, plus every candidate for manual selection."""
    key = normalize(request.name)
    match = find_best_match(key, request.inventory)
    return InventoryMatchResponse(
        normalized_key=key,
        match=match,
        candidates=candidate_matches(key, request.inventory),
        needs_manual_selection=match is None,
    )
