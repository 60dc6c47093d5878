"""
Wrestler API Routes - roster CRUD with relation-aware search and filtering.

Saving a wrestler replaces all of its promotion, faction and championship
links with the selection in the request body.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.dependencies import get_roster_service
from app.schemas import FilterOptions, MessageResponse, WrestlerForm, WrestlerRead
from app.services.query_filters import WrestlerFilter, filter_options, filter_wrestlers
from app.services.roster_service import RosterService
from app.utils.logger import setup_logger

logger = setup_logger("api.wrestlers")

router = APIRouter(prefix="/api/wrestlers", tags=["Wrestlers"])


@router.get("", response_model=list[WrestlerRead])
async def list_wrestlers(
    search: str | None = Query(None, description="Case-insensitive name search"),
    promotion: list[str] | None = Query(None, description="Promotion names"),
    faction: list[str] | None = Query(None, description="Faction names"),
    championship: list[str] | None = Query(None, description="Championship names"),
    roster: RosterService = Depends(get_roster_service),
):
    """
    List wrestlers with their relations.

    A wrestler is returned when its name matches ``search`` and, for every
    relation filter given, it holds at least one of the named entities.
    """
    wrestlers = await roster.list_wrestlers()
    wrestler_filter = WrestlerFilter.from_lists(promotion, faction, championship)
    result = filter_wrestlers(wrestlers, search, wrestler_filter)
    logger.debug(f"{len(result)} of {len(wrestlers)} wrestlers match")
    return result


@router.get("/filters", response_model=FilterOptions)
async def get_filter_options(roster: RosterService = Depends(get_roster_service)):
    """Relation names present on the current roster, for the filter dialog."""
    return FilterOptions(**filter_options(await roster.list_wrestlers()))


@router.get("/{wrestler_id}", response_model=WrestlerRead)
async def get_wrestler(
    wrestler_id: int, roster: RosterService = Depends(get_roster_service)
):
    wrestler = await roster.get_wrestler(wrestler_id)
    if wrestler is None:
        raise HTTPException(status_code=404, detail="Wrestler not found")
    return wrestler


@router.post("", response_model=WrestlerRead, status_code=status.HTTP_201_CREATED)
async def create_wrestler(
    form: WrestlerForm, roster: RosterService = Depends(get_roster_service)
):
    wrestler = await roster.create_wrestler(form)
    if wrestler is None:
        raise HTTPException(status_code=500, detail="Failed to create wrestler")
    return wrestler


@router.put("/{wrestler_id}", response_model=WrestlerRead)
async def update_wrestler(
    wrestler_id: int,
    form: WrestlerForm,
    roster: RosterService = Depends(get_roster_service),
):
    wrestler = await roster.update_wrestler(wrestler_id, form)
    if wrestler is None:
        raise HTTPException(status_code=500, detail="Failed to update wrestler")
    return wrestler


@router.delete("/{wrestler_id}", response_model=MessageResponse)
async def delete_wrestler(
    wrestler_id: int, roster: RosterService = Depends(get_roster_service)
):
    if not await roster.delete_wrestler(wrestler_id):
        raise HTTPException(status_code=500, detail="Failed to delete wrestler")
    return MessageResponse(message=f"Wrestler {wrestler_id} deleted")
