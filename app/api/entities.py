"""
Entity API Routes - promotions, factions and championships.

The three screens are identical apart from the entity kind, so one router
factory builds all of them. Lists come with wrestler counts and are
searched and sorted in memory after a single load.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.dependencies import get_roster_service
from app.models.kinds import RelationKind
from app.schemas import (
    ChampionshipRead,
    EntityForm,
    FactionRead,
    MessageResponse,
    PromotionRead,
    WrestlerRead,
)
from app.services.query_filters import SortOrder, search_by_name, sort_entities
from app.services.roster_service import COUNT_MODELS, RosterService
from app.utils.logger import setup_logger

logger = setup_logger("api.entities")

READ_MODELS = {
    RelationKind.PROMOTION: PromotionRead,
    RelationKind.FACTION: FactionRead,
    RelationKind.CHAMPIONSHIP: ChampionshipRead,
}


def build_entity_router(kind: RelationKind) -> APIRouter:
    label = kind.value
    read_model = READ_MODELS[kind]
    router = APIRouter(prefix=f"/api/{kind.field}", tags=[kind.field.capitalize()])

    @router.get("", response_model=list[COUNT_MODELS[kind]])
    async def list_entities(
        search: str | None = Query(None, description="Case-insensitive name search"),
        sort: SortOrder = Query(SortOrder.NAME, description="'name' or 'count'"),
        roster: RosterService = Depends(get_roster_service),
    ):
        entities = await roster.list_with_counts(kind)
        return sort_entities(search_by_name(entities, search), sort)

    @router.get("/{entity_id}", response_model=read_model)
    async def get_entity(
        entity_id: int, roster: RosterService = Depends(get_roster_service)
    ):
        entity = await roster.store(kind.entity_kind).get(entity_id)
        if entity is None:
            raise HTTPException(status_code=404, detail=f"{label.capitalize()} not found")
        return entity

    @router.post("", response_model=read_model, status_code=status.HTTP_201_CREATED)
    async def create_entity(
        form: EntityForm, roster: RosterService = Depends(get_roster_service)
    ):
        entity = await roster.create_entity(kind.entity_kind, form)
        if entity is None:
            raise HTTPException(status_code=500, detail=f"Failed to create {label}")
        return entity

    @router.put("/{entity_id}", response_model=read_model)
    async def update_entity(
        entity_id: int,
        form: EntityForm,
        roster: RosterService = Depends(get_roster_service),
    ):
        entity = await roster.update_entity(kind.entity_kind, entity_id, form)
        if entity is None:
            raise HTTPException(status_code=500, detail=f"Failed to update {label}")
        return entity

    @router.delete("/{entity_id}", response_model=MessageResponse)
    async def delete_entity(
        entity_id: int, roster: RosterService = Depends(get_roster_service)
    ):
        if not await roster.delete_entity(kind.entity_kind, entity_id):
            raise HTTPException(status_code=500, detail=f"Failed to delete {label}")
        return MessageResponse(message=f"{label.capitalize()} {entity_id} deleted")

    @router.get("/{entity_id}/wrestlers", response_model=list[WrestlerRead])
    async def get_entity_wrestlers(
        entity_id: int, roster: RosterService = Depends(get_roster_service)
    ):
        return await roster.wrestlers_for(kind, entity_id)

    return router


promotions_router = build_entity_router(RelationKind.PROMOTION)
factions_router = build_entity_router(RelationKind.FACTION)
championships_router = build_entity_router(RelationKind.CHAMPIONSHIP)
