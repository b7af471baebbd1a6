"""
Catalog feature routes.

All endpoints are restricted to managers and admins.
"""
from typing import Annotated, List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.core.responses import ApiResponse
from app.features.catalogs.schemas import (
    CatalogCreate,
    CatalogUpdate,
    CatalogReorder,
    CatalogResponse,
    CatalogDeleted,
)
from app.features.catalogs.service import CatalogService
from app.features.permissions.dependencies import new_audit_log
from app.features.staff.dependencies import get_config_manager
from app.features.staff.schemas import Actor


router = APIRouter()


def get_catalog_service(db: Annotated[AsyncSession, Depends(get_db)]) -> CatalogService:
    return CatalogService(db)


@router.get("/{catalog_type}", response_model=ApiResponse[List[CatalogResponse]])
async def list_catalogs(
    catalog_type: str,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    actor: Annotated[Actor, Depends(get_config_manager)],
):
    """List active items of a catalog type in display order."""
    items = await service.get_catalogs_by_type(catalog_type)
    return ApiResponse(
        message="Catalogs retrieved successfully",
        data=[CatalogResponse.model_validate(item) for item in items],
    )


@router.post("/{catalog_type}", response_model=ApiResponse[CatalogResponse], status_code=status.HTTP_201_CREATED)
async def create_catalog(
    catalog_type: str,
    catalog_data: CatalogCreate,
    request: Request,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    actor: Annotated[Actor, Depends(get_config_manager)],
):
    """Create a new catalog item at the end of its type."""
    audit = new_audit_log(actor_id=actor.staff_id, action="create", resource_type="catalog", request=request)
    item = await service.create_catalog(catalog_type, catalog_data.value, actor.staff_id, audit=audit)

    return ApiResponse(message="Catalog created successfully", data=CatalogResponse.model_validate(item))


@router.put("/{catalog_type}/order", response_model=ApiResponse[List[CatalogResponse]])
async def reorder_catalogs(
    catalog_type: str,
    reorder_data: CatalogReorder,
    request: Request,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    actor: Annotated[Actor, Depends(get_config_manager)],
):
    """Rewrite the display order of every active item of a type."""
    audit = new_audit_log(actor_id=actor.staff_id, action="reorder", resource_type="catalog", request=request)
    items = await service.reorder_catalogs(catalog_type, reorder_data.ids, actor.staff_id, audit=audit)

    return ApiResponse(
        message="Catalogs reordered successfully",
        data=[CatalogResponse.model_validate(item) for item in items],
    )


@router.put("/{catalog_type}/{catalog_id}", response_model=ApiResponse[CatalogResponse])
async def update_catalog(
    catalog_type: str,
    catalog_id: int,
    catalog_data: CatalogUpdate,
    request: Request,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    actor: Annotated[Actor, Depends(get_config_manager)],
):
    """Rename an active catalog item."""
    audit = new_audit_log(actor_id=actor.staff_id, action="update", resource_type="catalog", request=request)
    item = await service.update_catalog(
        catalog_id,
        catalog_data.value,
        actor.staff_id,
        catalog_type=catalog_type,
        audit=audit,
    )

    return ApiResponse(message="Catalog updated successfully", data=CatalogResponse.model_validate(item))


@router.delete("/{catalog_type}/{catalog_id}", response_model=ApiResponse[CatalogDeleted])
async def delete_catalog(
    catalog_type: str,
    catalog_id: int,
    request: Request,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    actor: Annotated[Actor, Depends(get_config_manager)],
):
    """Soft delete a catalog item."""
    audit = new_audit_log(actor_id=actor.staff_id, action="delete", resource_type="catalog", request=request)
    await service.delete_catalog(catalog_id, actor.staff_id, catalog_type=catalog_type, audit=audit)

    return ApiResponse(message="Catalog deleted successfully", data=CatalogDeleted(id=catalog_id))
