from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.logging import get_logger
from app.gateway import GatewayClient, get_gateway
from app.schemas.farm import FarmCreate, FarmRead
from app.schemas.listing import CreateResponse, ListPage, SortDirection
from app.services import farm_service

router = APIRouter(prefix="/farms", tags=["farms"])
logger = get_logger(module="farms")


@router.get("/", response_model=ListPage[FarmRead])
def list_farms(
    search: str = "",
    status_filter: Optional[str] = Query(None, alias="status"),
    sort: Optional[str] = None,
    direction: SortDirection = SortDirection.ASC,
    gateway: GatewayClient = Depends(get_gateway),
):
    page = farm_service.list_farms(
        gateway,
        search=search,
        status=status_filter,
        sort_field=sort,
        sort_direction=direction,
    )
    logger.info(
        "Listando granjas",
        search=search,
        status=page.status.value,
        total=page.total,
        farms_count=page.count,
    )
    return page


@router.post("/", response_model=CreateResponse[FarmRead], status_code=status.HTTP_201_CREATED)
def create_farm(
    farm_in: FarmCreate,
    gateway: GatewayClient = Depends(get_gateway),
):
    created = farm_service.create_farm(gateway, farm_in)
    logger.info(
        "Granja creada",
        farm_id=created.data.id,
        name=created.data.name,
    )
    return created
