from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.logging import get_logger
from app.gateway import GatewayClient, get_gateway
from app.schemas.field import FieldCreate, FieldRead
from app.schemas.listing import CreateResponse, ListPage, SortDirection
from app.services import field_service

router = APIRouter(prefix="/fields", tags=["fields"])
logger = get_logger(module="fields")


@router.get("/", response_model=ListPage[FieldRead])
def list_fields(
    search: str = "",
    farm: Optional[str] = None,
    crop: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    sort: Optional[str] = None,
    direction: SortDirection = SortDirection.ASC,
    gateway: GatewayClient = Depends(get_gateway),
):
    page = field_service.list_fields(
        gateway,
        search=search,
        farm_name=farm,
        crop=crop,
        status=status_filter,
        sort_field=sort,
        sort_direction=direction,
    )
    logger.info(
        "Listando parcelas",
        search=search,
        status=page.status.value,
        count=page.count,
    )
    return page


@router.post("/", response_model=CreateResponse[FieldRead], status_code=status.HTTP_201_CREATED)
def create_field(
    field_in: FieldCreate,
    gateway: GatewayClient = Depends(get_gateway),
):
    created = field_service.create_field(gateway, field_in)
    logger.info(
        "Parcela creada",
        field_id=created.data.id,
    )
    return created
