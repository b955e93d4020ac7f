from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.logging import get_logger
from app.gateway import GatewayClient, get_gateway
from app.schemas.farmer import FarmerCreate, FarmerRead
from app.schemas.listing import CreateResponse, ListPage, SortDirection
from app.services import farmer_service

router = APIRouter(prefix="/farmers", tags=["farmers"])
logger = get_logger(module="farmers")


@router.get("/", response_model=ListPage[FarmerRead])
def list_farmers(
    search: str = "",
    status_filter: Optional[str] = Query(None, alias="status"),
    county: Optional[str] = None,
    sort: Optional[str] = None,
    direction: SortDirection = SortDirection.ASC,
    gateway: GatewayClient = Depends(get_gateway),
):
    page = farmer_service.list_farmers(
        gateway,
        search=search,
        status=status_filter,
        county=county,
        sort_field=sort,
        sort_direction=direction,
    )
    logger.info(
        "Listando agricultores",
        search=search,
        county=county,
        status=page.status.value,
        count=page.count,
    )
    return page


@router.post("/", response_model=CreateResponse[FarmerRead], status_code=status.HTTP_201_CREATED)
def create_farmer(
    farmer_in: FarmerCreate,
    gateway: GatewayClient = Depends(get_gateway),
):
    created = farmer_service.create_farmer(gateway, farmer_in)
    logger.info(
        "Agricultor registrado",
        farmer_id=created.data.id,
    )
    return created
