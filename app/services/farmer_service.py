from typing import Optional

from app.core.logging import get_logger
from app.gateway import FARMER, GatewayClient
from app.schemas.farmer import FarmerCreate, FarmerRead
from app.schemas.listing import CreateResponse, ListPage, SortDirection
from app.services import resource_service
from app.services.listing import ResourceDescriptor, ResourceView

logger = get_logger(module="farmer_service")

FARMERS = ResourceDescriptor(
    resource=FARMER,
    schema=FarmerRead,
    search_fields=("name", "email", "phone", "county"),
    filter_fields=("status", "county"),
    default_sort="name",
)


def open_view(gateway: GatewayClient) -> ResourceView[FarmerRead]:
    return ResourceView(FARMERS).load(gateway)


def list_farmers(
    gateway: GatewayClient,
    *,
    search: str = "",
    status: Optional[str] = None,
    county: Optional[str] = None,
    sort_field: Optional[str] = None,
    sort_direction: SortDirection = SortDirection.ASC,
) -> ListPage[FarmerRead]:
    return open_view(gateway).page(
        search=search,
        filters={"status": status, "county": county},
        sort_field=sort_field,
        sort_direction=sort_direction,
    )


def create_farmer(
    gateway: GatewayClient,
    farmer_in: FarmerCreate,
    view: Optional[ResourceView[FarmerRead]] = None,
) -> CreateResponse[FarmerRead]:
    farmer, message = resource_service.create_record(
        gateway,
        # Por HTTP la vista es efímera: el cliente añade el registro devuelto a su lista
        view or ResourceView(FARMERS),
        farmer_in,
    )
    logger.info(
        "Agricultor registrado en servicio",
        farmer_id=farmer.id,
        county=farmer.county,
    )
    return CreateResponse[FarmerRead](data=farmer, message=message)
