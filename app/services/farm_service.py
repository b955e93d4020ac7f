from typing import Optional

from app.core.logging import get_logger
from app.gateway import FARM, GatewayClient
from app.schemas.farm import FarmCreate, FarmRead
from app.schemas.listing import CreateResponse, ListPage, SortDirection
from app.services import resource_service
from app.services.listing import ResourceDescriptor, ResourceView

logger = get_logger(module="farm_service")

FARMS = ResourceDescriptor(
    resource=FARM,
    schema=FarmRead,
    search_fields=("name", "location", "owner"),
    filter_fields=("status",),
    default_sort="name",
)


def open_view(gateway: GatewayClient) -> ResourceView[FarmRead]:
    return ResourceView(FARMS).load(gateway)


def list_farms(
    gateway: GatewayClient,
    *,
    search: str = "",
    status: Optional[str] = None,
    sort_field: Optional[str] = None,
    sort_direction: SortDirection = SortDirection.ASC,
) -> ListPage[FarmRead]:
    # No meto log aquí; el listado ya se loguea en el router.
    return open_view(gateway).page(
        search=search,
        filters={"status": status},
        sort_field=sort_field,
        sort_direction=sort_direction,
    )


def create_farm(
    gateway: GatewayClient,
    farm_in: FarmCreate,
    view: Optional[ResourceView[FarmRead]] = None,
) -> CreateResponse[FarmRead]:
    farm, message = resource_service.create_record(
        gateway,
        # Por HTTP la vista es efímera: el cliente añade el registro devuelto a su lista
        view or ResourceView(FARMS),
        farm_in,
    )
    logger.info(
        "Granja creada en servicio",
        farm_id=farm.id,
        name=farm.name,
        farmer_id=farm.farmer_id,
    )
    return CreateResponse[FarmRead](data=farm, message=message)
