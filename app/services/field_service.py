from typing import Optional

from app.core.logging import get_logger
from app.gateway import FIELDS, GatewayClient
from app.schemas.field import FieldCreate, FieldRead
from app.schemas.listing import CreateResponse, ListPage, SortDirection
from app.services import resource_service
from app.services.listing import ResourceDescriptor, ResourceView

logger = get_logger(module="field_service")

FIELD_VIEW = ResourceDescriptor(
    resource=FIELDS,
    schema=FieldRead,
    search_fields=("name", "farm_name", "crop", "farmer"),
    filter_fields=("farm_name", "crop", "status"),
    default_sort="name",
)


def open_view(gateway: GatewayClient) -> ResourceView[FieldRead]:
    return ResourceView(FIELD_VIEW).load(gateway)


def list_fields(
    gateway: GatewayClient,
    *,
    search: str = "",
    farm_name: Optional[str] = None,
    crop: Optional[str] = None,
    status: Optional[str] = None,
    sort_field: Optional[str] = None,
    sort_direction: SortDirection = SortDirection.ASC,
) -> ListPage[FieldRead]:
    return open_view(gateway).page(
        search=search,
        filters={"farm_name": farm_name, "crop": crop, "status": status},
        sort_field=sort_field,
        sort_direction=sort_direction,
    )


def create_field(
    gateway: GatewayClient,
    field_in: FieldCreate,
    view: Optional[ResourceView[FieldRead]] = None,
) -> CreateResponse[FieldRead]:
    created, message = resource_service.create_record(
        gateway,
        # Por HTTP la vista es efímera: el cliente añade el registro devuelto a su lista
        view or ResourceView(FIELD_VIEW),
        field_in,
    )
    logger.info(
        "Parcela creada en servicio",
        field_id=created.id,
        farm_id=created.farm_id,
        crop=created.crop,
    )
    return CreateResponse[FieldRead](data=created, message=message)
