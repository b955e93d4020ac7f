from typing import Optional, Tuple, TypeVar

from pydantic import BaseModel

from app.core.errors import DashboardError
from app.core.logging import get_logger
from app.gateway import GatewayClient
from app.services.listing import ResourceView

logger = get_logger(module="resource_service")

T = TypeVar("T", bound=BaseModel)


def create_record(
    gateway: GatewayClient,
    view: ResourceView[T],
    form: BaseModel,
) -> Tuple[T, Optional[str]]:
    """
    Envía el formulario en un único POST y añade el registro devuelto por el
    backend a la colección en memoria de la vista (sin volver a listar).

    Si falla, el formulario se devuelve en el error para poder reintentar.
    """
    resource = view.descriptor.resource
    payload = form.model_dump(by_alias=True, mode="json")
    try:
        raw, message = gateway.create_resource(resource, payload)
        record = view.append(raw)
    except DashboardError as exc:
        logger.warning(
            "Alta rechazada",
            resource=resource,
            code=exc.code,
            detail=exc.message,
        )
        exc.extra.setdefault("form", form.model_dump(mode="json"))
        raise

    return record, message
