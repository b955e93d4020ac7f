from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class GatewayModel(BaseModel):
    """
    Base de los recursos que vienen de la API remota: acepta camelCase
    (lo que manda el backend) y snake_case, y convierte ids numéricos a str.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )
