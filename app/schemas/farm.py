from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.base import GatewayModel


class FarmBase(BaseModel):
    name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    area_ha: float
    farmer_id: str = Field(min_length=1)


class FarmCreate(FarmBase):
    # Se manda tal cual al backend (camelCase)
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )


class FarmRead(GatewayModel):
    id: str
    name: str
    location: Optional[str] = None
    area_ha: Optional[float] = None
    farmer_id: Optional[str] = None
    owner: Optional[str] = None
    status: Optional[str] = None  # "active" | "pending" | "suspended"
    last_inspection: Optional[date] = None
    certificate_status: Optional[str] = None
