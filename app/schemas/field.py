from datetime import date
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.base import GatewayModel


class FieldCreate(BaseModel):
    name: str = Field(min_length=1)
    crop: str = Field(min_length=1)
    area_ha: float
    farm_id: str = Field(min_length=1)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )


class FieldRead(GatewayModel):
    id: str
    # El backend lo llama "fieldName" en unas versiones y "name" en otras
    name: str = Field(validation_alias=AliasChoices("name", "fieldName", "field_name"))
    crop: Optional[str] = None
    area_ha: Optional[float] = None
    farm_id: Optional[str] = None
    farm_name: Optional[str] = None
    farmer: Optional[str] = None
    county: Optional[str] = None
    status: Optional[str] = None  # "active" | "fallow" | "preparing"
    last_inspection: Optional[date] = None
    next_inspection: Optional[date] = None
    certification_status: Optional[str] = None
