from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.base import GatewayModel


class FarmerCreate(BaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: str = Field(min_length=1)
    county: str = Field(min_length=1)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class FarmerRead(GatewayModel):
    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    county: Optional[str] = None
    farm_count: Optional[int] = None
    status: Optional[str] = None  # "active" | "inactive" | "pending"
    registration_date: Optional[date] = None
    total_area: Optional[float] = None
