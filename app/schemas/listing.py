from enum import Enum
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ViewStatus(str, Enum):
    LOADING = "loading"
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"


class ListPage(BaseModel, Generic[T]):
    status: ViewStatus
    items: List[T]
    total: int          # registros recibidos del backend
    count: int          # registros tras búsqueda/filtros
    search: str = ""
    filters: Dict[str, str] = {}
    sort_field: str
    sort_direction: SortDirection
    # Valores distintos por filtro (para los <select> del frontend)
    facets: Dict[str, List[str]] = {}
    message: Optional[str] = None


class CreateResponse(BaseModel, Generic[T]):
    data: T
    message: Optional[str] = None
