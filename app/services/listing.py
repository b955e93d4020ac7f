import locale
import unicodedata
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
)

from pydantic import BaseModel, ValidationError

from app.core.errors import DashboardError, GatewayResponseError
from app.core.logging import get_logger
from app.gateway import GatewayClient
from app.schemas.listing import ListPage, SortDirection, ViewStatus

logger = get_logger(module="listing")

T = TypeVar("T", bound=BaseModel)

# Valor de filtro que equivale a "sin filtro" (el <select> del frontend)
ALL = "all"


@dataclass(frozen=True)
class SortState:
    field: str
    direction: SortDirection = SortDirection.ASC

    def toggle(self, field_name: str) -> "SortState":
        """Mismo campo → invierte dirección; campo nuevo → ascendente."""
        if field_name == self.field:
            flipped = (
                SortDirection.DESC
                if self.direction == SortDirection.ASC
                else SortDirection.ASC
            )
            return SortState(field_name, flipped)
        return SortState(field_name, SortDirection.ASC)


@dataclass(frozen=True)
class ResourceDescriptor(Generic[T]):
    resource: str                       # nombre en la API remota
    schema: Type[T]
    search_fields: Tuple[str, ...]
    filter_fields: Tuple[str, ...] = ()
    default_sort: str = "name"
    # Post-proceso por registro (p.ej. días hasta caducidad)
    enrich: Optional[Callable[[T], T]] = None


def field_value(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "value"):  # Enum
        value = value.value
    return str(value)


def matches_search(record: Any, term: str, search_fields: Iterable[str]) -> bool:
    needle = term.strip().casefold()
    if not needle:
        return True
    return any(needle in _as_text(field_value(record, f)).casefold() for f in search_fields)


def matches_filters(record: Any, filters: Mapping[str, Optional[str]]) -> bool:
    for name, expected in filters.items():
        if expected is None or expected == "" or expected == ALL:
            continue
        if _as_text(field_value(record, name)) != expected:
            return False
    return True


def _collation_key(text: str) -> Tuple[str, str, str]:
    # Primero la letra base ("É" junto a "E"), luego acentos y mayúsculas
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (locale.strxfrm(base), locale.strxfrm(text.casefold()), text)


def _sort_key(value: Any) -> Tuple[int, Any]:
    # Agrupamos por tipo para no comparar str con float
    if isinstance(value, bool):
        return (3, value)
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, (date, datetime)):
        return (1, value.isoformat())
    return (2, _collation_key(_as_text(value)))


def sort_records(records: Sequence[T], sort: SortState) -> List[T]:
    """
    Orden estable. Los registros sin valor en el campo van siempre al final,
    también en orden descendente.
    """
    present = [r for r in records if field_value(r, sort.field) is not None]
    missing = [r for r in records if field_value(r, sort.field) is None]
    ordered = sorted(
        present,
        key=lambda r: _sort_key(field_value(r, sort.field)),
        reverse=sort.direction == SortDirection.DESC,
    )
    return ordered + missing


def derive_view(
    records: Sequence[T],
    *,
    search: str = "",
    search_fields: Iterable[str] = (),
    filters: Optional[Mapping[str, Optional[str]]] = None,
    sort: SortState,
) -> List[T]:
    search_fields = tuple(search_fields)
    selected = [
        r for r in records
        if matches_search(r, search, search_fields) and matches_filters(r, filters or {})
    ]
    return sort_records(selected, sort)


def facet_values(records: Sequence[Any], name: str) -> List[str]:
    values = {_as_text(field_value(r, name)) for r in records}
    values.discard("")
    return sorted(values, key=_collation_key)


@dataclass
class ResourceView(Generic[T]):
    """
    Estado propio de una vista de listado: la colección que se trajo al
    "montar" la vista. No se comparte entre vistas ni entre peticiones.
    """
    descriptor: ResourceDescriptor[T]
    items: List[T] = field(default_factory=list)
    status: ViewStatus = ViewStatus.LOADING
    message: Optional[str] = None

    def load(self, gateway: GatewayClient) -> "ResourceView[T]":
        resource = self.descriptor.resource
        self.status = ViewStatus.LOADING
        try:
            raw = gateway.list_resource(resource)
            self.items = [self._parse(item) for item in raw]
        except DashboardError as exc:
            logger.error(
                "No se pudo cargar el listado",
                resource=resource,
                code=exc.code,
                detail=exc.message,
            )
            self.items = []
            self.status = ViewStatus.ERROR
            self.message = f"Failed to load {resource} list: {exc.message}"
            return self

        self.status = ViewStatus.OK if self.items else ViewStatus.EMPTY
        self.message = None
        logger.info("Listado cargado", resource=resource, count=len(self.items))
        return self

    def _parse(self, raw: Dict[str, Any]) -> T:
        try:
            record = self.descriptor.schema.model_validate(raw)
        except ValidationError as exc:
            raise GatewayResponseError(
                f"Unexpected {self.descriptor.resource} record from server."
            ) from exc
        if self.descriptor.enrich is not None:
            record = self.descriptor.enrich(record)
        return record

    def append(self, raw: Dict[str, Any]) -> T:
        record = self._parse(raw)
        self.items.append(record)
        if self.status in (ViewStatus.EMPTY, ViewStatus.LOADING):
            self.status = ViewStatus.OK
        return record

    def page(
        self,
        *,
        search: str = "",
        filters: Optional[Mapping[str, Optional[str]]] = None,
        sort_field: Optional[str] = None,
        sort_direction: SortDirection = SortDirection.ASC,
    ) -> ListPage[T]:
        sort = SortState(sort_field or self.descriptor.default_sort, sort_direction)
        active = {
            k: v for k, v in (filters or {}).items()
            if k in self.descriptor.filter_fields and v not in (None, "", ALL)
        }
        items = derive_view(
            self.items,
            search=search,
            search_fields=self.descriptor.search_fields,
            filters=active,
            sort=sort,
        )

        status = self.status
        if status == ViewStatus.OK and not items:
            # Hay datos pero la búsqueda/filtros no dejan ninguno
            status = ViewStatus.EMPTY

        return ListPage[self.descriptor.schema](
            status=status,
            items=items,
            total=len(self.items),
            count=len(items),
            search=search,
            filters=active,
            sort_field=sort.field,
            sort_direction=sort.direction,
            facets={
                name: facet_values(self.items, name)
                for name in self.descriptor.filter_fields
            },
            message=self.message,
        )
