from fastapi import APIRouter, Depends

from app.core.config import settings
from app.core.logging import get_logger
from app.gateway import GatewayClient, get_gateway
from app.schemas.dashboard import DashboardSummary
from app.schemas.listing import ViewStatus
from app.services import certificate_service, farm_service, farmer_service, field_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])
logger = get_logger(module="dashboard")


@router.get("/summary", response_model=DashboardSummary)
def dashboard_summary(
    gateway: GatewayClient = Depends(get_gateway),
) -> DashboardSummary:
    summary = DashboardSummary()

    # Cada cifra va por separado: si un recurso falla, el resto se muestra
    farms = farm_service.open_view(gateway)
    if farms.status == ViewStatus.ERROR:
        summary.notices.append(farms.message)
    else:
        summary.total_farms = len(farms.items)

    farmers = farmer_service.open_view(gateway)
    if farmers.status == ViewStatus.ERROR:
        summary.notices.append(farmers.message)
    else:
        summary.registered_farmers = len(farmers.items)

    fields = field_service.open_view(gateway)
    if fields.status == ViewStatus.ERROR:
        summary.notices.append(fields.message)
    else:
        summary.total_fields = len(fields.items)

    certificates = certificate_service.open_view(gateway)
    if certificates.status == ViewStatus.ERROR:
        summary.notices.append(certificates.message)
    else:
        stats = certificate_service.summarize(certificates.items)
        summary.certificates_by_status = stats.by_status
        summary.certificates_expiring_soon = stats.expiring_within_critical_window
        if stats.expiring_within_critical_window:
            summary.notices.append(
                f"{stats.expiring_within_critical_window} certificates expiring in next "
                f"{settings.CERTIFICATE_CRITICAL_DAYS} days"
            )

    logger.info(
        "Resumen del dashboard",
        farms=summary.total_farms,
        farmers=summary.registered_farmers,
        fields=summary.total_fields,
        notices=len(summary.notices),
    )
    return summary
