from datetime import date
from functools import partial
from typing import Iterable, Optional

from app.core.config import settings
from app.core.logging import get_logger
from app.gateway import CERTIFICATE, GatewayClient
from app.schemas.certificate import (
    CertificateRead,
    CertificateStatus,
    CertificateSummary,
    ExpiryTier,
)
from app.schemas.listing import ListPage, SortDirection
from app.services.listing import ResourceDescriptor, ResourceView

logger = get_logger(module="certificate_service")

EXPIRED_LABEL = "Expired"


def days_until_expiry(expiry_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Días naturales que faltan; 0 o negativo si ya caducó."""
    if expiry_date is None:
        return None
    today = today or date.today()
    return (expiry_date - today).days


def expiry_label(days: Optional[int]) -> Optional[str]:
    if days is None:
        return None
    return f"{days} days" if days > 0 else EXPIRED_LABEL


def expiry_tier(
    days: Optional[int],
    critical_days: Optional[int] = None,
    warning_days: Optional[int] = None,
) -> Optional[ExpiryTier]:
    if days is None:
        return None
    critical_days = settings.CERTIFICATE_CRITICAL_DAYS if critical_days is None else critical_days
    warning_days = settings.CERTIFICATE_WARNING_DAYS if warning_days is None else warning_days
    if days < critical_days:
        return ExpiryTier.CRITICAL
    if days < warning_days:
        return ExpiryTier.WARNING
    return ExpiryTier.OK


def annotate_expiry(certificate: CertificateRead, today: Optional[date] = None) -> CertificateRead:
    days = days_until_expiry(certificate.expiry_date, today)
    return certificate.model_copy(
        update={
            "days_until_expiry": days,
            "expiry_label": expiry_label(days),
            "expiry_tier": expiry_tier(days),
        }
    )


def descriptor(today: Optional[date] = None) -> ResourceDescriptor[CertificateRead]:
    return ResourceDescriptor(
        resource=CERTIFICATE,
        schema=CertificateRead,
        search_fields=("farm_name", "certificate_number", "owner"),
        filter_fields=("status",),
        default_sort="expiry_date",
        enrich=partial(annotate_expiry, today=today),
    )


def open_view(gateway: GatewayClient, today: Optional[date] = None) -> ResourceView[CertificateRead]:
    return ResourceView(descriptor(today)).load(gateway)


def list_certificates(
    gateway: GatewayClient,
    *,
    search: str = "",
    status: Optional[str] = None,
    sort_field: Optional[str] = None,
    sort_direction: SortDirection = SortDirection.ASC,
    today: Optional[date] = None,
) -> ListPage[CertificateRead]:
    return open_view(gateway, today).page(
        search=search,
        filters={"status": status},
        sort_field=sort_field,
        sort_direction=sort_direction,
    )


def summarize(certificates: Iterable[CertificateRead]) -> CertificateSummary:
    by_status = {s: 0 for s in CertificateStatus}
    expiring = 0
    total = 0
    for certificate in certificates:
        total += 1
        by_status[certificate.status] += 1
        # Solo los vigentes que están dentro de la ventana crítica
        days = certificate.days_until_expiry
        if days is not None and 0 < days < settings.CERTIFICATE_CRITICAL_DAYS:
            expiring += 1
    return CertificateSummary(
        total=total,
        by_status=by_status,
        expiring_within_critical_window=expiring,
    )


def download_certificate(gateway: GatewayClient, certificate_id: str) -> bytes:
    content = gateway.download_certificate(certificate_id)
    logger.info(
        "Certificado descargado",
        certificate_id=certificate_id,
        size_bytes=len(content),
    )
    return content
