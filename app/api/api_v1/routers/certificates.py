from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.core.errors import GatewayError
from app.core.logging import get_logger
from app.gateway import GatewayClient, get_gateway
from app.schemas.certificate import CertificateRead, CertificateSummary
from app.schemas.listing import ListPage, SortDirection, ViewStatus
from app.services import certificate_service

router = APIRouter(prefix="/certificates", tags=["certificates"])
logger = get_logger(module="certificates")


@router.get("/", response_model=ListPage[CertificateRead])
def list_certificates(
    search: str = "",
    status_filter: Optional[str] = Query(None, alias="status"),
    sort: Optional[str] = None,
    direction: SortDirection = SortDirection.ASC,
    gateway: GatewayClient = Depends(get_gateway),
):
    page = certificate_service.list_certificates(
        gateway,
        search=search,
        status=status_filter,
        sort_field=sort,
        sort_direction=direction,
    )
    logger.info(
        "Listando certificados",
        search=search,
        status=page.status.value,
        count=page.count,
    )
    return page


@router.get("/summary", response_model=CertificateSummary)
def certificate_summary(
    gateway: GatewayClient = Depends(get_gateway),
):
    view = certificate_service.open_view(gateway)
    if view.status == ViewStatus.ERROR:
        raise GatewayError(view.message or "Failed to load certificates.")
    return certificate_service.summarize(view.items)


@router.get(
    "/{certificate_id}/download",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
def download_certificate(
    certificate_id: str,
    gateway: GatewayClient = Depends(get_gateway),
):
    content = certificate_service.download_certificate(gateway, certificate_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="certificate-{certificate_id}.pdf"'
        },
    )
