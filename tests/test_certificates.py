"""Tests for certificate expiry calculations, summary and download."""
from datetime import date, timedelta

import httpx
import pytest

from app.core.errors import GatewayStatusError
from app.schemas.certificate import CertificateRead, CertificateStatus, ExpiryTier
from app.services import certificate_service
from app.services.certificate_service import (
    annotate_expiry,
    days_until_expiry,
    expiry_label,
    expiry_tier,
)

TODAY = date(2024, 6, 1)


def certificate(**kwargs):
    data = {"id": "1", "certificateNumber": "ORG-2024-001", "status": "valid"}
    data.update(kwargs)
    return CertificateRead.model_validate(data)


class TestDaysUntilExpiry:
    @pytest.mark.parametrize("days", [1, 29, 365])
    def test_future_date_reports_exact_days(self, days):
        expiry = TODAY + timedelta(days=days)
        assert days_until_expiry(expiry, TODAY) == days
        assert expiry_label(days) == f"{days} days"

    @pytest.mark.parametrize("days", [0, 1, 200])
    def test_past_or_today_is_expired(self, days):
        expiry = TODAY - timedelta(days=days)
        remaining = days_until_expiry(expiry, TODAY)
        assert remaining <= 0
        assert expiry_label(remaining) == "Expired"

    def test_missing_expiry(self):
        assert days_until_expiry(None, TODAY) is None
        assert expiry_label(None) is None
        assert expiry_tier(None) is None

    def test_tiers(self):
        assert expiry_tier(-3) == ExpiryTier.CRITICAL
        assert expiry_tier(29) == ExpiryTier.CRITICAL
        assert expiry_tier(30) == ExpiryTier.WARNING
        assert expiry_tier(89) == ExpiryTier.WARNING
        assert expiry_tier(90) == ExpiryTier.OK
        assert expiry_tier(10, critical_days=5, warning_days=20) == ExpiryTier.WARNING

    def test_annotate(self):
        annotated = annotate_expiry(certificate(expiryDate="2024-06-11"), today=TODAY)
        assert annotated.days_until_expiry == 10
        assert annotated.expiry_label == "10 days"
        assert annotated.expiry_tier == ExpiryTier.CRITICAL


class TestListing:
    def test_list_enriches_and_filters(self, backend, gateway):
        backend.listing("certificate", [
            {"id": 1, "farmName": "Green Valley Farm", "certificateNumber": "ORG-2024-001",
             "expiryDate": "2025-01-14", "status": "valid", "owner": "John Kamau"},
            {"id": 4, "farmName": "Fresh Herbs Kenya", "certificateNumber": "ORG-2023-032",
             "expiryDate": "2024-05-14", "status": "expired", "owner": "Grace Njeri"},
            {"id": 7, "farmName": "Rift Valley Greens", "certificateNumber": "ORG-2024-010",
             "status": "pending", "owner": "Joy Wavinya"},
        ])

        page = certificate_service.list_certificates(gateway, status="expired", today=TODAY)

        assert [c.certificate_number for c in page.items] == ["ORG-2023-032"]
        assert page.items[0].expiry_label == "Expired"

        page = certificate_service.list_certificates(gateway, search="org-2024", today=TODAY)
        # Ordenado por caducidad; sin fecha al final
        assert [c.id for c in page.items] == ["1", "7"]

    def test_summary_counts(self):
        certificates = [
            annotate_expiry(certificate(status="valid", expiryDate="2024-06-20"), today=TODAY),
            annotate_expiry(certificate(status="valid", expiryDate="2025-06-20"), today=TODAY),
            annotate_expiry(certificate(status="expired", expiryDate="2024-01-01"), today=TODAY),
            annotate_expiry(certificate(status="pending"), today=TODAY),
        ]

        summary = certificate_service.summarize(certificates)

        assert summary.total == 4
        assert summary.by_status[CertificateStatus.VALID] == 2
        assert summary.by_status[CertificateStatus.EXPIRING_SOON] == 0
        assert summary.by_status[CertificateStatus.EXPIRED] == 1
        assert summary.by_status[CertificateStatus.PENDING] == 1
        assert summary.expiring_within_critical_window == 1


class TestDownload:
    def test_returns_pdf_bytes(self, backend, gateway):
        backend.add(
            "GET",
            "certificate/5/download",
            httpx.Response(200, content=b"%PDF-1.4 fake", headers={"Content-Type": "application/pdf"}),
        )

        assert certificate_service.download_certificate(gateway, "5") == b"%PDF-1.4 fake"
        assert backend.requests[0].headers["Accept"] == "application/pdf"

    def test_missing_certificate(self, backend, gateway):
        with pytest.raises(GatewayStatusError) as exc_info:
            certificate_service.download_certificate(gateway, "404")
        assert exc_info.value.status_code == 404
