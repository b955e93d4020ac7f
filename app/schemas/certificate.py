from datetime import date
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel

from app.schemas.base import GatewayModel


class CertificateStatus(str, Enum):
    VALID = "valid"
    EXPIRING_SOON = "expiring-soon"
    EXPIRED = "expired"
    PENDING = "pending"


class ExpiryTier(str, Enum):
    CRITICAL = "critical"  # < CERTIFICATE_CRITICAL_DAYS (incluye caducados)
    WARNING = "warning"    # < CERTIFICATE_WARNING_DAYS
    OK = "ok"


class CertificateRead(GatewayModel):
    id: str
    certificate_number: str
    farm_id: Optional[str] = None
    farm_name: Optional[str] = None
    owner: Optional[str] = None
    location: Optional[str] = None
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    status: CertificateStatus = CertificateStatus.PENDING
    compliance_score: Optional[float] = None

    # Calculados en local a partir de expiry_date
    days_until_expiry: Optional[int] = None
    expiry_label: Optional[str] = None
    expiry_tier: Optional[ExpiryTier] = None


class CertificateSummary(BaseModel):
    total: int
    by_status: Dict[CertificateStatus, int]
    expiring_within_critical_window: int
