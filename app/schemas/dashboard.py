from typing import Dict, List, Optional

from pydantic import BaseModel

from app.schemas.certificate import CertificateStatus


class DashboardSummary(BaseModel):
    total_farms: Optional[int] = None
    registered_farmers: Optional[int] = None
    total_fields: Optional[int] = None
    certificates_by_status: Optional[Dict[CertificateStatus, int]] = None
    certificates_expiring_soon: Optional[int] = None
    notices: List[str] = []
