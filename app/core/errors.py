# app/core/errors.py
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(module="errors")


class DashboardError(Exception):
    """
    Error base del dashboard. Lleva un mensaje apto para mostrar al usuario,
    un código estable y el status HTTP con el que se responde.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "dashboard_error"

    def __init__(self, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_body(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.extra}


# ---------- gateway (API remota) ----------

class GatewayError(DashboardError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "gateway_error"


class GatewayTransportError(GatewayError):
    """La petición no llegó a tener respuesta (DNS, conexión, timeout...)."""
    code = "gateway_unreachable"


class GatewayStatusError(GatewayError):
    """La API respondió con un status no 2xx."""
    code = "gateway_rejected"

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, extra={"upstream_status": upstream_status, **(extra or {})})
        self.upstream_status = upstream_status
        # Los 4xx del backend (validación, not found) se devuelven tal cual
        if 400 <= upstream_status < 500:
            self.status_code = upstream_status


class GatewayResponseError(GatewayError):
    """Respuesta 2xx pero con forma inesperada (p.ej. sin id de inspección)."""
    code = "gateway_bad_response"


# ---------- dashboard ----------

class NotFoundError(DashboardError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class FormValidationError(DashboardError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "invalid_form"


class WizardError(DashboardError):
    status_code = status.HTTP_409_CONFLICT
    code = "wizard_error"


class WizardStepError(WizardError):
    code = "wizard_invalid_step"


class WizardBusyError(WizardError):
    code = "wizard_busy"


class InspectionIdMissingError(WizardError):
    code = "inspection_id_missing"


class WizardStepFailedError(WizardError):
    """Un paso del asistente falló contra la API remota; se puede reintentar."""
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "wizard_step_failed"


class UnansweredItemsError(WizardError):
    code = "unanswered_items"

    def __init__(self, unanswered: int) -> None:
        super().__init__(
            f"There are {unanswered} unanswered questions. Submit anyway?",
            extra={"unanswered": unanswered},
        )
        self.unanswered = unanswered


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DashboardError)
    async def handle_dashboard_error(request: Request, exc: DashboardError) -> JSONResponse:
        logger.warning(
            "Error controlado en petición",
            path=request.url.path,
            method=request.method,
            code=exc.code,
            status_code=exc.status_code,
            detail=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())
