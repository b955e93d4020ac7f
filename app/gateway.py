from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import httpx

from app.core.config import settings
from app.core.errors import (
    GatewayResponseError,
    GatewayStatusError,
    GatewayTransportError,
)
from app.core.logging import get_logger

logger = get_logger(module="gateway")

# Recursos tal y como los nombra la API remota
FARM = "farm"
FARMER = "farmer"
FIELDS = "fields"
CERTIFICATE = "certificate"
INSPECTION = "inspection"
CHECKLISTS = "checklists"


class GatewayClient:
    """
    Cliente JSON-sobre-HTTP de la API de certificación orgánica.

    Los tres tipos de fallo se traducen a excepciones propias:
    - transporte (sin respuesta)      → GatewayTransportError
    - status no 2xx                   → GatewayStatusError
    - cuerpo con forma inesperada     → GatewayResponseError
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_prefix: str = "/api/v1",
        timeout: Optional[float] = None,
        completion_action: str = "complete",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_prefix = "/" + api_prefix.strip("/")
        self.completion_action = completion_action
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GatewayClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ---------- helpers internos ----------

    def _path(self, *parts: Any) -> str:
        return "/".join([self.api_prefix, *(str(p).strip("/") for p in parts)])

    def _request(self, method: str, *parts: Any, **kwargs: Any) -> httpx.Response:
        path = self._path(*parts)
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.error(
                "Fallo de red contra la API remota",
                method=method,
                path=path,
                error=repr(exc),
            )
            raise GatewayTransportError(f"Network error: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "La API remota rechazó la petición",
                method=method,
                path=path,
                status_code=response.status_code,
                detail=message,
            )
            raise GatewayStatusError(message, upstream_status=response.status_code)

        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            logger.warning(
                "Respuesta no JSON de la API remota",
                path=response.request.url.path,
                status_code=response.status_code,
            )
            raise GatewayResponseError("Unexpected response from server.") from exc

    # ---------- colecciones ----------

    def list_resource(self, resource: str) -> List[Dict[str, Any]]:
        body = self._json(self._request("GET", resource))
        content = _dig(body, "data", "content")
        if not isinstance(content, list):
            logger.warning("Listado sin data.content", resource=resource)
            raise GatewayResponseError(f"Unexpected {resource} listing from server.")
        return content

    def create_resource(
        self,
        resource: str,
        payload: Dict[str, Any],
    ) -> Tuple[Dict[str, Any], Optional[str]]:
        body = self._json(self._request("POST", resource, json=payload))
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise GatewayResponseError(f"Server did not return the created {resource}.")
        return data, body.get("message")

    # ---------- inspecciones ----------

    def create_inspection(self, farm_id: str, **fields: Any) -> str:
        body = self._json(
            self._request("POST", INSPECTION, json={"farmId": farm_id, **fields})
        )
        data = body.get("data") if isinstance(body, dict) else None
        inspection_id = None
        if isinstance(data, dict):
            inspection_id = data.get("inspectionId")
            if inspection_id is None:
                inspection_id = data.get("id")
        if inspection_id is None or inspection_id == "":
            logger.warning("Inspección creada sin id en la respuesta", farm_id=farm_id)
            raise GatewayResponseError("Server did not return an inspection id.")
        return str(inspection_id)

    def update_inspection(self, inspection_id: str, payload: Dict[str, Any]) -> None:
        self._request("PATCH", INSPECTION, inspection_id, json=payload)

    def fetch_checklist(self, inspection_id: str) -> List[Dict[str, Any]]:
        body = self._json(self._request("GET", CHECKLISTS, INSPECTION, inspection_id))
        data = body.get("data") if isinstance(body, dict) else None
        # Algunas versiones del backend paginan también el checklist
        if isinstance(data, dict):
            data = data.get("content")
        if not isinstance(data, list):
            raise GatewayResponseError("Unexpected checklist from server.")
        return data

    def submit_answers(self, answers: Sequence[Dict[str, Any]]) -> None:
        self._request("POST", CHECKLISTS, "answers", json=list(answers))

    def complete_inspection(
        self,
        inspection_id: str,
        answers: Sequence[Dict[str, Any]] = (),
    ) -> None:
        self._request(
            "POST",
            INSPECTION,
            inspection_id,
            self.completion_action,
            json=list(answers),
        )

    # ---------- certificados ----------

    def download_certificate(self, certificate_id: str) -> bytes:
        response = self._request(
            "GET",
            CERTIFICATE,
            certificate_id,
            "download",
            headers={"Accept": "application/pdf"},
        )
        return response.content


def _dig(body: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(body, dict):
            return None
        body = body.get(key)
    return body


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Request failed with status {response.status_code}."


def get_gateway() -> Iterator[GatewayClient]:
    gateway = GatewayClient(
        settings.GATEWAY_BASE_URL,
        api_prefix=settings.GATEWAY_API_PREFIX,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
        completion_action=settings.INSPECTION_COMPLETION_ACTION,
    )
    try:
        yield gateway
    finally:
        gateway.close()
