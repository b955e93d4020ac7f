import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from app.gateway import GatewayClient, get_gateway
from app.main import app
from app.services.wizard import WizardRegistry, get_wizard_registry

GATEWAY_URL = "http://gateway.test"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeBackend:
    """API remota falsa sobre httpx.MockTransport; guarda cada petición."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Route] = {}

    def add(
        self,
        method: str,
        path: str,
        route: Optional[Route] = None,
        *,
        json: Any = None,
        status_code: int = 200,
    ) -> None:
        if route is None:
            route = httpx.Response(status_code, json=json)
        self.routes[(method, "/api/v1/" + path.strip("/"))] = route

    def listing(self, resource: str, items: List[Dict[str, Any]]) -> None:
        self.add("GET", resource, json={"data": {"content": items}})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(route):
            return route(request)
        return route

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        full = "/api/v1/" + path.strip("/")
        return [r for r in self.requests if r.method == method and r.url.path == full]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)

    def client(self, **kwargs: Any) -> GatewayClient:
        return GatewayClient(
            GATEWAY_URL,
            transport=httpx.MockTransport(self.handler),
            **kwargs,
        )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def gateway(backend: FakeBackend):
    client = backend.client()
    yield client
    client.close()


@pytest.fixture
def registry() -> WizardRegistry:
    return WizardRegistry(max_sessions=10)


@pytest.fixture
def client(backend: FakeBackend, registry: WizardRegistry):
    def override_get_gateway():
        gateway = backend.client()
        try:
            yield gateway
        finally:
            gateway.close()

    app.dependency_overrides[get_gateway] = override_get_gateway
    app.dependency_overrides[get_wizard_registry] = lambda: registry

    # Sin "with": no se ejecuta el startup (logging a ficheros)
    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def farms_payload() -> List[Dict[str, Any]]:
    return [dict(f) for f in FARMS]


FARMS = [
    {"id": 1, "name": "Green Valley Farm", "location": "Kiambu County", "areaHa": 25.5,
     "owner": "John Kamau", "status": "active"},
    {"id": 2, "name": "Sunrise Organic", "location": "Nakuru County", "areaHa": 45.2,
     "owner": "Mary Wanjiku", "status": "active"},
    {"id": 3, "name": "Highland Coffee Estate", "location": "Nyeri County", "areaHa": 120.8,
     "owner": "David Mwangi", "status": "pending"},
    {"id": 4, "name": "Tropical Fruits Co.", "location": "Machakos County", "areaHa": 80.7,
     "owner": "Susan Mutua", "status": "suspended"},
]
