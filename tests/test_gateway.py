"""Tests for the remote API client and its error taxonomy."""
import httpx
import pytest

from app.core.errors import (
    GatewayResponseError,
    GatewayStatusError,
    GatewayTransportError,
)


class TestListing:
    def test_returns_data_content(self, backend, gateway):
        backend.listing("farm", [{"id": 1, "name": "Green Valley Farm"}])

        assert gateway.list_resource("farm") == [{"id": 1, "name": "Green Valley Farm"}]
        assert backend.requests[0].url.path == "/api/v1/farm"

    def test_missing_content_is_malformed(self, backend, gateway):
        backend.add("GET", "farm", json={"data": []})

        with pytest.raises(GatewayResponseError):
            gateway.list_resource("farm")

    def test_non_json_body_is_malformed(self, backend, gateway):
        backend.add("GET", "farm", httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(GatewayResponseError):
            gateway.list_resource("farm")


class TestErrors:
    def test_transport_failure(self, backend, gateway):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend.add("GET", "farmer", refuse)

        with pytest.raises(GatewayTransportError) as exc_info:
            gateway.list_resource("farmer")
        assert exc_info.value.status_code == 502

    def test_client_error_keeps_upstream_status_and_message(self, backend, gateway):
        backend.add("POST", "farmer", json={"message": "Email already registered"}, status_code=400)

        with pytest.raises(GatewayStatusError) as exc_info:
            gateway.create_resource("farmer", {"name": "John"})

        error = exc_info.value
        assert error.status_code == 400
        assert error.upstream_status == 400
        assert error.message == "Email already registered"

    def test_server_error_maps_to_bad_gateway(self, backend, gateway):
        backend.add("GET", "fields", httpx.Response(503, text="maintenance"))

        with pytest.raises(GatewayStatusError) as exc_info:
            gateway.list_resource("fields")

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Request failed with status 503."


class TestInspections:
    def test_create_reads_inspection_id(self, backend, gateway):
        backend.add("POST", "inspection", json={"data": {"inspectionId": "insp-9"}})

        assert gateway.create_inspection("f1") == "insp-9"
        assert backend.body(backend.requests[0]) == {"farmId": "f1"}

    def test_create_falls_back_to_id(self, backend, gateway):
        backend.add("POST", "inspection", json={"data": {"id": 42}})

        assert gateway.create_inspection("f1") == "42"

    def test_zero_is_a_valid_id(self, backend, gateway):
        backend.add("POST", "inspection", json={"data": {"inspectionId": 0, "id": 99}})

        assert gateway.create_inspection("f1") == "0"

    def test_create_without_id_is_malformed(self, backend, gateway):
        backend.add("POST", "inspection", json={"data": {}, "message": "created"})

        with pytest.raises(GatewayResponseError):
            gateway.create_inspection("f1")

    def test_checklist_accepts_paged_shape(self, backend, gateway):
        backend.add(
            "GET",
            "checklists/inspection/insp-1",
            json={"data": {"content": [{"id": "c1", "question": "Soil tested?"}]}},
        )

        assert gateway.fetch_checklist("insp-1") == [{"id": "c1", "question": "Soil tested?"}]

    def test_completion_action_is_configurable(self, backend):
        backend.add("POST", "inspection/insp-1/finalize", json={})

        with backend.client(completion_action="finalize") as gateway:
            gateway.complete_inspection("insp-1", [{"checklistId": "c1", "answer": True}])

        request = backend.calls("POST", "inspection/insp-1/finalize")[0]
        assert backend.body(request) == [{"checklistId": "c1", "answer": True}]

    def test_update_sends_patch(self, backend, gateway):
        backend.add("PATCH", "inspection/insp-1", json={})

        gateway.update_inspection("insp-1", {"inspectorName": "Jane Doe"})

        assert backend.body(backend.calls("PATCH", "inspection/insp-1")[0]) == {"inspectorName": "Jane Doe"}
