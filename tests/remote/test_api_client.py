import httpx
import pytest

from timekeeping.core.exceptions import RemoteRejectionError, TransientNetworkError
from timekeeping.remote.client import ApiClient


def _client(handler, **kwargs) -> ApiClient:
    return ApiClient("http://testserver/api", transport=httpx.MockTransport(handler), **kwargs)


def test_unwraps_success_envelope_and_sends_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"success": True, "data": [{"_id": "1"}], "message": "ok"})

    client = _client(handler, token="t0ken")
    envelope = client.get("/attendance", params={"employeeId": "EMP001"})

    assert envelope.data == [{"_id": "1"}]
    assert seen["auth"] == "Bearer t0ken"
    assert seen["url"] == "http://testserver/api/attendance?employeeId=EMP001"


def test_token_can_be_removed():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"success": True})

    client = _client(handler, token="t0ken")
    client.remove_auth_token()
    client.get("/health")

    assert seen["auth"] is None


@pytest.mark.parametrize("status", [500, 502, 503])
def test_server_errors_are_transient(status):
    client = _client(lambda request: httpx.Response(status, json={"success": False, "error": "boom"}))

    with pytest.raises(TransientNetworkError):
        client.post("/attendance", json={})


def test_connection_errors_are_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransientNetworkError):
        _client(handler).get("/attendance")


def test_timeouts_are_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransientNetworkError):
        _client(handler).get("/attendance")


def test_client_errors_are_rejections_with_detail():
    client = _client(lambda request: httpx.Response(409, json={"success": False, "error": "Already clocked in today"}))

    with pytest.raises(RemoteRejectionError) as exc:
        client.post("/attendance", json={})

    assert exc.value.status_code == 409
    assert exc.value.detail == "Already clocked in today"
    assert exc.value.is_conflict


def test_success_false_in_200_is_a_rejection():
    client = _client(lambda request: httpx.Response(200, json={"success": False, "message": "Invalid date"}))

    with pytest.raises(RemoteRejectionError) as exc:
        client.put("/attendance", json={})

    assert exc.value.detail == "Invalid date"


def test_empty_body_is_an_empty_envelope():
    envelope = _client(lambda request: httpx.Response(204)).delete("/attendance/1")
    assert envelope.success is True
    assert envelope.data is None


def test_is_reachable():
    assert _client(lambda request: httpx.Response(404, json={"error": "no route"})).is_reachable()

    def down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    assert not _client(down).is_reachable()
