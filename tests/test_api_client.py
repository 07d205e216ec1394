import pytest
import requests

from api_client import ApiClient, ApiError, AuthGateway

from conftest import FakeHttpSession, make_response


def client_with(*responses):
    http = FakeHttpSession(*responses)
    return ApiClient("http://backend:8001/", timeout=5, session=http), http


def test_requires_base_url():
    with pytest.raises(ValueError):
        ApiClient("")


def test_bearer_header_only_with_token():
    client, http = client_with(make_response(body={"ok": True}), make_response(body=[]))

    assert client.get("/api/parameters", token="abc") == {"ok": True}
    assert client.get("/api/setup/status") == []

    assert http.requests[0]["headers"] == {"Authorization": "Bearer abc"}
    assert http.requests[0]["url"] == "http://backend:8001/api/parameters"
    assert http.requests[0]["timeout"] == 5
    assert http.requests[1]["headers"] == {}


def test_error_detail_string():
    client, _ = client_with(make_response(401, {"detail": "Matrícula ou senha inválidos"}))

    with pytest.raises(ApiError) as info:
        client.post("/api/auth/login", json={})

    assert info.value.status_code == 401
    assert info.value.detail == "Matrícula ou senha inválidos"
    assert info.value.is_auth_rejection
    assert info.value.user_message("fallback") == "Matrícula ou senha inválidos"


def test_error_detail_validation_list():
    body = {"detail": [{"loc": ["body", "matricula"], "msg": "field required"}]}
    client, _ = client_with(make_response(422, body))

    with pytest.raises(ApiError) as info:
        client.post("/api/users", token="t", json={})

    assert info.value.detail == "field required"
    assert not info.value.is_auth_rejection


def test_error_without_json_body_uses_fallback():
    client, _ = client_with(make_response(500, raw=b"Internal Server Error"))

    with pytest.raises(ApiError) as info:
        client.get("/api/dashboard/summary", token="t")

    assert info.value.detail is None
    assert info.value.user_message("Erro ao carregar") == "Erro ao carregar"


def test_transport_failure_is_wrapped():
    client, _ = client_with(requests.ConnectionError("refused"))

    with pytest.raises(ApiError) as info:
        client.get("/api/auth/me", token="t")

    assert info.value.status_code is None
    assert isinstance(info.value.__cause__, requests.ConnectionError)


def test_empty_body_returns_none():
    client, http = client_with(make_response(200))

    assert client.patch("/api/notifications/1/read", token="t") is None
    assert http.requests[0]["method"] == "PATCH"


def test_gateway_login():
    client, http = client_with(make_response(body={"token": "jwt", "user": {"matricula": "OPR001"}}))

    token, user = AuthGateway(client).login("OPR001", "secret")

    assert token == "jwt"
    assert user == {"matricula": "OPR001"}
    assert http.requests[0]["json"] == {"matricula": "OPR001", "password": "secret"}
    assert http.requests[0]["headers"] == {}


def test_gateway_login_without_token_fails():
    client, _ = client_with(make_response(body={"user": {}}))

    with pytest.raises(ApiError):
        AuthGateway(client).login("OPR001", "secret")


def test_gateway_whoami_and_setup():
    client, http = client_with(
        make_response(body={"id": "u1", "role": "operator"}),
        make_response(body={"needs_setup": True}),
        make_response(body={"matricula": "ADM001", "senha_inicial": "x", "aviso": "y"}),
    )
    gateway = AuthGateway(client)

    assert gateway.whoami("jwt")["role"] == "operator"
    assert gateway.get_setup_status() is True
    assert gateway.create_initial_admin()["matricula"] == "ADM001"
    assert http.requests[0]["headers"] == {"Authorization": "Bearer jwt"}
    assert http.requests[2]["url"].endswith("/api/setup/admin")
