import json
from unittest.mock import Mock

import pytest
import requests

from barberpro.core.errors import AuthAdminError, BackendUnavailableError, MissingDependencyError
from barberpro.services.auth_admin import AuthAdminClient, is_already_registered, is_transient_create_error

pytestmark = pytest.mark.unit


def make_response(status_code=200, body=None):
    r = Mock()
    r.status_code = status_code
    r.content = json.dumps(body).encode() if body is not None else b""
    r.text = r.content.decode()
    r.reason = "reason"
    r.json.return_value = body
    return r


def user_payload(email, user_id="11111111-1111-1111-1111-111111111111"):
    return {"id": user_id, "email": email, "user_metadata": {"role": "admin"}}


@pytest.fixture
def http():
    return Mock()


@pytest.fixture
def client(http):
    return AuthAdminClient(
        "https://example.supabase.co/auth/v1/",
        service_key="service-key",
        anon_key="anon-key",
        page_size=2,
        session=http,
    )


def test_find_user_by_email_pages_until_exact_match(client, http):
    http.request.side_effect = [
        make_response(body={"users": [user_payload("a@x.com", "1"), user_payload("admin@barberpro.com.br", "2")]}),
        make_response(body={"users": [user_payload("Admin@BarberPro.com", "3")]}),
    ]

    user = client.find_user_by_email("admin@barberpro.com")

    assert user.id == "3"
    assert user.email == "admin@barberpro.com"
    pages = [c.kwargs["params"]["page"] for c in http.request.call_args_list]
    assert pages == [1, 2]
    assert http.request.call_args_list[0].kwargs["params"]["filter"] == "admin@barberpro.com"


def test_find_user_by_email_not_found(client, http):
    http.request.return_value = make_response(body={"users": []})

    assert client.find_user_by_email("nobody@barberpro.com") is None


def test_requests_use_service_key(client, http):
    http.request.return_value = make_response(body={"users": []})

    client.list_users()

    method, url = http.request.call_args.args
    headers = http.request.call_args.kwargs["headers"]
    assert method == "GET"
    assert url == "https://example.supabase.co/auth/v1/admin/users"
    assert headers["apikey"] == "service-key"
    assert headers["Authorization"] == "Bearer service-key"


def test_create_user_unwraps_user(client, http):
    http.request.return_value = make_response(body={"user": user_payload("barber@barberpro.com")})

    user = client.create_user("barber@barberpro.com", "barber123", {"role": "barber"})

    assert user.email == "barber@barberpro.com"
    sent = http.request.call_args.kwargs["json"]
    assert sent["email_confirm"] is True
    assert sent["user_metadata"] == {"role": "barber"}


def test_rejected_service_key_is_a_missing_dependency(client, http):
    http.request.return_value = make_response(401, {"msg": "Invalid API key"})

    with pytest.raises(MissingDependencyError) as exc:
        client.list_users()
    assert "SUPABASE_SERVICE_ROLE_KEY" in str(exc.value)


def test_api_errors_carry_status_and_message(client, http):
    http.request.return_value = make_response(500, {"msg": "Database error creating new user"})

    with pytest.raises(AuthAdminError) as exc:
        client.create_user("a@x.com", "secret1")

    assert exc.value.status_code == 500
    assert is_transient_create_error(exc.value)
    assert not is_already_registered(exc.value)


def test_network_errors_mean_backend_unavailable(client, http):
    http.request.side_effect = requests.ConnectionError("boom")

    with pytest.raises(BackendUnavailableError):
        client.delete_user("1")


def test_delete_user_accepts_empty_body(client, http):
    http.request.return_value = make_response(204)

    assert client.delete_user("1") is None
    assert http.request.call_args.args == ("DELETE", "https://example.supabase.co/auth/v1/admin/users/1")


def test_sign_in_uses_anon_key_and_password_grant(client, http):
    http.request.return_value = make_response(
        body={
            "access_token": "token",
            "refresh_token": "refresh",
            "expires_in": 3600,
            "user": user_payload("cliente@barberpro.com"),
        }
    )

    tokens = client.sign_in_with_password("cliente@barberpro.com", "client123")

    assert tokens.access_token == "token"
    assert tokens.user.email == "cliente@barberpro.com"
    kwargs = http.request.call_args.kwargs
    assert http.request.call_args.args[1].endswith("/auth/v1/token")
    assert kwargs["params"] == {"grant_type": "password"}
    assert kwargs["headers"]["apikey"] == "anon-key"


def test_bad_credentials_are_not_a_key_problem(client, http):
    http.request.return_value = make_response(400, {"error_description": "Invalid login credentials"})

    with pytest.raises(AuthAdminError) as exc:
        client.sign_in_with_password("cliente@barberpro.com", "wrong-pass")
    assert exc.value.message == "Invalid login credentials"
