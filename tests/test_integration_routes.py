from unittest.mock import MagicMock, patch

import requests


def _relay(json_data):
    response = MagicMock(spec=requests.Response)
    response.json.return_value = json_data
    return response


def test_ml_callback_saves_integration(auth_client, fake_api):
    token = {"seller_id": 555, "access_token": "APP-1", "refresh_token": "TG-1", "expires_in": 3600}
    with patch("routes.integrations.requests.get", return_value=_relay(token)) as get:
        response = auth_client.get("/ml-callback?seller_id=555", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/integrations"
    assert get.call_args[0][0].endswith("/auth/user/555")
    payload = fake_api.called("POST", "/ml-integration/save")[0][3]
    assert payload == {"seller_id": "555", "access_token": "APP-1", "refresh_token": "TG-1", "expires_in": 3600}


def test_ml_callback_accepts_user_id_and_defaults_expiry(auth_client, fake_api):
    with patch("routes.integrations.requests.get", return_value=_relay({"access_token": "APP-2"})) as get:
        auth_client.get("/ml-callback?user_id=777", follow_redirects=False)
    assert get.call_args[0][0].endswith("/auth/user/777")
    payload = fake_api.called("POST", "/ml-integration/save")[0][3]
    assert payload["seller_id"] == "777"
    assert payload["refresh_token"] == ""
    assert payload["expires_in"] == 21600


def test_ml_callback_without_seller_id(auth_client, fake_api):
    with patch("routes.integrations.requests.get") as get:
        response = auth_client.get("/ml-callback", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/integrations"
    get.assert_not_called()
    assert not fake_api.called("POST", "/ml-integration/save")


def test_ml_callback_relay_failure_saves_nothing(auth_client, fake_api):
    failing = MagicMock(spec=requests.Response)
    failing.raise_for_status.side_effect = requests.HTTPError("502 Bad Gateway")
    with patch("routes.integrations.requests.get", return_value=failing):
        response = auth_client.get("/ml-callback?seller_id=555", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/integrations"
    assert not fake_api.called("POST", "/ml-integration/save")


def test_ml_callback_relay_unreachable(auth_client, fake_api):
    with patch("routes.integrations.requests.get", side_effect=requests.ConnectionError("refused")):
        response = auth_client.get("/ml-callback?seller_id=555", follow_redirects=False)
    assert response.status_code == 303
    assert not fake_api.called("POST", "/ml-integration/save")
