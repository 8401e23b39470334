from unittest.mock import MagicMock, patch

import pytest
import requests

from api_service import (
    ApiConnectionError,
    ApiError,
    MarketplaceApi,
    UnauthorizedError,
    handle_api_error,
    items_of,
)


def _response(status_code=200, json_data=None, text=""):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.reason = "reason"
    if json_data is not None:
        response.json.return_value = json_data
        response.content = b"{}"
        response.text = "{}"
    else:
        response.json.side_effect = ValueError("no json")
        response.content = text.encode()
        response.text = text
    return response


def _api(*responses, max_retries=3):
    http = MagicMock(spec=requests.Session)
    http.request.side_effect = list(responses)
    return MarketplaceApi(base_url="http://api.test/", token="abc", max_retries=max_retries, base_delay=0, session=http), http


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("api_service.time.sleep") as sleep:
        yield sleep


def test_get_sends_bearer_token_and_drops_empty_params():
    api, http = _api(_response(200, {"id": 1}))
    assert api.get("/products/1", params={"category": None, "limit": 10}) == {"id": 1}
    method, url = http.request.call_args.args
    kwargs = http.request.call_args.kwargs
    assert (method, url) == ("GET", "http://api.test/products/1")
    assert kwargs["headers"]["Authorization"] == "Bearer abc"
    assert kwargs["params"] == {"limit": 10}


def test_no_authorization_header_without_token():
    api, http = _api(_response(200, {}))
    api.with_token(None).get("/subscription/plans")
    assert "Authorization" not in http.request.call_args.kwargs["headers"]


def test_get_retries_on_gateway_errors(no_sleep):
    api, http = _api(_response(503, {"detail": "busy"}), _response(502, {}), _response(200, [1, 2]))
    assert api.get("/orders") == [1, 2]
    assert http.request.call_count == 3
    assert no_sleep.call_count == 2


def test_post_is_not_retried():
    api, http = _api(_response(503, {"detail": "busy"}), _response(200, {}))
    with pytest.raises(ApiError) as exc:
        api.post("/orders", json={})
    assert exc.value.status_code == 503
    assert http.request.call_count == 1


def test_connection_errors_become_api_connection_error():
    api, http = _api(*[requests.exceptions.ConnectionError("down")] * 3)
    with pytest.raises(ApiConnectionError):
        api.get("/products")
    assert http.request.call_count == 3


def test_unauthorized_is_raised_without_retry():
    api, http = _api(_response(401, {"detail": "Could not validate credentials"}))
    with pytest.raises(UnauthorizedError):
        api.get("/users/me")
    assert http.request.call_count == 1


def test_empty_body_returns_none():
    api, _ = _api(_response(204, text=""))
    assert api.delete("/products/1") is None


def test_handle_api_error_formats_validation_details():
    error = ApiError(422, [{"loc": ["body", "price"], "msg": "must be positive"}, {"loc": [], "msg": "bad"}])
    assert handle_api_error(error) == "price: must be positive; bad"
    assert handle_api_error(ApiError(400, "SKU ja existe")) == "SKU ja existe"
    assert handle_api_error(ApiError(500, None)) == "Erro desconhecido"
    assert handle_api_error(ApiConnectionError("timeout")) == "Erro de conexao"
    assert handle_api_error(ValueError("boom")) == "boom"


def test_items_of_accepts_envelopes():
    assert items_of([1]) == [1]
    assert items_of({"items": [2]}) == [2]
    assert items_of({"results": [3]}) == [3]
    assert items_of({"total": 0}) == []
    assert items_of(None) == []
