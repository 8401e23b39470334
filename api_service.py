# api_service.py
import time
import random
from typing import Any, Dict, Optional

import requests

from config import settings
from utils import get_logger

logger = get_logger("api")

RETRYABLE_STATUS = {502, 503, 504}
IDEMPOTENT_METHODS = {"GET", "PUT", "DELETE"}


class ApiError(Exception):
    """Non-2xx answer from the Marketplace REST API."""

    def __init__(self, status_code: int, detail: Any = None, payload: Any = None):
        self.status_code = status_code
        self.detail = detail
        self.payload = payload
        super().__init__(f"API error {status_code}: {detail}")


class UnauthorizedError(ApiError):
    pass


class ApiConnectionError(ApiError):
    def __init__(self, detail: Any = None):
        super().__init__(0, detail)


def _extract_detail(response: requests.Response) -> Any:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason
    if isinstance(data, dict):
        return data.get("detail") or data.get("message") or data
    return data


def _detail_to_text(detail: Any) -> Optional[str]:
    if detail is None or detail == "":
        return None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        # FastAPI validation errors: [{"loc": [...], "msg": "...", ...}]
        parts = []
        for item in detail:
            if isinstance(item, dict):
                loc = ".".join(str(p) for p in item.get("loc", []) if p != "body")
                msg = item.get("msg") or str(item)
                parts.append(f"{loc}: {msg}" if loc else msg)
            else:
                parts.append(str(item))
        return "; ".join(parts) or None
    if isinstance(detail, dict):
        return detail.get("detail") or detail.get("message") or str(detail)
    return str(detail)


def handle_api_error(error: Exception) -> str:
    """Message shown to the merchant for a failed API call."""
    if isinstance(error, ApiConnectionError):
        return "Erro de conexao"
    if isinstance(error, ApiError):
        return _detail_to_text(error.detail) or "Erro desconhecido"
    if str(error):
        return str(error)
    return "Erro de conexao"


class MarketplaceApi:
    def __init__(
        self,
        base_url: str = None,
        token: Optional[str] = None,
        timeout: float = None,
        max_retries: int = None,
        base_delay: float = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.max_retries = max(1, max_retries if max_retries is not None else settings.max_retries)
        self.base_delay = base_delay if base_delay is not None else settings.retry_base_delay
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json", "Accept": "application/json"}

    def with_token(self, token: Optional[str]) -> "MarketplaceApi":
        return MarketplaceApi(
            base_url=self.base_url,
            token=token,
            timeout=self.timeout,
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            session=self.session,
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = dict(self.headers)
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _sleep_before_retry(self, attempt: int) -> None:
        time.sleep(self.base_delay * (2 ** attempt) + random.uniform(0, 1))

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        method = method.upper()
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        attempts = self.max_retries if method in IDEMPOTENT_METHODS else 1
        url = self._url(path)

        for attempt in range(attempts):
            try:
                response = self.session.request(
                    method, url, headers=self._headers(), params=params or None, json=json, timeout=self.timeout
                )
            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                if attempt < attempts - 1:
                    logger.info("[api] %s %s failed (%s), retry %d/%d", method, path, e, attempt + 1, attempts - 1)
                    self._sleep_before_retry(attempt)
                    continue
                logger.warning("[api] %s %s unreachable: %s", method, path, e)
                raise ApiConnectionError(str(e)) from e

            if response.status_code in RETRYABLE_STATUS and attempt < attempts - 1:
                logger.info("[api] %s %s -> %d, retry %d/%d", method, path, response.status_code, attempt + 1, attempts - 1)
                self._sleep_before_retry(attempt)
                continue

            if response.status_code == 401:
                raise UnauthorizedError(401, _extract_detail(response))
            if response.status_code >= 400:
                detail = _extract_detail(response)
                logger.warning("[api] %s %s -> %d: %s", method, path, response.status_code, detail)
                raise ApiError(response.status_code, detail, payload=response.text)

            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                return response.text

        raise ApiConnectionError("Max retries reached. Could not complete the API request.")

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, params=params, json=json)

    def put(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("PUT", path, params=params, json=json)

    def delete(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("DELETE", path, params=params, json=json)


def items_of(data: Any) -> list:
    """List endpoints answer either a bare list or a paginated envelope."""
    if data is None:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("items", "results", "data"):
            if isinstance(data.get(key), list):
                return data[key]
    return []
