import logging
import os
from typing import Any, Dict, Optional

import httpx

from .session import Session

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class ApiClient:
    """
    블로그 API용 HTTP 클라이언트.
    모든 요청에 Session의 토큰을 Bearer 헤더로 붙이고, 2xx가 아닌 응답은 ApiError로 올립니다.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[Session] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = (base_url or os.getenv("BLOG_API_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.session = session or Session()
        self._http = httpx.Client(transport=transport, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if extra:
            headers.update(extra)
        token = self.session.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._http.request(method, url, json=json, params=params, headers=self._headers(headers))
        except httpx.HTTPError as e:
            logger.error(f"API request failed: {method} {url}: {e}")
            raise

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = None
            if isinstance(data, dict):
                message = data.get("error")
            message = message or f"HTTP error! status: {response.status_code}"
            logger.error(f"API request failed: {method} {url}: {message}")
            raise ApiError(response.status_code, message)
        return data

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return self.request("GET", endpoint, params=params, **kwargs)

    def post(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return self.request("POST", endpoint, json=data, **kwargs)

    def put(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return self.request("PUT", endpoint, json=data, **kwargs)

    def delete(self, endpoint: str, **kwargs) -> Any:
        return self.request("DELETE", endpoint, **kwargs)
