import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Something went wrong"


class ApiError(Exception):
    """Raised for any failed call to the QuickHelp backend.

    `message` is the server-supplied `message` field when the error body had
    one, otherwise FALLBACK_MESSAGE. `status_code` is None when the request
    never got a response (connection refused, timeout).
    """

    def __init__(self, message: str = FALLBACK_MESSAGE, status_code: Optional[int] = None, payload: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


def _error_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _drop_none(params: Optional[dict]) -> Optional[dict]:
    if params is None:
        return None
    return {k: v for k, v in params.items() if v is not None}


class ApiClient:
    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    def _headers(self, headers: Optional[dict] = None, json_body: bool = True) -> dict:
        merged = {"Content-Type": "application/json"} if json_body else {}
        if self.token:
            merged["Authorization"] = f"Bearer {self.token}"
        merged.update(headers or {})
        return merged

    def _handle(self, method: str, url: str, response: httpx.Response) -> Any:
        if not response.is_success:
            body = _error_body(response)
            message = str(body.get("message") or FALLBACK_MESSAGE)
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
            raise ApiError(message, response.status_code, body)

        # DELETE endpoints answer 204 with no body
        if response.status_code == 204:
            return {}

        try:
            return response.json()
        except ValueError:
            logger.warning("%s %s -> %s: unreadable body", method, url, response.status_code)
            raise ApiError(FALLBACK_MESSAGE, response.status_code)

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ApiError() from e

    async def request(self, endpoint: str, method: str = "GET", body: Any = None, headers: Optional[dict] = None, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{endpoint}"
        kwargs = {"headers": self._headers(headers), "params": _drop_none(params)}
        if body is not None and method != "GET":
            kwargs["json"] = body

        logger.debug("%s %s", method, url)
        response = await self._send(method, url, **kwargs)
        return self._handle(method, url, response)

    async def get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        return await self.request(endpoint, "GET", params=params)

    async def post(self, endpoint: str, body: Any = None) -> Any:
        return await self.request(endpoint, "POST", body)

    async def put(self, endpoint: str, body: Any = None) -> Any:
        return await self.request(endpoint, "PUT", body)

    async def patch(self, endpoint: str, body: Any = None) -> Any:
        return await self.request(endpoint, "PATCH", body)

    async def delete(self, endpoint: str, body: Any = None) -> Any:
        return await self.request(endpoint, "DELETE", body)

    async def upload(self, endpoint: str, files: list, data: Optional[dict] = None) -> Any:
        """Multipart POST. `files` is a list of (field, (filename, content, content_type))."""
        url = f"{self.base_url}{endpoint}"
        # httpx sets the multipart boundary itself, so no JSON content type here
        response = await self._send("POST", url, headers=self._headers(json_body=False), files=files, data=_drop_none(data))
        return self._handle("POST", url, response)

    async def put_file(self, upload_url: str, content: bytes, content_type: str) -> None:
        # Pre-signed URLs carry their own auth, so no bearer token
        response = await self._send("PUT", upload_url, content=content, headers={"Content-Type": content_type})
        if not response.is_success:
            logger.warning("Upload to %s -> %s", upload_url.split("?")[0], response.status_code)
            raise ApiError("Failed to upload file", response.status_code)
