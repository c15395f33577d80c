#!/usr/bin/env python3
"""
HTTP transport for the admin REST backend
One aiohttp session, bearer auth resolved per call, errors mapped to ApiError subclasses
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Dict, Optional

import aiohttp

from admin_dashboard.dependencies.auth import AuthGuard, CredentialProvider
from admin_dashboard.exceptions import AuthenticationError, ServerError, TransportError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."
TIMEOUT_ERROR_MESSAGE = "The server took too long to respond. Please try again."


def extract_error_message(body: Any) -> Optional[str]:
    """Server-provided message from a structured error body, if any"""
    if not isinstance(body, dict):
        return None
    for key in ("message", "error", "detail"):
        value = body.get(key)
        if isinstance(value, dict):
            value = value.get("message")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _param_value(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ApiClient:
    """Authenticated JSON client for the dashboard backend"""

    def __init__(
        self,
        base_url: str,
        credentials: CredentialProvider,
        auth_guard: Optional[AuthGuard] = None,
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required (set ADMIN_API_BASE_URL)")
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.auth_guard = auth_guard
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "ApiClient":
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this client created it"""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
        """Drop parameters that were not supplied"""
        return {key: _param_value(value) for key, value in (params or {}).items() if value is not None}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        form: Optional[aiohttp.FormData] = None,
        error_message: str = GENERIC_ERROR_MESSAGE,
    ) -> Any:
        """
        Issue one request and return the decoded body.

        Raises:
            TransportError: connection failure or timeout
            AuthenticationError: HTTP 401 (the auth guard runs first)
            ServerError: any other non-2xx status
        """
        session = self._get_session()
        url = self.url(path)
        query = self.clean_params(params)

        headers = self.credentials.authorization_header()
        kwargs: Dict[str, Any] = {"headers": headers}
        if query:
            kwargs["params"] = query
        if form is not None:
            kwargs["data"] = form
        elif json_body is not None:
            kwargs["json"] = json_body

        logger.debug(f"➡️ {method} {url} params={query}")

        try:
            async with session.request(method, url, **kwargs) as response:
                status = response.status
                body = await self._read_body(response)
        except asyncio.TimeoutError as e:
            logger.error(f"⏱️ {method} {url} timed out after {self.timeout}s")
            raise TransportError(TIMEOUT_ERROR_MESSAGE) from e
        except aiohttp.ClientError as e:
            logger.error(f"❌ {method} {url} failed: {str(e)}")
            raise TransportError(NETWORK_ERROR_MESSAGE) from e

        logger.debug(f"⬅️ {method} {url} -> HTTP {status}")

        if status == 401:
            if self.auth_guard is not None:
                self.auth_guard.handle_unauthorized()
            raise AuthenticationError(
                extract_error_message(body) or "Authentication required",
                status_code=status,
                response_body=body,
            )

        if not 200 <= status < 300:
            message = extract_error_message(body) or error_message
            logger.warning(f"⚠️ {method} {url} -> HTTP {status}: {message}")
            raise ServerError(message, status_code=status, response_body=body)

        return body

    @staticmethod
    async def _read_body(response: aiohttp.ClientResponse) -> Any:
        text = await response.text()
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, json_body: Optional[Any] = None, **kwargs) -> Any:
        return await self.request("POST", path, json_body=json_body, **kwargs)

    async def put(self, path: str, json_body: Optional[Any] = None, **kwargs) -> Any:
        return await self.request("PUT", path, json_body=json_body, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)
