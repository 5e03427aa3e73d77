"""Spreadsheet proxy API client.

The proxy accepts a single verb on a single endpoint. The logical operation
(GET/POST/PUT/DELETE) and the target sheet travel inside a flat JSON
envelope, so every call is an HTTP POST of ``{sheetName, method, ...fields}``.
Whatever happens on the wire, callers get a ``ProxyResult`` back: transport
failures, HTTP errors, unreadable bodies and proxy-reported errors are all
folded into ``status="error"`` with a readable message.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

import httpx
import structlog

from hitek.config import AppConfig
from hitek.models import ErrorKind, Operation, Resource

logger = structlog.get_logger(__name__)

RESOURCE_FIELD = "sheetName"
OPERATION_FIELD = "method"
LOGIN_OPERATION = "LOGIN"

SUCCESS = "success"
ERROR = "error"


@dataclass(slots=True)
class ProxyResult:
    """Uniform outcome of one proxy call."""

    status: str
    data: Any = None
    message: str | None = None
    error_kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    @classmethod
    def success(cls, data: Any = None, message: str | None = None) -> ProxyResult:
        return cls(status=SUCCESS, data=data, message=message)

    @classmethod
    def error(cls, message: str, kind: ErrorKind) -> ProxyResult:
        return cls(status=ERROR, message=message, error_kind=kind)


class SheetClient:
    """Client for the spreadsheet proxy endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url:
            raise ValueError("SHEET_API_URL environment variable not set")

        self.base_url = base_url
        self.client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_config(
        cls, config: AppConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> SheetClient:
        return cls(
            config.proxy.url,
            timeout=config.proxy.timeout_seconds,
            transport=transport,
        )

    async def send(
        self,
        resource: Resource | str,
        operation: Operation | str,
        payload: Mapping[str, Any] | None = None,
    ) -> ProxyResult:
        """Send one logical operation against one sheet.

        Raises:
            ValueError: If ``resource`` or ``operation`` is not a known value.
        """
        resource = Resource(resource)
        operation = Operation(operation)
        envelope = {
            RESOURCE_FIELD: resource.value,
            OPERATION_FIELD: operation.value,
            **(payload or {}),
        }
        return await self._post(envelope, resource=resource.value, operation=operation.value)

    async def login(self, username: str, password: str) -> ProxyResult:
        """Check credentials against the proxy's user sheet."""
        envelope = {
            OPERATION_FIELD: LOGIN_OPERATION,
            "username": username,
            "password": password,
        }
        return await self._post(envelope, resource="Users", operation=LOGIN_OPERATION)

    async def _post(self, envelope: dict[str, Any], **context: str) -> ProxyResult:
        log = logger.bind(**context)
        log.debug("proxy_request")

        try:
            response = await self.client.post(self.base_url, json=envelope)
        except httpx.RequestError as exc:
            detail = str(exc) or type(exc).__name__
            log.error("proxy_request_failed", error=detail)
            return ProxyResult.error(
                f"Could not reach the data service: {detail}", ErrorKind.TRANSPORT
            )
        except ValueError as exc:
            # NaN and infinity have no JSON encoding
            log.error("proxy_request_unencodable", error=str(exc))
            return ProxyResult.error(
                f"The request could not be encoded: {exc}", ErrorKind.VALIDATION
            )

        if not response.is_success:
            log.error("proxy_http_error", status_code=response.status_code)
            return ProxyResult.error(
                f"Could not reach the data service: HTTP error {response.status_code}",
                ErrorKind.TRANSPORT,
            )

        try:
            body = response.json()
            # Some deployments double-encode the body as a JSON string
            if isinstance(body, str):
                body = json.loads(body)
        except ValueError:
            log.error("proxy_unreadable_body", content_type=response.headers.get("content-type"))
            return ProxyResult.error(
                "The data service returned an unreadable response.", ErrorKind.DATA_SHAPE
            )

        if not isinstance(body, dict):
            log.error("proxy_unexpected_body", body_type=type(body).__name__)
            return ProxyResult.error(
                "The data service returned an unexpected response.", ErrorKind.DATA_SHAPE
            )

        if body.get("status") != SUCCESS:
            message = body.get("message") or "Unknown error."
            log.warning("proxy_reported_error", message=message)
            return ProxyResult.error(str(message), ErrorKind.REMOTE)

        return ProxyResult.success(body.get("data"), body.get("message"))

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> SheetClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
