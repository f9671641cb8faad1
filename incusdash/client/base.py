"""Async HTTP client for the Incus REST API."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import httpx

from incusdash.errors import RemoteCallError

logger = logging.getLogger("incusdash.client")

# Host part is ignored over the unix socket, which speaks plain HTTP.
SOCKET_BASE_URL = "http://incus"


class HypervisorClient:
    """Thin async wrapper around httpx. One round trip per call, no retries."""

    def __init__(
        self,
        base_url: str = "http://incus",
        *,
        api_prefix: str = "/1.0",
        timeout: float = 30.0,
        socket_path: str | None = None,
        cert: tuple[str, str] | None = None,
        verify: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = SOCKET_BASE_URL if socket_path else base_url.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self.timeout = timeout
        self.socket_path = socket_path
        self.cert = cert
        self.verify = verify
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config) -> HypervisorClient:
        """Build a client from an ``IncusDashConfig``."""
        return cls(
            config.api_url,
            api_prefix=config.api_prefix,
            timeout=config.timeout,
            socket_path=config.socket_path,
            cert=config.cert_pair(),
            verify=config.verify_tls,
        )

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            transport = self._transport
            if transport is None and self.socket_path:
                transport = httpx.AsyncHTTPTransport(uds=self.socket_path)
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self._ssl_verify(),
                transport=transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    def _ssl_verify(self) -> ssl.SSLContext | bool:
        """TLS settings; Incus authenticates clients by certificate."""
        if self.socket_path:
            return False
        if not self.cert:
            return self.verify
        ctx = ssl.create_default_context()
        if not self.verify:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        ctx.load_cert_chain(*self.cert)
        return ctx

    async def call(
        self,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        method: str = "GET",
        body: Any = None,
    ) -> Any:
        """Call ``path`` under the API prefix and return the unwrapped payload.

        Raises:
            RemoteCallError: On transport errors, non-2xx responses, and
                Incus ``error`` envelopes.
        """
        params = {k: v for k, v in (query or {}).items() if v is not None}
        url = f"{self.api_prefix}{path}"
        client = await self._ensure_client()
        try:
            resp = await client.request(method, url, params=params or None, json=body)
        except httpx.TimeoutException as exc:
            logger.warning("Timeout on %s %s", method, url)
            raise RemoteCallError(0, f"Request timed out: {method} {url}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Transport error on %s %s: %s", method, url, exc)
            raise RemoteCallError(0, f"Cannot reach hypervisor API: {exc}") from exc

        logger.debug("%s %s -> %d", method, url, resp.status_code)
        if not resp.is_success:
            message = _error_message(resp)
            logger.warning("API error %d on %s %s: %s", resp.status_code, method, url, message)
            raise RemoteCallError(resp.status_code, message)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            payload = resp.json()
        except ValueError as exc:
            raise RemoteCallError(resp.status_code, "Response is not valid JSON") from exc
        return _unwrap(payload)

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HypervisorClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def _unwrap(payload: Any) -> Any:
    """Strip the Incus response envelope, if there is one."""
    if not isinstance(payload, dict) or "type" not in payload:
        return payload
    kind = payload.get("type")
    if kind == "error":
        raise RemoteCallError(
            int(payload.get("error_code") or 0),
            payload.get("error") or "Unknown error",
        )
    if kind in ("sync", "async"):
        return payload.get("metadata")
    return payload


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(data, dict):
        return str(data.get("error") or data.get("detail") or resp.text)
    return resp.text
