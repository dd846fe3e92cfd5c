"""HTTP transport for the VirusTotal API.

The client only needs one operation: send a request, get back the status and
raw body. ``AiohttpTransport`` implements it against a host resolved once at
construction. The connection goes to the resolved IP, while the Host header
and TLS server name stay pinned to the canonical hostname; VirusTotal answers
404 to any other Host.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import Protocol

import aiohttp

logger = logging.getLogger("vtscan.transport")


class Transport(Protocol):
    """Narrow HTTP interface used by ``VirusTotalClient``.

    ``send`` returns ``None`` when no response was received at all.
    """

    async def send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: bytes,
    ) -> tuple[int, bytes] | None: ...

    async def close(self) -> None: ...


def resolve_host(host: str, fallback_ip: str) -> str:
    """Resolve ``host`` to a dotted IPv4 address, or return ``fallback_ip``."""
    try:
        return socket.gethostbyname(host)
    except OSError as e:
        logger.warning("Could not resolve %s (%s), using %s", host, e, fallback_ip)
        return fallback_ip


class AiohttpTransport:
    """HTTPS transport built on aiohttp."""

    def __init__(
        self,
        host: str,
        fallback_ip: str,
        port: int = 443,
        timeout: int = 120,
    ) -> None:
        self.host = host
        self.port = port
        self.address = resolve_host(host, fallback_ip)
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None
        logger.debug("Using %s (%s) port %d", host, self.address, port)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
        return self._session

    def url_for(self, path: str) -> str:
        return f"https://{self.address}:{self.port}{path}"

    async def send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: bytes,
    ) -> tuple[int, bytes] | None:
        session = await self._get_session()
        request_headers = {**headers, "Host": self.host}

        try:
            async with session.request(
                method,
                self.url_for(path),
                headers=request_headers,
                data=body,
                server_hostname=self.host,
            ) as resp:
                payload = await resp.read()
                logger.debug("%s %s -> HTTP %d (%d bytes)", method, path, resp.status, len(payload))
                return resp.status, payload
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("No response from %s for %s %s: %s", self.host, method, path, e)
            return None

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
