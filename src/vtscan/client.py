"""VirusTotal public API (v2) client for file scanning.

VirusTotal uses a submit-then-poll pattern:
1. Upload the sample via a hand-built multipart/form-data POST
2. Request the report by the sample's SHA-256 until it is ready
3. Hand the decoded JSON back to the caller

Auth is passed as a form parameter (not a header), and responses are JSON.

Usage:
    from vtscan import Sample, VirusTotalClient

    with VirusTotalClient(api_key, Sample.from_path("suspicious.exe")) as vt:
        submission = vt.scan_sample()
        report = vt.retrieve_report()
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from urllib.parse import urlencode

from vtscan.config import ScannerConfig
from vtscan.exceptions import RateLimitError, UnauthorizedError
from vtscan.multipart import DEFAULT_BOUNDARY, build_upload_body, content_type
from vtscan.sample import Sample
from vtscan.transport import AiohttpTransport, Transport

logger = logging.getLogger("vtscan.client")

SCAN_PATH = "/vtapi/v2/file/scan"
REPORT_PATH = "/vtapi/v2/file/report"


class VirusTotalClient:
    """Client for one sample against the VirusTotal file API."""

    def __init__(
        self,
        api_key: str,
        sample: Sample,
        *,
        transport: Transport | None = None,
        config: ScannerConfig | None = None,
        boundary: str = DEFAULT_BOUNDARY,
    ) -> None:
        self._api_key = api_key
        self._sample = sample
        self._boundary = boundary

        if transport is None:
            config = config or ScannerConfig()
            transport = AiohttpTransport(
                host=config.host,
                fallback_ip=config.fallback_ip,
                port=config.port,
                timeout=config.request_timeout,
            )
        self._transport = transport

    @property
    def sample(self) -> Sample:
        return self._sample

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def scan_sample_async(self) -> dict[str, Any]:
        """Submit the sample for scanning.

        Returns:
            Decoded JSON response, or an empty dict if nothing usable came back.

        Raises:
            RateLimitError: The request quota is used up (HTTP 204).
            UnauthorizedError: The API key was refused (HTTP 403).
        """
        body = build_upload_body(
            self._boundary, self._api_key, self._sample.filename, self._sample.data
        )
        logger.info(
            "Submitting %s to VirusTotal (%d bytes)", self._sample.filename, self._sample.size
        )
        return await self._execute_request(
            "POST",
            SCAN_PATH,
            {"Content-Type": content_type(self._boundary)},
            body,
        )

    async def retrieve_report_async(self) -> dict[str, Any]:
        """Fetch the report for the sample's SHA-256.

        Returns:
            Decoded JSON response, or an empty dict if nothing usable came back.

        Raises:
            RateLimitError: The request quota is used up (HTTP 204).
            UnauthorizedError: The API key was refused (HTTP 403).
        """
        body = urlencode({"apikey": self._api_key, "resource": self._sample.sha256})
        logger.debug("Requesting report for %s", self._sample.sha256[:16])
        return await self._execute_request(
            "POST",
            REPORT_PATH,
            {"Content-Type": "application/x-www-form-urlencoded"},
            body.encode("ascii"),
        )

    # ------------------------------------------------------------------
    # Sync wrappers
    # ------------------------------------------------------------------

    def scan_sample(self) -> dict[str, Any]:
        """Synchronous wrapper for scan_sample_async."""
        return _run_async(self._closing(self.scan_sample_async()))

    def retrieve_report(self) -> dict[str, Any]:
        """Synchronous wrapper for retrieve_report_async."""
        return _run_async(self._closing(self.retrieve_report_async()))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _execute_request(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: bytes,
    ) -> dict[str, Any]:
        res = await self._transport.send(method, path, headers, body)
        if res is None:
            logger.warning("No response for %s %s", method, path)
            return {}

        status, payload = res
        if status == 204:
            raise RateLimitError(
                "You have hit the request limit.",
                status_code=status,
                details={"path": path},
            )
        if status == 403:
            raise UnauthorizedError(
                "No privilege to execute this request, probably due to an invalid API key.",
                status_code=status,
                details={"path": path},
            )

        try:
            decoded = json.loads(payload)
        except (ValueError, UnicodeDecodeError):
            logger.warning(
                "Could not decode JSON from %s (HTTP %d): %r", path, status, payload[:200]
            )
            return {}

        if not isinstance(decoded, dict):
            logger.warning("Unexpected JSON from %s (HTTP %d): %r", path, status, decoded)
            return {}
        return decoded

    async def _closing(self, coro: Any) -> Any:
        # Each sync call runs on its own event loop, so the session can't outlive it
        try:
            return await coro
        finally:
            await self._transport.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close_async(self) -> None:
        await self._transport.close()

    def close(self) -> None:
        _run_async(self.close_async())

    def __enter__(self) -> VirusTotalClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    async def __aenter__(self) -> VirusTotalClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close_async()

    def __repr__(self) -> str:
        return f"VirusTotalClient(sample={self._sample.filename!r})"


def _run_async(coro: Any) -> Any:
    """Run an async coroutine from synchronous code."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        import concurrent.futures

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()
    else:
        return asyncio.run(coro)
