"""Shared test fixtures for the vtscan test suite."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import pytest

from vtscan.config import ToolConfig
from vtscan.sample import Sample

# EICAR antivirus test string, exactly 68 bytes.
EICAR_BYTES = (
    b"X5O!P%@AP[4\\PZX54(P^)7CC)7}"
    b"$EICAR-STANDARD-ANTIVIRUS-TEST-FILE!$H+H*"
)
EICAR_SHA256 = "275a021bbfb6489e54d471899f7db9d1663fc695ec2fe2a2c4538aabf651fd0f"

SCAN_RESPONSE: dict[str, Any] = {
    "response_code": 1,
    "verbose_msg": "Scan request successfully queued, come back later for the report",
    "resource": EICAR_SHA256,
    "scan_id": f"{EICAR_SHA256}-1700000000",
    "md5": "44d88612fea8a8f36de82e1278abb02f",
    "sha256": EICAR_SHA256,
    "permalink": f"https://www.virustotal.com/file/{EICAR_SHA256}/analysis/1700000000/",
}

REPORT_PENDING: dict[str, Any] = {
    "response_code": -2,
    "resource": EICAR_SHA256,
    "verbose_msg": "Your resource is queued for analysis",
}

REPORT_NOT_PRESENT: dict[str, Any] = {
    "response_code": 0,
    "resource": EICAR_SHA256,
    "verbose_msg": "The requested resource is not among the finished, queued or pending scans",
}

REPORT_READY: dict[str, Any] = {
    "response_code": 1,
    "verbose_msg": "Scan finished, information embedded",
    "resource": EICAR_SHA256,
    "sha256": EICAR_SHA256,
    "md5": "44d88612fea8a8f36de82e1278abb02f",
    "permalink": f"https://www.virustotal.com/file/{EICAR_SHA256}/analysis/1700000000/",
    "scan_date": "2023-11-14 22:13:20",
    "positives": 2,
    "total": 3,
    "scans": {
        "Bkav": {"detected": False, "version": "1.3.0.9899", "result": None, "update": "20231114"},
        "ClamAV": {
            "detected": True,
            "version": "1.2.1.0",
            "result": "Win.Test.EICAR_HDB-1",
            "update": "20231114",
        },
        "Kaspersky": {
            "detected": True,
            "version": "22.0.1.28",
            "result": "EICAR-Test-File",
            "update": "20231114",
        },
    },
}


class FakeTransport:
    """Transport that replays scripted (status, body) responses and records requests."""

    def __init__(self, responses: list[tuple[int, Any] | None] | None = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[dict[str, Any]] = []
        self.closed = 0

    async def send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: bytes,
    ) -> tuple[int, bytes] | None:
        self.requests.append({"method": method, "path": path, "headers": headers, "body": body})
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {path}")
        res = self.responses.pop(0)
        if res is None:
            return None
        status, payload = res
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload).encode()
        return status, payload

    async def close(self) -> None:
        self.closed += 1


def ok(payload: Any) -> tuple[int, Any]:
    return 200, payload


@pytest.fixture
def eicar_file(tmp_path: Path) -> Path:
    f = tmp_path / "eicar.com"
    f.write_bytes(EICAR_BYTES)
    return f


@pytest.fixture
def eicar_sample(eicar_file: Path) -> Sample:
    return Sample.from_path(eicar_file)


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "vtscan" / "config.ini"


@pytest.fixture
def tool_config(config_path: Path) -> ToolConfig:
    return ToolConfig.from_file(config_path)


def has_real_api_key() -> bool:
    """Check if a real VirusTotal key is available for integration tests."""
    return bool(os.getenv("VTSCAN_API_KEY"))


skip_no_api_key = pytest.mark.skipif(
    not has_real_api_key(),
    reason="VTSCAN_API_KEY not set",
)
