"""Typed views over VirusTotal v2 JSON responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Report response codes
RESPONSE_NOT_PRESENT = 0
RESPONSE_READY = 1
RESPONSE_QUEUED = -2

PENDING_CODES = frozenset({RESPONSE_NOT_PRESENT, RESPONSE_QUEUED})


@dataclass
class ScanSubmission:
    """Result of uploading a sample to /file/scan."""

    verbose_msg: str = ""
    md5: str = ""
    sha256: str = ""
    permalink: str = ""
    resource: str = ""
    scan_id: str = ""
    response_code: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanSubmission:
        return cls(
            verbose_msg=str(data.get("verbose_msg") or ""),
            md5=str(data.get("md5") or ""),
            sha256=str(data.get("sha256") or ""),
            permalink=str(data.get("permalink") or ""),
            resource=str(data.get("resource") or ""),
            scan_id=str(data.get("scan_id") or ""),
            response_code=_as_int(data.get("response_code")),
        )


@dataclass
class EngineResult:
    """One antivirus engine's verdict on a sample."""

    engine: str
    detected: bool
    version: str = ""
    result: str = ""
    update: str = ""


@dataclass
class Report:
    """Result of /file/report for a resource."""

    response_code: int | None
    verbose_msg: str = ""
    positives: int = 0
    total: int = 0
    sha256: str = ""
    md5: str = ""
    permalink: str = ""
    scan_date: str = ""
    scans: list[EngineResult] = field(default_factory=list)

    @property
    def is_ready(self) -> bool:
        return self.response_code == RESPONSE_READY

    @property
    def is_pending(self) -> bool:
        return self.response_code in PENDING_CODES

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        scans = [
            EngineResult(
                engine=str(engine),
                detected=bool(info.get("detected")),
                version=str(info.get("version") or ""),
                result=str(info.get("result") or ""),
                update=str(info.get("update") or ""),
            )
            for engine, info in (data.get("scans") or {}).items()
            if isinstance(info, dict)
        ]
        return cls(
            response_code=_as_int(data.get("response_code")),
            verbose_msg=str(data.get("verbose_msg") or ""),
            positives=_as_int(data.get("positives")) or 0,
            total=_as_int(data.get("total")) or 0,
            sha256=str(data.get("sha256") or ""),
            md5=str(data.get("md5") or ""),
            permalink=str(data.get("permalink") or ""),
            scan_date=str(data.get("scan_date") or ""),
            scans=scans,
        )


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
