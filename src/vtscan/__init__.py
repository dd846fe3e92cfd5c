"""Check files against VirusTotal's public analysis service."""

from vtscan.client import VirusTotalClient
from vtscan.config import ScannerConfig, ToolConfig
from vtscan.exceptions import (
    ConfigurationError,
    RateLimitError,
    SampleError,
    UnauthorizedError,
    VirusTotalAPIError,
    VTScanError,
)
from vtscan.models import EngineResult, Report, ScanSubmission
from vtscan.poller import PollOutcome, PollResult, wait_for_report
from vtscan.sample import Sample

__version__ = "0.1.0"

__all__ = [
    "VirusTotalClient",
    "ScannerConfig",
    "ToolConfig",
    "Sample",
    "ScanSubmission",
    "Report",
    "EngineResult",
    "PollOutcome",
    "PollResult",
    "wait_for_report",
    "VTScanError",
    "ConfigurationError",
    "SampleError",
    "VirusTotalAPIError",
    "RateLimitError",
    "UnauthorizedError",
]
