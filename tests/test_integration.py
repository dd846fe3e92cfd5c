"""Integration tests that talk to the live VirusTotal API.

These are skipped unless VTSCAN_API_KEY is set. The public API allows only
4 requests a minute, so run them on their own:

    VTSCAN_API_KEY=... pytest tests/test_integration.py -v
"""

import os
from pathlib import Path

from vtscan.client import VirusTotalClient
from vtscan.config import ScannerConfig
from vtscan.models import Report, ScanSubmission
from vtscan.sample import Sample
from tests.conftest import EICAR_BYTES, EICAR_SHA256, skip_no_api_key


@skip_no_api_key
class TestVirusTotalIntegration:
    def test_submit_eicar(self, tmp_path: Path) -> None:
        f = tmp_path / "eicar.com"
        f.write_bytes(EICAR_BYTES)
        config = ScannerConfig(_loaded=True)

        with VirusTotalClient(os.environ["VTSCAN_API_KEY"], Sample.from_path(f), config=config) as vt:
            submission = ScanSubmission.from_dict(vt.scan_sample())
            assert submission.sha256 == EICAR_SHA256
            assert submission.permalink

            report = Report.from_dict(vt.retrieve_report())
            assert report.response_code in (0, 1, -2)
