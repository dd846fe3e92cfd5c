"""Scan one file with the library API instead of the command line.

Requires VTSCAN_API_KEY.

Usage:
    export VTSCAN_API_KEY=your-key
    python examples/scan_file.py suspicious.exe
"""

import asyncio
import sys

from vtscan import Report, Sample, ScannerConfig, VirusTotalClient, wait_for_report
from vtscan.report import format_report


async def main(path: str) -> None:
    config = ScannerConfig()
    sample = Sample.from_path(path)

    async with VirusTotalClient(config.api_key, sample, config=config) as vt:
        submission = await vt.scan_sample_async()
        print(f"Submitted {sample.filename}: {submission.get('permalink', '')}")

        result = await wait_for_report(vt.retrieve_report_async, delay=30, max_wait=900)

    if result.timed_out:
        print(f"No report after {result.elapsed:.0f}s, check the link above later.")
        return
    print(format_report(Report.from_dict(result.report), sample.filename))


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else __file__))
