"""Command-line driver: upload files to VirusTotal and print their reports.

Usage:
    vtscan -k <api key> -f "sample1.exe sample2.pdf"
    vtscan -d 30 -f suspicious.doc

The public API allows 4 requests of any kind per minute, so at most 4 files
are accepted per run and the report is polled every 60 seconds by default.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import re
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from vtscan.client import VirusTotalClient
from vtscan.config import ScannerConfig, ToolConfig
from vtscan.exceptions import SampleError, VirusTotalAPIError, VTScanError
from vtscan.models import Report, ScanSubmission
from vtscan.poller import wait_for_report
from vtscan.report import render_report, report_header
from vtscan.sample import Sample
from vtscan.transport import Transport

logger = logging.getLogger("vtscan")

TERMS_URL = "https://www.virustotal.com/en/about/terms-of-service/"

PRIVACY_WARNING = (
    "WARNING: When you upload or otherwise submit content, you give VirusTotal",
    "(and those we work with) a worldwide, royalty free, irrevocable and transferable",
    "licence to use, edit, host, store, reproduce, modify, create derivative works,",
    "communicate, publish, publicly perform, publicly display and distribute such",
    "content. To read the complete Terms of Service for VirusTotal, please go to the",
    "following link:",
    TERMS_URL,
    "",
    "If you have not obtained an API key, you may also get one free of charge at the",
    "official website of VirusTotal.",
)

AFFIRMATIVE = frozenset({"y", "yes"})


class UsageError(Exception):
    """Bad command-line input."""


class _OptionParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


@dataclass
class Options:
    samples: list[str] = field(default_factory=list)
    api_key: str = ""
    delay: int = 60
    verbose: bool = False


class DriverBase:
    """Status and error output shared by the option parser and the driver."""

    def __init__(self, console: Console | None = None, err_console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def print_status(self, msg: str = "") -> None:
        self.console.print(f"[*] {msg}", markup=False, soft_wrap=True)

    def print_error(self, msg: str = "") -> None:
        self.err_console.print(f"[-] {msg}", markup=False, soft_wrap=True)

    def fail(self, msg: str) -> None:
        self.print_error(msg)
        raise SystemExit(1)


class OptsConsole(DriverBase):
    """Parse and validate command-line arguments."""

    def __init__(self, max_samples: int = 4, **kwargs: Console | None) -> None:
        super().__init__(**kwargs)
        self.max_samples = max_samples

    def build_parser(self) -> argparse.ArgumentParser:
        parser = _OptionParser(
            prog="vtscan",
            description="Check files against VirusTotal's public analysis service.",
        )
        parser.add_argument("-k", dest="api_key", metavar="<key>", help="VirusTotal API key to use")
        parser.add_argument(
            "-d",
            dest="delay",
            metavar="<seconds>",
            help="Number of seconds to wait between report requests (default: 60)",
        )
        parser.add_argument(
            "-f",
            dest="files",
            metavar="<filenames>",
            nargs="+",
            help='Files to scan, space separated: -f "a.exe b.pdf"',
        )
        parser.add_argument(
            "-v", dest="verbose", action="store_true", help="Show debug logging"
        )
        return parser

    def parse(self, args: Sequence[str]) -> Options:
        if not args:
            self.fail("No options specified, try -h for usage")

        parser = self.build_parser()
        try:
            ns = parser.parse_args(list(args))
        except UsageError as e:
            logger.debug("Argument error: %s", e)
            self.fail("Invalid option, try -h for usage")

        options = Options(api_key=ns.api_key or "", verbose=ns.verbose)

        if ns.delay is not None:
            if not re.fullmatch(r"[0-9]+", ns.delay):
                self.fail("Invalid input for -d. It must be a number.")
            options.delay = int(ns.delay)

        files = [f for value in ns.files or [] for f in value.split()]
        if not files:
            self.fail("No files specified, try -h for usage")

        bad_files = [f for f in files if not Path(f).exists()]
        if bad_files:
            self.fail(f"Cannot find: {' '.join(bad_files)}")

        if len(files) > self.max_samples:
            self.fail(f"Sorry, I can only allow {self.max_samples} files at a time.")

        options.samples = files
        return options


class Driver(DriverBase):
    """Runs the consent gate, resolves the API key and scans each sample in turn."""

    def __init__(
        self,
        options: Options,
        tool_config: ToolConfig,
        config: ScannerConfig | None = None,
        *,
        transport: Transport | None = None,
        input_func: Callable[[str], str] | None = None,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        super().__init__(console=console, err_console=err_console)
        self.options = options
        self.tool_config = tool_config
        self.config = config or ScannerConfig()
        self._transport = transport
        self._input = input_func or self.err_console.input
        self.api_key = ""

    def setup(self) -> None:
        """Check the privacy waiver and load the API key. Exits on failure."""
        if not self.tool_config.has_privacy_waiver():
            if not self.ack_privacy():
                self.fail("You must acknowledge the VirusTotal Terms of Service to continue.")
            self.tool_config.save_privacy_waiver()

        if self.options.api_key:
            self.tool_config.save_api_key(self.options.api_key)

        api_key = self.tool_config.load_api_key() or self.config.api_key
        if not api_key:
            self.fail(
                "No API key found. Get a public key at www.virustotal.com, and use -k to set it."
            )
        self.print_status(f"Using API key: {api_key}")
        self.api_key = api_key

    def ack_privacy(self) -> bool:
        """Show the terms warning and read a single answer. True if the user said yes."""
        for line in PRIVACY_WARNING:
            self.print_status(line)

        try:
            answer = self._input("[*] Enter 'Y' to acknowledge: ")
        except EOFError:
            return False
        return answer.strip().lower() in AFFIRMATIVE

    async def upload_sample(self, vt: VirusTotalClient, sample: str) -> ScanSubmission:
        self.print_status(f"Please wait while I upload {sample}...")
        submission = ScanSubmission.from_dict(await vt.scan_sample_async())
        self.print_status(f"VirusTotal: {submission.verbose_msg}")
        self.print_status(f"Sample MD5 checksum: {submission.md5}")
        self.print_status(f"Sample SHA256 checksum: {submission.sha256}")
        self.print_status(f"Analysis link: {submission.permalink}")
        return submission

    async def wait_report(self, vt: VirusTotalClient) -> Report | None:
        delay = self.config.poll_delay
        self.print_status("Requesting the report...")

        def _pending(code: int | None) -> None:
            self.print_status(f"Received code {code}. Waiting for another {delay} seconds...")

        result = await wait_for_report(
            vt.retrieve_report_async,
            delay=delay,
            max_wait=self.config.max_wait,
            on_pending=_pending,
        )
        if result.timed_out:
            last_msg = result.last_response.get("verbose_msg")
            if last_msg:
                self.print_error(f"VirusTotal: {last_msg}")
            self.print_error("No report collected. Please manually check the analysis link later.")
            return None
        assert result.report is not None
        return Report.from_dict(result.report)

    def generate_report(self, report: Report, sample: str) -> None:
        self.print_status(report_header(report, sample))
        self.console.print(render_report(report))

    async def scan_sample_async(self, sample_path: str) -> Report | None:
        """Submit, poll and render one sample. API errors end this sample only."""
        try:
            sample = Sample.from_path(sample_path)
        except SampleError as e:
            self.print_error(str(e))
            return None

        async with VirusTotalClient(
            self.api_key, sample, transport=self._transport, config=self.config
        ) as vt:
            try:
                await self.upload_sample(vt, sample_path)
                report = await self.wait_report(vt)
            except VirusTotalAPIError as e:
                self.print_error(f"Unable to scan {sample_path}: {e}")
                return None

        if report is not None:
            self.generate_report(report, sample_path)
        return report

    async def scan_async(self) -> None:
        for sample in self.options.samples:
            await self.scan_sample_async(sample)
            self.console.print()

    def scan(self) -> None:
        """Executes a scan and produces a report for every sample."""
        asyncio.run(self.scan_async())


def setup_logging(verbose: bool = False) -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    root = logging.getLogger("vtscan")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    console = Console(highlight=False)
    try:
        config = ScannerConfig()
        options = OptsConsole(max_samples=config.max_samples).parse(args)
        setup_logging(options.verbose)
        config.poll_delay = options.delay
        config.validate()

        driver = Driver(options, ToolConfig.from_file(config.config_file), config)
        driver.setup()
        driver.scan()
    except VTScanError as e:
        DriverBase().print_error(str(e))
        return 1
    except KeyboardInterrupt:
        console.print()
        console.print("Good bye")
    return 0


if __name__ == "__main__":
    sys.exit(main())
