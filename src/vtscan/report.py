"""Render a scan report as a text table."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from vtscan.models import Report

COLUMNS = ("Antivirus", "Detected", "Version", "Result", "Update")


def report_header(report: Report, sample: str) -> str:
    return f"Analysis Report: {sample} ({report.positives} / {report.total}): {report.sha256}"


def render_report(report: Report) -> Table:
    """Build a table with one row per antivirus engine."""
    table = Table(box=box.SIMPLE, padding=(0, 1))
    for column in COLUMNS:
        table.add_column(column, no_wrap=True)

    for scan in report.scans:
        table.add_row(
            scan.engine,
            str(scan.detected).lower(),
            scan.version,
            scan.result,
            scan.update,
        )
    return table


def format_report(report: Report, sample: str, width: int = 160) -> str:
    """Render the header line and the table to plain text."""
    console = Console(width=width, color_system=None, highlight=False)
    with console.capture() as capture:
        console.print(Text(report_header(report, sample), no_wrap=True, overflow="ignore"), crop=False)
        console.print(render_report(report))
    return capture.get()
