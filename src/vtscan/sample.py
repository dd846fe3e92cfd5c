"""Malware samples read from disk."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path

from vtscan.exceptions import SampleError


@dataclass(frozen=True)
class Sample:
    """A file to submit, read once and never modified."""

    path: Path
    data: bytes = field(repr=False)
    filename: str
    sha256: str

    @classmethod
    def from_path(cls, path: str | Path) -> Sample:
        file_path = Path(path)
        if not file_path.exists():
            raise SampleError(f"File not found: {file_path}")
        if not file_path.is_file():
            raise SampleError(f"Not a file: {file_path}")

        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise SampleError(f"Cannot read {file_path}: {e}") from e

        return cls(
            path=file_path,
            data=data,
            filename=file_path.name,
            sha256=hashlib.sha256(data).hexdigest(),
        )

    @property
    def size(self) -> int:
        return len(self.data)
