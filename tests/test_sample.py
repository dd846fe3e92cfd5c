"""Tests for sample loading and the multipart upload body."""

import hashlib
from pathlib import Path

import pytest

from vtscan.exceptions import SampleError
from vtscan.multipart import DEFAULT_BOUNDARY, build_upload_body, content_type
from vtscan.sample import Sample
from tests.conftest import EICAR_BYTES, EICAR_SHA256


class TestSample:
    """Test reading samples from disk."""

    def test_digest_matches_file_bytes(self, eicar_file: Path) -> None:
        sample = Sample.from_path(eicar_file)
        assert sample.sha256 == hashlib.sha256(eicar_file.read_bytes()).hexdigest()
        assert sample.sha256 == EICAR_SHA256

    def test_binary_content_untouched(self, tmp_path: Path) -> None:
        data = bytes(range(256)) + b"\r\n\x00\r"
        f = tmp_path / "blob.bin"
        f.write_bytes(data)

        sample = Sample.from_path(str(f))
        assert sample.data == data
        assert sample.size == len(data)
        assert sample.sha256 == hashlib.sha256(data).hexdigest()

    def test_filename_is_basename(self, eicar_file: Path) -> None:
        sample = Sample.from_path(eicar_file)
        assert sample.filename == "eicar.com"
        assert sample.path == eicar_file

    def test_empty_file(self, tmp_path: Path) -> None:
        f = tmp_path / "empty"
        f.write_bytes(b"")
        sample = Sample.from_path(f)
        assert sample.sha256 == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SampleError, match="File not found"):
            Sample.from_path(tmp_path / "nope.exe")

    def test_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SampleError, match="Not a file"):
            Sample.from_path(tmp_path)

    def test_immutable(self, eicar_sample: Sample) -> None:
        with pytest.raises(AttributeError):
            eicar_sample.sha256 = "x"  # type: ignore[misc]

    def test_repr_hides_data(self, eicar_sample: Sample) -> None:
        assert "EICAR" not in repr(eicar_sample)


class TestUploadBody:
    """Test the hand-built multipart body."""

    def test_exact_framing(self) -> None:
        body = build_upload_body("BOUNDARY", "KEY", "mal.exe", b"DATA")
        assert body == (
            b"--BOUNDARY\n"
            b'Content-Disposition: form-data; name="apikey"\n'
            b"\n"
            b"KEY\n"
            b"--BOUNDARY\n"
            b'Content-Disposition: form-data; name="file"; filename="mal.exe"\n'
            b"Content-Type: application/octet-stream\n"
            b"\n"
            b"DATA\n"
            b"--BOUNDARY--\n"
        )

    def test_reproducible(self) -> None:
        args = (DEFAULT_BOUNDARY, "KEY", "eicar.com", EICAR_BYTES)
        assert build_upload_body(*args) == build_upload_body(*args)

    def test_binary_data_embedded_verbatim(self) -> None:
        data = b"\x00\xff\r\n--BOUNDARY\r\n\x7f"
        body = build_upload_body("BOUNDARY", "KEY", "x.bin", data)
        head, _, rest = body.partition(b"Content-Type: application/octet-stream\n\n")
        assert rest == data + b"\n--BOUNDARY--\n"
        assert head.startswith(b"--BOUNDARY\n")

    def test_two_parts(self) -> None:
        body = build_upload_body("B", "KEY", "f", b"d")
        assert body.count(b"--B\n") == 2
        assert body.endswith(b"--B--\n")

    def test_content_type(self) -> None:
        assert content_type("B") == "multipart/form-data; boundary=B"
