"""Hand-built multipart/form-data body for the scan endpoint.

The body is assembled byte for byte instead of through a MIME library, since
those re-encode the payload and the service then analyses different bytes
than the ones on disk. Parts are joined with bare LF, matching what the
service has always accepted from this tool.
"""

from __future__ import annotations

DEFAULT_BOUNDARY = "THEREAREMANYLIKEITBUTTHISISMYDATA"


def build_upload_body(boundary: str, api_key: str, filename: str, data: bytes) -> bytes:
    """Return the two-part upload body: ``apikey`` as text, ``file`` as octet-stream."""
    head = (
        f"--{boundary}\n"
        f'Content-Disposition: form-data; name="apikey"\n'
        f"\n"
        f"{api_key}\n"
        f"--{boundary}\n"
        f'Content-Disposition: form-data; name="file"; filename="{filename}"\n'
        f"Content-Type: application/octet-stream\n"
        f"\n"
    ).encode("utf-8")
    tail = f"\n--{boundary}--\n".encode("utf-8")
    return head + data + tail


def content_type(boundary: str) -> str:
    return f"multipart/form-data; boundary={boundary}"
