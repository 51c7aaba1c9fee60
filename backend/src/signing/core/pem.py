"""PEM-style armour: base64 between BEGIN/END marker lines, 64 characters per line."""

import base64
import binascii
import re

LINE_WIDTH = 64

_WHITESPACE = re.compile(r"\s+")


def armor(der: bytes, label: str) -> str:
    """Wrap binary data as PEM text with no trailing newline."""
    body = base64.b64encode(der).decode("ascii")
    lines = [body[i : i + LINE_WIDTH] for i in range(0, len(body), LINE_WIDTH)]
    return "\n".join([f"-----BEGIN {label}-----", *lines, f"-----END {label}-----"])


def dearmor(text: str, label: str) -> bytes:
    """Strip the markers for `label` and all whitespace, then base64-decode strictly.

    Raises:
        ValueError: If the body is empty or not valid base64.
    """
    body = text.replace(f"-----BEGIN {label}-----", "").replace(f"-----END {label}-----", "")
    body = _WHITESPACE.sub("", body)
    if not body:
        raise ValueError(f"No {label} data found")
    try:
        return base64.b64decode(body, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Malformed base64 in {label}: {e}") from e
