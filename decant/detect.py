"""Input format sniffing.

Only HTML is processed by the pipeline; the other formats are recognised so
callers can route them to an external converter or reject them.
"""

from __future__ import annotations

import re
from typing import Literal

ContentFormat = Literal["html", "rtf", "doc", "docx", "unknown"]

_TAG_RE = re.compile(r"<[a-zA-Z][\w:-]*(\s[^>]*)?>")
_ESCAPED_TAG_RE = re.compile(r"&lt;[a-zA-Z][\w:-]*")

_OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
# Matches every ZIP container (DOCX, EPUB, XLSX...); only DOCX is expected
_ZIP_MAGIC = b"PK\x03\x04"


def looks_like_html(value: str) -> bool:
    if not value.strip():
        return False
    if _TAG_RE.search(value):
        return True
    return bool(_ESCAPED_TAG_RE.search(value))


def looks_like_rtf(value: str) -> bool:
    return value.lstrip().startswith("{\\rtf")


def is_docx_bytes(data: bytes) -> bool:
    return data.startswith(_ZIP_MAGIC)


def is_doc_bytes(data: bytes) -> bool:
    return data.startswith(_OLE2_MAGIC)


def detect_format(value: str | bytes) -> ContentFormat:
    if isinstance(value, bytes):
        if is_doc_bytes(value):
            return "doc"
        if is_docx_bytes(value):
            return "docx"
        value = value.decode("utf-8", errors="replace")

    if looks_like_rtf(value):
        return "rtf"
    if looks_like_html(value):
        return "html"
    return "unknown"
