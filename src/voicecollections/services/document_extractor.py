"""Detect uploaded document formats and extract their plain text.

Each extractor takes the raw bytes of one document and returns a single
string. Any decoder failure is reported as an ``ExtractionError`` so that a
bad upload never replaces text the user already has.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
from collections.abc import Callable
from functools import partial
from io import BytesIO
from pathlib import PurePath

import docx2txt
from pypdf import PdfReader

from voicecollections.errors import ExtractionError, UnsupportedFormatError
from voicecollections.models import DocumentFormat

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

MIME_FORMATS: dict[str, DocumentFormat] = {
    "text/plain": DocumentFormat.PLAIN_TEXT,
    "application/pdf": DocumentFormat.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentFormat.DOCX,
}

EXTENSION_FORMATS: dict[str, DocumentFormat] = {
    ".txt": DocumentFormat.PLAIN_TEXT,
    ".pdf": DocumentFormat.PDF,
    ".docx": DocumentFormat.DOCX,
}

# MIME types that say nothing about the content; the file name decides instead.
GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


def _split_content_type(content_type: str | None) -> tuple[str, dict[str, str]]:
    """Return the lower-cased media type and its parameters."""
    if not content_type:
        return "", {}
    media_type, *params = content_type.split(";")
    parsed: dict[str, str] = {}
    for param in params:
        key, sep, value = param.partition("=")
        if sep:
            parsed[key.strip().lower()] = value.strip().strip('"')
    return media_type.strip().lower(), parsed


def charset_from_content_type(content_type: str | None) -> str | None:
    """Return the ``charset`` parameter of a MIME type, if any."""
    return _split_content_type(content_type)[1].get("charset")


def detect_format(content_type: str | None, filename: str | None = None) -> DocumentFormat:
    """Classify an upload by its declared MIME type, falling back to the file suffix."""
    media_type, _ = _split_content_type(content_type)

    if media_type not in GENERIC_MIME_TYPES:
        return MIME_FORMATS.get(media_type, DocumentFormat.UNSUPPORTED)

    if filename:
        suffix = PurePath(filename).suffix.lower()
        return EXTENSION_FORMATS.get(suffix, DocumentFormat.UNSUPPORTED)

    return DocumentFormat.UNSUPPORTED


def title_from_filename(filename: str | None) -> str:
    """File name without its extension, used as the default collection title."""
    if not filename:
        return ""
    name = PurePath(filename).name
    stem, dot, _ = name.rpartition(".")
    return stem if dot and stem else name


# =============================================================================
# Extractors
# =============================================================================


def extract_plain_text(data: bytes, encoding: str | None = None) -> str:
    """Decode a plain-text document.

    The text is returned unchanged, except that a leading UTF-8 byte order
    mark is dropped.
    """
    encoding = encoding or DEFAULT_ENCODING
    try:
        if codecs.lookup(encoding).name == "utf-8":
            encoding = "utf-8-sig"
        return data.decode(encoding)
    except (LookupError, UnicodeDecodeError) as e:
        raise ExtractionError(DocumentFormat.PLAIN_TEXT.value, e) from e


def extract_pdf_text(data: bytes) -> str:
    """Extract the text layer page by page.

    Fragments on a page are joined with single spaces, pages with newlines.
    """
    try:
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted and not reader.decrypt(""):
            raise ExtractionError(DocumentFormat.PDF.value, "document is password protected")

        pages: list[str] = []
        for page in reader.pages:
            fragments: list[str] = []

            def collect(text, cm, tm, font_dict, font_size, fragments=fragments):
                if text.strip():
                    fragments.append(text.strip("\r\n"))

            page_text = page.extract_text(visitor_text=collect) or ""
            if not fragments and page_text.strip():
                fragments = [line for line in page_text.splitlines() if line.strip()]
            pages.append(" ".join(fragments))
    except ExtractionError:
        raise
    except Exception as e:
        raise ExtractionError(DocumentFormat.PDF.value, e) from e

    logger.debug(f"Extracted {len(pages)} PDF page(s)")
    return "\n".join(pages)


def extract_docx_text(data: bytes) -> str:
    """Extract the body text of an Office Open XML document, dropping formatting."""
    try:
        return docx2txt.process(BytesIO(data)) or ""
    except Exception as e:
        raise ExtractionError(DocumentFormat.DOCX.value, e) from e


def _reject_unsupported(data: bytes, encoding: str | None = None) -> str:
    raise UnsupportedFormatError()


EXTRACTORS: dict[DocumentFormat, Callable[..., str]] = {
    DocumentFormat.PLAIN_TEXT: extract_plain_text,
    DocumentFormat.PDF: lambda data, encoding=None: extract_pdf_text(data),
    DocumentFormat.DOCX: lambda data, encoding=None: extract_docx_text(data),
    DocumentFormat.UNSUPPORTED: _reject_unsupported,
}


def extract_text(fmt: DocumentFormat, data: bytes, encoding: str | None = None) -> str:
    """Run the extractor registered for *fmt*."""
    return EXTRACTORS[fmt](data, encoding=encoding)


async def extract_text_async(
    fmt: DocumentFormat, data: bytes, encoding: str | None = None
) -> str:
    """Run :func:`extract_text` on the default executor so the event loop stays free."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(extract_text, fmt, data, encoding))
