"""
Document Text Extraction

Recovers plain text from uploaded Word documents. Extraction runs as an
ordered list of layers (raw text, HTML flattening, printable-ASCII
salvage); each layer's output length decides whether the next one runs.
"""

import html
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, List, Optional, Sequence, Tuple

import mammoth
from docx import Document

from app.utils.exceptions import DocumentUnreadableError
from app.utils.logger import get_logger

logger = get_logger(__name__)

RAW_TEXT_MIN_LENGTH = 50
HTML_TEXT_MIN_LENGTH = 20
READABLE_MIN_LENGTH = 10
# Short texts made mostly of symbols are treated as mis-decoded binaries
GARBLED_SYMBOL_RATIO = 0.5
GARBLED_MAX_LENGTH = 100

_SYMBOL_PATTERN = re.compile(r"[^\w\s.,!?@()-]", re.ASCII)
_NON_PRINTABLE_PATTERN = re.compile(r"[^\x20-\x7E\n\r\t]")

# Applied in order; tables and headings keep a visible structure for the model
_HTML_FLATTEN_RULES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"<table[^>]*>"), "\n--- TABLE START ---\n"),
    (re.compile(r"</table>"), "\n--- TABLE END ---\n"),
    (re.compile(r"<tr[^>]*>"), "\n"),
    (re.compile(r"</tr>"), ""),
    (re.compile(r"<t[dh](?:\s[^>]*)?>"), " | "),
    (re.compile(r"</t[dh]>"), ""),
    (re.compile(r"<p(?:\s[^>]*)?>"), "\n"),
    (re.compile(r"</p>"), ""),
    (re.compile(r"<br[^>]*/?>"), "\n"),
    (re.compile(r"<div[^>]*>"), "\n"),
    (re.compile(r"</div>"), ""),
    (re.compile(r"<h[1-6][^>]*>"), "\n### "),
    (re.compile(r"</h[1-6]>"), " ###\n"),
    (re.compile(r"<li[^>]*>"), "\n- "),
    (re.compile(r"</li>"), ""),
    (re.compile(r"</?(?:ul|ol)(?:\s[^>]*)?>"), "\n"),
    (re.compile(r"</?(?:strong|b|em|i)(?:\s[^>]*)?>"), ""),
    (re.compile(r"<[^>]*>"), " "),
]

_WHITESPACE_RULES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\|\s*\|"), "|"),
    (re.compile(r"\s*\|\s*"), " | "),
    (re.compile(r"\n\s*\n\s*\n"), "\n\n"),
    (re.compile(r"[ \t]+"), " "),
    (re.compile(r"\n +"), "\n"),
]


@dataclass(frozen=True)
class DocumentText:
    """Text recovered from a document and the layer that produced it."""
    text: str
    method: str = "unknown"


@dataclass(frozen=True)
class ExtractionLayer:
    """
    One heuristic for recovering text.

    ``accept_length``: stop after this layer once the current text is at
    least this long. ``only_if_longer``: the layer's output replaces the
    current text only when it is longer.
    """
    method: str
    extract: Callable[[bytes], str]
    accept_length: int
    only_if_longer: bool = False


def extract_raw_text(buffer: bytes) -> str:
    """Paragraph and table text via python-docx."""
    doc = Document(BytesIO(buffer))

    text_parts = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                text_parts.append(" | ".join(cells))

    return "\n".join(text_parts)


def flatten_html(markup: str) -> str:
    """Turn converter HTML into readable plain text."""
    text = markup
    for pattern, replacement in _HTML_FLATTEN_RULES:
        text = pattern.sub(replacement, text)
    text = html.unescape(text).replace("\xa0", " ")
    for pattern, replacement in _WHITESPACE_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def extract_html_text(buffer: bytes) -> str:
    """Convert with mammoth to HTML, then flatten the markup."""
    result = mammoth.convert_to_html(BytesIO(buffer))
    if result.messages:
        logger.info(
            "[DocumentExtraction] mammoth HTML conversion messages: %s",
            [m.message for m in result.messages],
        )
    return flatten_html(result.value)


def salvage_printable_text(buffer: bytes) -> str:
    """Keep printable ASCII from the raw bytes (last resort for legacy .doc)."""
    decoded = buffer.decode("utf-8", errors="replace")
    text = _NON_PRINTABLE_PATTERN.sub(" ", decoded)
    return re.sub(r"\s+", " ", text).strip()


def decode_plain_text(buffer: bytes) -> str:
    return buffer.decode("utf-8", errors="replace")


def default_layers() -> Tuple[ExtractionLayer, ...]:
    return (
        ExtractionLayer("raw-text", extract_raw_text, RAW_TEXT_MIN_LENGTH),
        ExtractionLayer("html-fallback", extract_html_text, HTML_TEXT_MIN_LENGTH),
        ExtractionLayer("plain-text-fallback", salvage_printable_text, 0, only_if_longer=True),
    )


def run_extraction_pipeline(
    buffer: bytes,
    layers: Optional[Sequence[ExtractionLayer]] = None,
) -> DocumentText:
    """
    Try each layer in order until the text is long enough.

    A layer that raises is logged and skipped; the text gathered so far
    is kept.
    """
    if layers is None:
        layers = default_layers()

    current = DocumentText("")
    for layer in layers:
        try:
            candidate = layer.extract(buffer)
        except Exception as e:
            logger.warning(f"[DocumentExtraction] {layer.method} extraction failed: {e}")
            candidate = ""

        if candidate and (not layer.only_if_longer or len(candidate) > len(current.text)):
            current = DocumentText(candidate, layer.method)
        logger.info(f"[DocumentExtraction] {layer.method}: {len(candidate)} characters")

        if len(current.text) >= layer.accept_length:
            break

    logger.info(
        f"[DocumentExtraction] Final extracted text ({current.method}): {len(current.text)} characters"
    )
    logger.debug(f"[DocumentExtraction] Text preview: {current.text[:300]}...")
    return current


def ensure_readable(document: DocumentText) -> DocumentText:
    """
    Reject empty or garbled extraction results.

    Raises:
        DocumentUnreadableError: text is too short or mostly symbols
    """
    text = document.text
    if len(text) < READABLE_MIN_LENGTH:
        raise DocumentUnreadableError(
            "Document appears to be empty or completely unreadable. Please try saving the "
            "document in a different format (PDF recommended) or ensure the document "
            "contains readable text."
        )

    symbol_ratio = len(_SYMBOL_PATTERN.findall(text)) / len(text)
    if symbol_ratio > GARBLED_SYMBOL_RATIO and len(text) < GARBLED_MAX_LENGTH:
        raise DocumentUnreadableError(
            "Document content appears to be corrupted or in an unsupported encoding. "
            "Please try converting to PDF format."
        )
    return document


def extract_document_text(buffer: bytes) -> DocumentText:
    """Layered DOC/DOCX extraction followed by the readability check."""
    return ensure_readable(run_extraction_pipeline(buffer))
