import io
import re
from typing import Tuple

from pypdf import PdfReader


def sanitize_text_for_postgres(text: str) -> str:
    """
    Drop characters Postgres text columns reject.

    - NULL (\\u0000)
    - other control characters except tab, newline and carriage return
    """
    if not text:
        return text

    text = text.replace('\u0000', '')
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f]', '', text)

    return text


def extract_pdf_text(data: bytes) -> Tuple[str, int]:
    """
    Extract text and page count from an in-memory PDF.

    Raises whatever pypdf raises for unreadable files.
    """
    reader = PdfReader(io.BytesIO(data))
    raw_text = "\n".join([page.extract_text() or "" for page in reader.pages])
    return sanitize_text_for_postgres(raw_text), len(reader.pages)
