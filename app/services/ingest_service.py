import io
import logging

from app.core.errors import UnsupportedFileType

logger = logging.getLogger(__name__)

SUPPORTED_TYPES = ("pdf", "txt")


def detect_file_type(filename: str | None, content_type: str | None = None) -> str:
    """pdf|txt|unknown from the declared content type or the file extension."""
    name = (filename or "").lower()
    ctype = (content_type or "").split(";")[0].strip().lower()
    if ctype == "application/pdf" or name.endswith(".pdf"):
        return "pdf"
    if ctype == "text/plain" or name.endswith(".txt"):
        return "txt"
    return "unknown"


def extract_pdf(data: bytes) -> str:
    from pypdf import PdfReader
    from pypdf.errors import PdfReadError

    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            try:
                decrypted = reader.decrypt("")
            except Exception:
                decrypted = 0
            if not decrypted:
                raise UnsupportedFileType("PDF is password-protected")
        parts = []
        for i, page in enumerate(reader.pages):
            try:
                t = page.extract_text() or ""
            except Exception as e:
                # one bad page shouldn't sink the document
                logger.debug("Skipping unreadable PDF page %s: %s", i, e)
                t = ""
            parts.append(t)
    except UnsupportedFileType:
        raise
    except (PdfReadError, ValueError, OSError, KeyError, TypeError) as e:
        raise UnsupportedFileType(f"PDF is malformed or corrupted: {e}") from e

    text = "\n\n".join(parts)
    if not text.strip():
        raise UnsupportedFileType("PDF appears to be empty or contains only images (no extractable text)")
    return text


def extract_txt(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def extract_text(data: bytes, file_type: str) -> str:
    if file_type == "pdf":
        return extract_pdf(data)
    if file_type == "txt":
        return extract_txt(data)
    raise UnsupportedFileType("Only PDF and TXT files are supported")

