"""Read included files as text, whatever their format"""

import asyncio
from pathlib import Path

import aiofiles
import structlog

logger = structlog.get_logger(__name__)

OFFICE_EXTENSIONS = {"docx", "doc", "xlsx", "xls", "pptx", "ppt", "pdf"}

TEXT_EXTENSIONS = {
    "txt", "csv", "json", "xml", "js", "ts", "tsx", "html", "css", "md",
    "copa", "log", "yaml", "yml", "ini", "cfg", "conf", "sh", "bat", "ps1",
    "py", "rb", "php", "java", "c", "cpp", "h", "hpp", "cs", "go", "rs",
    "swift", "kt",
}  # fmt: skip

REPLACEMENT_CHAR = "�"


def _extract_pdf(path: Path) -> str:
    from pypdf import PdfReader

    reader = PdfReader(path)
    pages = [(page.extract_text() or "").strip() for page in reader.pages]
    return "\n\n".join(pages).strip()


def _extract_docx(path: Path) -> str:
    import docx

    document = docx.Document(str(path))
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


def _extract_xlsx(path: Path) -> str:
    from openpyxl import load_workbook

    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        chunks = []
        for sheet in workbook.worksheets:
            rows = [
                "\t".join("" if cell is None else str(cell) for cell in row)
                for row in sheet.iter_rows(values_only=True)
            ]
            chunks.append(f"===== {sheet.title} =====\n" + "\n".join(rows))
        return "\n\n".join(chunks)
    finally:
        workbook.close()


_EXTRACTORS = {
    "pdf": _extract_pdf,
    "docx": _extract_docx,
    "xlsx": _extract_xlsx,
}


async def extract_document_text(path: Path) -> str:
    """Text of an office or PDF document.

    Never raises: failures and unsupported legacy formats come back as a
    bracketed explanation, unreadable-but-valid documents as ``""``.
    """
    ext = path.suffix.lower().lstrip(".")
    extractor = _EXTRACTORS.get(ext)
    if extractor is None:
        return f"[Document format .{ext} of {path.name} is not supported for text extraction]"

    try:
        text = await asyncio.to_thread(extractor, path)
    except Exception as e:
        logger.warning("Document extraction failed", path=str(path), error=str(e))
        return f"[Error parsing Office/PDF document {path.name}: {e}]"

    return text if text.strip() else ""


def looks_binary(text: str) -> bool:
    """Heuristic for bytes that decoded into mostly replacement characters"""
    if len(text) <= 100:
        return False
    replaced = text.count(REPLACEMENT_CHAR)
    return replaced > len(text) / 10 and replaced > 5


async def read_text(path: Path) -> str:
    """Read ``path`` as text with best-effort decoding"""
    name = path.name
    ext = path.suffix.lower().lstrip(".")

    if ext in OFFICE_EXTENSIONS:
        return await extract_document_text(path)

    async with aiofiles.open(path, "rb") as f:
        raw = await f.read()

    if ext in TEXT_EXTENSIONS or not ext:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("UTF-8 decode failed, using latin-1", path=str(path))
            return raw.decode("latin-1")

    text = raw.decode("utf-8", errors="replace")
    if looks_binary(text):
        return f"[Content of binary file {name} (ext: {ext}) is not displayed]"
    if not text.strip():
        return f"[Content of file {name} could not be extracted or is empty (type: {ext})]"
    return text
