import logging
from pathlib import Path
from typing import Iterable, List, Tuple

from pdf_openai_querytool.errors import DirectoryNotFound
from pdf_openai_querytool.models import Document

logger = logging.getLogger(__name__)

MAX_DOCUMENTS = 10
PDF_EXTENSIONS: Tuple[str, ...] = (".pdf",)


def list_documents(
    directory: Path,
    *,
    limit: int = MAX_DOCUMENTS,
    extensions: Iterable[str] = PDF_EXTENSIONS,
) -> List[Document]:
    """
    List up to `limit` documents in `directory`, sorted by name.

    Only regular files whose extension matches (case-insensitive) count.
    Extra files beyond the limit are ignored, not rejected.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise DirectoryNotFound(directory)

    wanted = {e.lower() for e in extensions}
    candidates = sorted(
        (p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in wanted),
        key=lambda p: p.name,
    )
    if len(candidates) > limit:
        logger.warning(
            "Found %d PDF(s) in %s; only the first %d are used.", len(candidates), directory, limit,
        )
    return [Document(name=p.name, path=p) for p in candidates[:limit]]
