import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional

from openai import OpenAI

from pdf_openai_querytool.cache import write_cached_store_id
from pdf_openai_querytool.corpus import MAX_DOCUMENTS
from pdf_openai_querytool.errors import EmptyCorpus
from pdf_openai_querytool.jobs import PollPolicy
from pdf_openai_querytool.models import Document, ResolvedStore
from pdf_openai_querytool.openai import create_vector_store, vector_store_exists
from pdf_openai_querytool.sync import attach_files, upload_documents

logger = logging.getLogger(__name__)

STORE_NAME_PREFIX = "pdf-search"


def resolve_vector_store(
    client: OpenAI,
    documents: List[Document],
    *,
    candidates: Iterable[Optional[str]],
    cache_path: Path,
    policy: PollPolicy,
    directory: Optional[Path] = None,
) -> ResolvedStore:
    """
    Return an existing Vector Store or create a new one.

    Priority: candidates in the given order (explicit id > env default >
    cache), the first that still exists remotely wins. Stores answering 404
    are skipped; any other failure propagates. With no usable candidate a new
    store is created from `documents` and cached.
    """
    for candidate in dict.fromkeys(c for c in candidates if c):
        if vector_store_exists(client, candidate):
            logger.debug("Reusing vector store %s", candidate)
            return ResolvedStore(id=candidate, created=False)
        logger.warning("Vector store %s not found. Creating a new one...", candidate)

    return create_and_index_vector_store(
        client, documents, cache_path=cache_path, policy=policy, directory=directory,
    )


def create_and_index_vector_store(
    client: OpenAI,
    documents: List[Document],
    *,
    cache_path: Path,
    policy: PollPolicy,
    directory: Optional[Path] = None,
) -> ResolvedStore:
    """
    Create a Vector Store, upload the whole corpus, attach it and cache the id.
    """
    if not documents:
        raise EmptyCorpus(directory if directory is not None else "(unknown)", MAX_DOCUMENTS)
    logger.info("Indexing %d PDF(s)%s ...", len(documents), f" from {directory}" if directory else "")

    vector_store_id = create_vector_store(client, f"{STORE_NAME_PREFIX}-{int(time.time() * 1000)}")
    file_ids = upload_documents(client, documents)
    attach_files(client, vector_store_id, file_ids, policy)

    write_cached_store_id(cache_path, vector_store_id)
    logger.info("Vector store created & cached: %s", vector_store_id)
    return ResolvedStore(id=vector_store_id, created=True)
