import logging
from typing import Iterable, List

from openai import OpenAI

from pdf_openai_querytool.errors import RemoteError, RemoteNotFound, UploadFailed
from pdf_openai_querytool.jobs import BATCH_PENDING, PollPolicy, wait_for_job
from pdf_openai_querytool.models import Document, RemoteMembership, SyncResult
from pdf_openai_querytool.openai import (
    create_file_batch,
    iter_vs_files,
    retrieve_file_batch,
    retrieve_filename,
    upload_file,
)

logger = logging.getLogger(__name__)


def build_remote_membership(client: OpenAI, vector_store_id: str, page_size: int = 100) -> RemoteMembership:
    """
    Returns {filename: file_id} for every file attached to the Vector Store.

    Rows whose file no longer exists (404) are skipped; any other lookup
    failure propagates. When two rows share a filename the first one wins.
    """
    membership: RemoteMembership = {}
    for row in iter_vs_files(client, vector_store_id, page_size=page_size):
        for fid in dict.fromkeys([row.file_id, row.id]):
            try:
                filename = retrieve_filename(client, fid)
            except RemoteNotFound as exc:
                logger.warning("Skipping vector store file %s: %s", fid, exc)
                continue
            if not filename:
                continue
            if filename in membership:
                logger.warning(
                    "Duplicate remote filename %s (%s); keeping %s", filename, fid, membership[filename],
                )
            else:
                membership[filename] = fid
            break
    return membership


def choose_new_documents(documents: Iterable[Document], membership: RemoteMembership) -> List[Document]:
    """
    Documents whose name is not yet in the Vector Store. Content changes under
    an existing name are not detected.
    """
    return [d for d in documents if d.name not in membership]


def upload_documents(client: OpenAI, documents: Iterable[Document]) -> List[str]:
    """
    Upload documents one at a time and return their file ids. The first
    failure aborts with UploadFailed.
    """
    file_ids: List[str] = []
    for doc in documents:
        try:
            file_ids.append(upload_file(client, doc))
        except OSError as exc:
            raise UploadFailed(doc.name, str(exc)) from exc
        except RemoteError as exc:
            raise UploadFailed(doc.name, str(exc)) from exc
        logger.debug("Uploaded %s as %s", doc.name, file_ids[-1])
    return file_ids


def attach_files(client: OpenAI, vector_store_id: str, file_ids: List[str], policy: PollPolicy):
    """
    Attach uploaded files to the Vector Store in one batch and wait for it.
    """
    batch = create_file_batch(client, vector_store_id, file_ids)
    return wait_for_job(
        lambda: retrieve_file_batch(client, vector_store_id, batch.id),
        policy,
        pending=BATCH_PENDING,
        what=f"File batch {batch.id}",
    )


def sync_documents(
    client: OpenAI,
    vector_store_id: str,
    documents: List[Document],
    *,
    policy: PollPolicy,
    page_size: int = 100,
) -> SyncResult:
    """
    Upload ONLY documents missing from the Vector Store and attach them.
    A corpus that is already in sync costs no uploads and no batch.
    """
    if not documents:
        return SyncResult(attached=0)

    membership = build_remote_membership(client, vector_store_id, page_size=page_size)
    new_docs = choose_new_documents(documents, membership)
    if not new_docs:
        logger.debug("Vector store %s already has all %d PDF(s)", vector_store_id, len(documents))
        return SyncResult(attached=0)

    logger.info("Found %d new PDF(s): %s", len(new_docs), ", ".join(d.name for d in new_docs))
    file_ids = upload_documents(client, new_docs)
    attach_files(client, vector_store_id, file_ids, policy)

    logger.info("Synced %d new PDF(s) into %s", len(new_docs), vector_store_id)
    return SyncResult(attached=len(new_docs), file_ids=file_ids)
