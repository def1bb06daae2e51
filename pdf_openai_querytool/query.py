import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from openai import OpenAI

from pdf_openai_querytool.cache import read_cached_store_id
from pdf_openai_querytool.config import Settings
from pdf_openai_querytool.corpus import list_documents
from pdf_openai_querytool.errors import NoAnswer, RemoteError
from pdf_openai_querytool.jobs import RUN_PENDING, wait_for_job
from pdf_openai_querytool.models import Answer, Reference
from pdf_openai_querytool.openai import (
    create_assistant,
    create_run,
    create_thread,
    delete_assistant,
    delete_thread,
    list_recent_messages,
    retrieve_filename,
    retrieve_run,
)
from pdf_openai_querytool.registry import resolve_vector_store
from pdf_openai_querytool.sync import sync_documents

logger = logging.getLogger(__name__)


def ask_question(
    client: OpenAI,
    settings: Settings,
    prompt: str,
    directory: Path,
    *,
    reuse: Optional[str] = None,
    cancel: Optional[threading.Event] = None,
) -> Answer:
    """
    Answer `prompt` from the PDFs in `directory`.

    Resolves (or creates) the Vector Store, syncs new PDFs into it, then runs a
    throwaway file_search assistant over a fresh thread. Both are deleted
    afterwards. An empty answer text means the run completed without
    assistant output.
    """
    directory = Path(directory)
    policy = settings.poll_policy(cancel)
    documents = list_documents(directory)

    store = resolve_vector_store(
        client,
        documents,
        candidates=[reuse, settings.vector_store_id, read_cached_store_id(settings.cache_path)],
        cache_path=settings.cache_path,
        policy=policy,
        directory=directory,
    )
    if not store.created:
        sync_documents(client, store.id, documents, policy=policy, page_size=settings.page_size)

    assistant_id = create_assistant(client, settings.model, store.id)
    thread_id = None
    try:
        thread_id = create_thread(client, prompt)
        run = create_run(client, thread_id, assistant_id)
        wait_for_job(
            lambda: retrieve_run(client, thread_id, run.id),
            policy,
            pending=RUN_PENDING,
            initial=run,
            what=f"Run {run.id}",
        )
        messages = list_recent_messages(client, thread_id)
    finally:
        if thread_id is not None:
            _discard(delete_thread, client, "thread", thread_id)
        _discard(delete_assistant, client, "assistant", assistant_id)

    try:
        text = extract_answer_text(messages)
    except NoAnswer:
        logger.warning("Run completed without an assistant answer")
        return Answer(text="", vector_store_id=store.id)

    references = resolve_references(client, collect_citations(messages))
    return Answer(text=text, vector_store_id=store.id, references=references)


# --------------------------- Message parsing ---------------------------

def first_assistant_message(messages: Iterable[Any]) -> Optional[Any]:
    return next((m for m in messages if getattr(m, "role", None) == "assistant"), None)


def extract_answer_text(messages: Iterable[Any]) -> str:
    """
    Text of the newest assistant message (messages are newest first).
    Text segments are joined with newlines; raises NoAnswer if there is none.
    """
    message = first_assistant_message(messages)
    if message is None:
        raise NoAnswer("No assistant message in thread.")
    texts = [t.value for t in _text_parts(message) if getattr(t, "value", None)]
    text = "\n".join(texts).strip()
    if not text:
        raise NoAnswer("Assistant message has no text content.")
    return text


def collect_citations(messages: Iterable[Any]) -> List[str]:
    """
    File ids cited by the newest assistant message, in first-seen order.
    """
    message = first_assistant_message(messages)
    if message is None:
        return []
    file_ids: Dict[str, None] = {}
    for text in _text_parts(message):
        for ann in getattr(text, "annotations", None) or []:
            if getattr(ann, "type", None) != "file_citation":
                continue
            citation = getattr(ann, "file_citation", None)
            fid = getattr(citation, "file_id", None)
            if fid:
                file_ids[fid] = None
    return list(file_ids)


def resolve_references(client: OpenAI, file_ids: Iterable[str]) -> List[Reference]:
    refs: List[Reference] = []
    for fid in file_ids:
        try:
            filename = retrieve_filename(client, fid)
        except RemoteError as exc:
            logger.debug("Could not resolve cited file %s: %s", fid, exc)
            filename = None
        refs.append(Reference(file_id=fid, filename=filename))
    return refs


def _text_parts(message: Any) -> List[Any]:
    parts = []
    for c in getattr(message, "content", None) or []:
        text = getattr(c, "text", None)
        if text is not None:
            parts.append(text)
    return parts


def _discard(delete, client: OpenAI, kind: str, resource_id: str) -> None:
    try:
        delete(client, resource_id)
    except RemoteError as exc:
        logger.warning("Could not delete %s %s: %s", kind, resource_id, exc)
