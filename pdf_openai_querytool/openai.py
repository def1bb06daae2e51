from contextlib import contextmanager
from typing import Generator, Iterator, List, Optional

import openai
from openai import OpenAI

from pdf_openai_querytool.config import Settings
from pdf_openai_querytool.errors import RemoteNotFound, RemoteUnavailable
from pdf_openai_querytool.models import Document, RemoteFile

ASSISTANT_NAME = "PDF Search Assistant"
PDF_MIME = "application/pdf"


def get_client(settings: Settings) -> OpenAI:
    """
    Create an OpenAI client for the configured API key.
    """
    return OpenAI(api_key=settings.api_key)


@contextmanager
def remote_call(what: str) -> Iterator[None]:
    """
    Translate SDK exceptions into RemoteNotFound (404) and RemoteUnavailable.
    """
    try:
        yield
    except openai.NotFoundError as exc:
        raise RemoteNotFound(f"HTTP 404 @ {what}") from exc
    except openai.APIStatusError as exc:
        raise RemoteUnavailable(f"HTTP {exc.status_code} @ {what}: {exc.message}", status=exc.status_code) from exc
    except openai.APIError as exc:
        raise RemoteUnavailable(f"Request failed @ {what}: {exc.message}") from exc


# --------------------------- Vector Stores ---------------------------

def vector_store_exists(client: OpenAI, vector_store_id: str) -> bool:
    """
    True if the Vector Store exists, False on 404. Other failures propagate.
    """
    try:
        with remote_call(f"/vector_stores/{vector_store_id}"):
            client.vector_stores.retrieve(vector_store_id)
    except RemoteNotFound:
        return False
    return True


def create_vector_store(client: OpenAI, name: str) -> str:
    with remote_call("/vector_stores"):
        return client.vector_stores.create(name=name).id


def iter_vs_files(
    client: OpenAI, vector_store_id: str, page_size: int = 100
) -> Generator[RemoteFile, None, None]:
    """
    Page through Vector Store files and yield RemoteFile objects.

    Paging continues only while the service says `has_more` and hands back a
    cursor that has not been seen before.
    """
    after: Optional[str] = None
    seen = set()
    while True:
        with remote_call(f"/vector_stores/{vector_store_id}/files"):
            if after is None:
                page = client.vector_stores.files.list(vector_store_id=vector_store_id, limit=page_size)
            else:
                page = client.vector_stores.files.list(
                    vector_store_id=vector_store_id, limit=page_size, after=after,
                )
        data = list(getattr(page, "data", None) or [])
        for f in data:
            yield RemoteFile(
                id=f.id,
                file_id=getattr(f, "file_id", None) or f.id,
            )

        if not getattr(page, "has_more", False):
            break
        after = getattr(page, "last_id", None) or (data[-1].id if data else None)
        if not after or after in seen:
            break
        seen.add(after)


def retrieve_filename(client: OpenAI, file_id: str) -> Optional[str]:
    with remote_call(f"/files/{file_id}"):
        f = client.files.retrieve(file_id)
    return getattr(f, "filename", None) or None


def create_file_batch(client: OpenAI, vector_store_id: str, file_ids: List[str]):
    with remote_call(f"/vector_stores/{vector_store_id}/file_batches"):
        return client.vector_stores.file_batches.create(vector_store_id=vector_store_id, file_ids=file_ids)


def retrieve_file_batch(client: OpenAI, vector_store_id: str, batch_id: str):
    with remote_call(f"/vector_stores/{vector_store_id}/file_batches/{batch_id}"):
        return client.vector_stores.file_batches.retrieve(batch_id, vector_store_id=vector_store_id)


# --------------------------- Files ---------------------------

def upload_file(client: OpenAI, document: Document) -> str:
    """
    Upload one PDF to /files for use with assistants. Returns the file id.
    """
    data = document.path.read_bytes()
    with remote_call("/files"):
        f = client.files.create(file=(document.name, data, PDF_MIME), purpose="assistants")
    return f.id


# --------------------------- Assistants ---------------------------

def create_assistant(client: OpenAI, model: str, vector_store_id: str) -> str:
    with remote_call("/assistants"):
        assistant = client.beta.assistants.create(
            name=ASSISTANT_NAME,
            model=model,
            tools=[{"type": "file_search"}],
            tool_resources={"file_search": {"vector_store_ids": [vector_store_id]}},
        )
    return assistant.id


def delete_assistant(client: OpenAI, assistant_id: str) -> None:
    with remote_call(f"/assistants/{assistant_id}"):
        client.beta.assistants.delete(assistant_id)


def create_thread(client: OpenAI, prompt: str) -> str:
    with remote_call("/threads"):
        thread = client.beta.threads.create(messages=[{"role": "user", "content": prompt}])
    return thread.id


def delete_thread(client: OpenAI, thread_id: str) -> None:
    with remote_call(f"/threads/{thread_id}"):
        client.beta.threads.delete(thread_id)


def create_run(client: OpenAI, thread_id: str, assistant_id: str):
    with remote_call(f"/threads/{thread_id}/runs"):
        return client.beta.threads.runs.create(thread_id=thread_id, assistant_id=assistant_id)


def retrieve_run(client: OpenAI, thread_id: str, run_id: str):
    with remote_call(f"/threads/{thread_id}/runs/{run_id}"):
        return client.beta.threads.runs.retrieve(run_id, thread_id=thread_id)


def list_recent_messages(client: OpenAI, thread_id: str, limit: int = 5) -> list:
    with remote_call(f"/threads/{thread_id}/messages"):
        page = client.beta.threads.messages.list(thread_id=thread_id, order="desc", limit=limit)
    return list(getattr(page, "data", None) or [])
