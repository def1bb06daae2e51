import math
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from pdf_openai_querytool.errors import ConfigError
from pdf_openai_querytool.jobs import PollPolicy

DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_CACHE_PATH = ".vectorstore.json"
DEFAULT_POLL_INTERVAL = 1.4
DEFAULT_MAX_WAIT = 600.0
DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class Settings:
    api_key: str
    model: str = DEFAULT_MODEL
    vector_store_id: Optional[str] = None
    cache_path: Path = Path(DEFAULT_CACHE_PATH)
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_wait: Optional[float] = DEFAULT_MAX_WAIT
    page_size: int = DEFAULT_PAGE_SIZE

    def poll_policy(self, cancel: Optional[threading.Event] = None) -> PollPolicy:
        return PollPolicy(interval=self.poll_interval, max_wait=self.max_wait, cancel=cancel)


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> Settings:
    """
    Build Settings from the environment.

    A `.env` file in the working directory is loaded first (real environment
    variables win). Pass `env` to read from a plain mapping instead.
    """
    if env is None:
        if dotenv:
            load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
        env = os.environ

    api_key = (env.get("OPENAI_API_KEY") or "").strip()
    if not api_key:
        raise ConfigError("Missing OPENAI_API_KEY (set it in the environment or in .env).")

    max_wait = _number(env, "PDF_QUERY_MAX_WAIT", DEFAULT_MAX_WAIT)
    page_size = int(_number(env, "PDF_QUERY_PAGE_SIZE", DEFAULT_PAGE_SIZE))
    if page_size < 1:
        raise ConfigError("PDF_QUERY_PAGE_SIZE must be at least 1.")

    return Settings(
        api_key=api_key,
        model=(env.get("OPENAI_MODEL") or "").strip() or DEFAULT_MODEL,
        vector_store_id=(env.get("VECTOR_STORE_ID") or "").strip() or None,
        cache_path=Path((env.get("PDF_QUERY_CACHE_PATH") or "").strip() or DEFAULT_CACHE_PATH),
        poll_interval=_number(env, "PDF_QUERY_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
        # 0 disables the bound
        max_wait=max_wait if max_wait > 0 else None,
        page_size=page_size,
    )


def _number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}.") from None
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be a finite number, got {raw!r}.")
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}.")
    return value
