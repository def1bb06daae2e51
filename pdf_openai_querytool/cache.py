import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CACHE_KEY = "vectorStoreId"


def read_cached_store_id(cache_path: Path) -> Optional[str]:
    """
    Return the cached Vector Store id, or None when the cache is missing,
    unreadable or malformed. The id is only a hint and must be revalidated.
    """
    if not cache_path.exists():
        return None
    try:
        cached = json.loads(cache_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable cache %s: %s", cache_path, exc)
        return None
    if not isinstance(cached, dict):
        logger.warning("Ignoring malformed cache %s", cache_path)
        return None
    value = cached.get(CACHE_KEY)
    return value if isinstance(value, str) and value else None


def write_cached_store_id(cache_path: Path, vector_store_id: str) -> None:
    cache_path.write_text(json.dumps({CACHE_KEY: vector_store_id}, indent=2), encoding="utf-8")
