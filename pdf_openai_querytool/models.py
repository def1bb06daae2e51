from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Document:
    """A local PDF. `name` is the sync key against the Vector Store."""
    name: str
    path: Path


@dataclass(frozen=True)
class ResolvedStore:
    """The Vector Store used for this run."""
    id: str
    created: bool = False


@dataclass(frozen=True)
class RemoteFile:
    """A simplified view of a Vector Store file row."""
    id: str
    file_id: str


@dataclass(frozen=True)
class SyncResult:
    attached: int
    file_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Reference:
    file_id: str
    filename: Optional[str]


@dataclass(frozen=True)
class Answer:
    text: str
    vector_store_id: str
    references: List[Reference] = field(default_factory=list)


# filename -> file id
RemoteMembership = Dict[str, str]
