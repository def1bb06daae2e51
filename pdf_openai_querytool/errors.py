"""Error hierarchy for the PDF query tool.

Everything raised on purpose derives from QueryToolError so the CLI can
report it with a single ``except`` and exit non-zero.

    QueryToolError
    ├── ConfigError
    ├── CorpusError
    │   ├── DirectoryNotFound
    │   └── EmptyCorpus
    ├── RemoteError
    │   ├── RemoteNotFound
    │   └── RemoteUnavailable
    ├── UploadFailed
    ├── JobError
    │   ├── JobFailed
    │   ├── JobTimeout
    │   └── JobCancelled
    └── NoAnswer
"""

from typing import Optional


class QueryToolError(Exception):
    """Base class for all query tool errors."""


class ConfigError(QueryToolError):
    """Missing or malformed configuration."""


class CorpusError(QueryToolError):
    """Base class for local corpus problems."""


class DirectoryNotFound(CorpusError):
    def __init__(self, directory):
        super().__init__(f"Directory '{directory}' does not exist or is not a directory.")
        self.directory = directory


class EmptyCorpus(CorpusError):
    def __init__(self, directory, limit: int):
        super().__init__(f"No PDFs found in \"{directory}\". Put up to {limit} PDFs there.")
        self.directory = directory


class RemoteError(QueryToolError):
    """Base class for failures reported by (or on the way to) the OpenAI API."""


class RemoteNotFound(RemoteError):
    """The remote resource answered 404."""


class RemoteUnavailable(RemoteError):
    """
    Any other remote failure. `status` is the HTTP status when the service
    answered, None when no response was received at all.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UploadFailed(QueryToolError):
    def __init__(self, name: str, reason: str):
        super().__init__(f"Upload of '{name}' failed: {reason}")
        self.name = name


class JobError(QueryToolError):
    """Base class for asynchronous remote jobs that did not complete."""


class JobFailed(JobError):
    def __init__(self, what: str, status: str, detail: Optional[str] = None):
        message = f"{what} ended with status: {status}"
        if detail:
            message += f" - {detail}"
        super().__init__(message)
        self.status = status
        self.detail = detail


class JobTimeout(JobError):
    def __init__(self, what: str, waited: float, status: Optional[str]):
        super().__init__(f"{what} still '{status}' after {waited:.1f}s; stopped waiting.")
        self.status = status


class JobCancelled(JobError):
    def __init__(self, what: str):
        super().__init__(f"Stopped waiting for {what}: cancelled.")


class NoAnswer(QueryToolError):
    """The run completed but produced no assistant text."""
