"""
Pytest configuration and shared fixtures.
"""
import sys
from pathlib import Path

import pytest

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from pdf_openai_querytool.config import Settings  # noqa: E402
from pdf_openai_querytool.jobs import PollPolicy  # noqa: E402
from tests.fakes import FakeOpenAI  # noqa: E402


@pytest.fixture
def client():
    """Fresh in-memory OpenAI client."""
    return FakeOpenAI()


@pytest.fixture
def policy():
    """Poll immediately, never time out."""
    return PollPolicy(interval=0, max_wait=None)


@pytest.fixture
def pdf_dir(tmp_path):
    return tmp_path / "pdfs"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api_key="sk-test",
        cache_path=tmp_path / ".vectorstore.json",
        poll_interval=0,
        max_wait=None,
    )
