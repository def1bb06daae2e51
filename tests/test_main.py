"""
Tests for the command line interface
"""
import json
import logging

import pytest
from typer.testing import CliRunner

from pdf_openai_querytool import main as cli
from pdf_openai_querytool.logging_utils import configure_logging
from tests.fakes import FakeOpenAI, server_error
from tests.helpers import make_pdfs

runner = CliRunner()


@pytest.fixture
def fake(monkeypatch, tmp_path):
    """Run the CLI in tmp_path against an in-memory client."""
    client = FakeOpenAI()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("PDF_QUERY_POLL_INTERVAL", "0")
    monkeypatch.delenv("VECTOR_STORE_ID", raising=False)
    monkeypatch.delenv("PDF_QUERY_CACHE_PATH", raising=False)
    monkeypatch.setattr(cli, "get_client", lambda settings: client)
    monkeypatch.setattr(cli, "configure_logging", lambda verbose: None)
    return client


class TestAskCommand:
    """Tests for the ask command"""

    def test_answers_and_caches(self, fake, tmp_path):
        make_pdfs(tmp_path / "pdfs", "spec.pdf")

        result = runner.invoke(cli.app, ["What is in spec.pdf?"])

        assert result.exit_code == 0, result.output
        assert "It describes the system." in result.output
        cached = json.loads((tmp_path / ".vectorstore.json").read_text())["vectorStoreId"]
        assert cached in result.output

    def test_custom_directory_and_reuse(self, fake, tmp_path):
        vs_id = fake.add_store("a.pdf")
        make_pdfs(tmp_path / "docs", "a.pdf")

        result = runner.invoke(cli.app, ["q", str(tmp_path / "docs"), "--reuse", vs_id])

        assert result.exit_code == 0, result.output
        assert fake.uploads == []
        assert not (tmp_path / ".vectorstore.json").exists()

    def test_missing_directory_exits_1(self, fake):
        result = runner.invoke(cli.app, ["q", "nowhere"])
        assert result.exit_code == 1
        assert "nowhere" in result.output

    def test_missing_api_key_exits_1(self, fake, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY")
        result = runner.invoke(cli.app, ["q"])
        assert result.exit_code == 1
        assert "OPENAI_API_KEY" in result.output

    def test_remote_failure_exits_1(self, fake, tmp_path):
        make_pdfs(tmp_path / "pdfs", "spec.pdf")
        fake.store_error = server_error("/vector_stores/vs_1", status=401)

        result = runner.invoke(cli.app, ["q", "pdfs", "--reuse", "vs_1"])

        assert result.exit_code == 1
        assert "401" in result.output

    def test_no_text_placeholder(self, fake, tmp_path):
        make_pdfs(tmp_path / "pdfs", "spec.pdf")
        fake.answer_messages = []

        result = runner.invoke(cli.app, ["q"])

        assert result.exit_code == 0, result.output
        assert "(no text)" in result.output

    def test_max_wait_option(self, fake, tmp_path):
        """--max-wait bounds a run that never finishes"""
        make_pdfs(tmp_path / "pdfs", "spec.pdf")
        fake.run_statuses = ["in_progress"]

        result = runner.invoke(cli.app, ["q", "--max-wait", "0.000001"])

        assert result.exit_code == 1
        assert "stopped waiting" in result.output


@pytest.fixture
def restore_logging():
    """Put the root logger and the HTTP library loggers back as they were."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    noisy = {name: logging.getLogger(name).level for name in ("openai", "httpx", "httpcore")}
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    for name, old in noisy.items():
        logging.getLogger(name).setLevel(old)


class TestConfigureLogging:
    def test_quiets_http_libraries(self, restore_logging):
        configure_logging(verbose=False)
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger().level == logging.INFO

        configure_logging(verbose=True)
        assert logging.getLogger("openai").level == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG
