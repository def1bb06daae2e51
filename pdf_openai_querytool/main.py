from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pdf_openai_querytool.config import Settings, load_settings
from pdf_openai_querytool.errors import QueryToolError
from pdf_openai_querytool.logging_utils import configure_logging
from pdf_openai_querytool.models import Answer, Reference
from pdf_openai_querytool.openai import get_client
from pdf_openai_querytool.query import ask_question

app = typer.Typer(help="Ask questions about a folder of PDFs using an OpenAI Vector Store.")
console = Console()
err_console = Console(stderr=True)


@app.command()
def ask(
    prompt: str = typer.Argument("Ask something about the PDFs.", help="Question to answer from the PDFs."),
    directory: Path = typer.Argument(Path("./pdfs"), help="Folder with up to 10 PDFs."),
    reuse: Optional[str] = typer.Option(None, "--reuse", help="Vector Store id to reuse if it still exists."),
    max_wait: Optional[float] = typer.Option(
        None, "--max-wait", min=0, help="Give up waiting on a remote job after this many seconds (0: never).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """
    Sync new PDFs into the Vector Store and answer PROMPT from them.
    """
    configure_logging(verbose)
    try:
        settings = _apply_overrides(load_settings(), max_wait)
        client = get_client(settings)
        answer = ask_question(client, settings, prompt, directory, reuse=reuse)
    except KeyboardInterrupt:
        err_console.print("\n[red]Error:[/red] interrupted (remote jobs keep running).")
        raise typer.Exit(code=1)
    except QueryToolError as exc:
        err_console.print(f"\n[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    _print_answer(answer)


# --------------------------- Utilities ---------------------------

def _apply_overrides(settings: Settings, max_wait: Optional[float]) -> Settings:
    if max_wait is None:
        return settings
    return replace(settings, max_wait=max_wait or None)


def _print_answer(answer: Answer) -> None:
    console.rule("[bold]Answer")
    console.print(answer.text or "(no text)", markup=False)
    _print_references(answer.references)
    console.rule()
    console.print(
        f"Vector Store ID: {answer.vector_store_id} (pass with --reuse or set VECTOR_STORE_ID in .env)"
    )


def _print_references(refs: List[Reference]) -> None:
    if not refs:
        return
    table = Table(title="References", box=box.SIMPLE)
    table.add_column("File")
    table.add_column("File ID", overflow="fold")
    for r in refs:
        table.add_row(r.filename or "(unknown)", r.file_id)
    console.print(table)


# --------------------------- Entrypoint ---------------------------

def main() -> None:
    app()


if __name__ == "__main__":
    main()
