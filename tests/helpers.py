from pathlib import Path


def make_pdfs(directory: Path, *names: str) -> Path:
    """Write tiny placeholder PDFs named `names` into `directory`."""
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_bytes(b"%PDF-1.4\n% " + name.encode() + b"\n%%EOF\n")
    return directory
