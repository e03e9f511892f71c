"""Command line entry point: build a disk from text files or explore one."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence

from idz.disk import IdentityDisk
from idz.errors import DiskError
from idz.signature import DemoRandom, parse_dimension

DEFAULT_SIGNATURE = "openai/text-embedding-ada-002_fp32"
_DEFAULT_DIMENSION = 1536


def _quoted(path: Path) -> str:
    return f'"{path}"'


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser of the idz-cli command."""
    parser = argparse.ArgumentParser(
        prog="idz-cli",
        description="A TUI for manipulating Identity Disk (.idz) files",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a new .idz file from text files")
    create.add_argument("-o", "--output", type=Path, required=True, help="Output .idz file path")
    create.add_argument("files", type=Path, nargs="*", help="Text files to process")
    create.add_argument(
        "-m",
        "--model-signature",
        default=DEFAULT_SIGNATURE,
        help="Embedding model signature",
    )

    explore = commands.add_parser("explore", help="Explore an existing .idz file with TUI")
    explore.add_argument("file", type=Path, help=".idz file to explore")
    explore.add_argument(
        "-m",
        "--model-signature",
        required=True,
        help="Model signature to load for searching",
    )
    return parser


def _lines(content: str) -> list[str]:
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def create_idz_file(output: Path | str, files: Iterable[Path | str], model_signature: str) -> None:
    """Build a disk from the non-blank lines of text files, with placeholder embeddings."""
    output = Path(output)
    print(f"Creating .idz file: {_quoted(output)}")
    print(f"Model Signature: {model_signature}")

    dim = parse_dimension(model_signature, _DEFAULT_DIMENSION)
    if "fp32" not in model_signature and "_" in model_signature:
        print(
            f"Warning: Model signature '{model_signature}' does not explicitly state "
            "'fp32'. Dummy f32 embeddings will be generated. This might be incorrect.",
            file=sys.stderr,
        )

    rng = DemoRandom()
    with IdentityDisk.create(output, model_signature) as disk:
        for file_path in map(Path, files):
            print(f"Processing file: {_quoted(file_path)}")
            content = file_path.read_text(encoding="utf-8")
            chunks = [line for line in _lines(content) if line.strip()]
            for index, chunk_content in enumerate(chunks):
                meta = {
                    "source_file": str(file_path),
                    "chunk_index": index,
                    "char_count": len(chunk_content.encode("utf-8")),
                }
                embedding = rng.vector(dim)
                try:
                    chunk_id = disk.add_chunk(chunk_content, embedding, meta)
                except DiskError as exc:
                    print(
                        f"Failed to add chunk from {_quoted(file_path)}: {exc}",
                        file=sys.stderr,
                    )
                else:
                    print(f"Added chunk {chunk_id} from {_quoted(file_path)}")

    print(f"Successfully created .idz file at {_quoted(output)}!")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the idz-cli command and return its exit status."""
    args = build_parser().parse_args(argv)
    try:
        if args.command == "create":
            create_idz_file(args.output, args.files, args.model_signature)
        else:
            from idz.tui import run_tui

            run_tui(args.file, args.model_signature)
    except (DiskError, OSError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())