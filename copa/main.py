"""
Command line entry point for copa
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

import pyperclip
from rich.console import Console
from rich.table import Table

from copa import __version__
from copa.config import get_settings, split_patterns
from copa.errors import CopaError
from copa.template_system import ProcessResult, PromptProcessor
from copa.utils import get_logger, setup_logging

console = Console(stderr=True)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="copa",
        description="Expand prompt templates and copy the result to the clipboard.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    template = commands.add_parser(
        "template", aliases=["t"], help="Expand a prompt template"
    )
    template.add_argument("file", type=Path, help="Template file to expand")
    template.add_argument(
        "--stdout", action="store_true", help="Print instead of copying to the clipboard"
    )
    template.add_argument("-v", "--verbose", action="store_true", help="List included files")

    copy = commands.add_parser("copy", aliases=["c"], help="Copy files under a path")
    copy.add_argument("path", type=Path, help="File or directory to copy")
    copy.add_argument(
        "-e", "--exclude", default="", help="Comma-separated exclude patterns"
    )
    copy.add_argument(
        "--stdout", action="store_true", help="Print instead of copying to the clipboard"
    )
    copy.add_argument("-v", "--verbose", action="store_true", help="List included files")
    return parser


def emit(content: str, to_stdout: bool) -> bool:
    """Copy ``content`` to the clipboard, or print it when asked or when no clipboard exists.

    Returns whether the clipboard received the content.
    """
    if not to_stdout:
        try:
            pyperclip.copy(content)
            return True
        except pyperclip.PyperclipException as e:
            console.print(
                f"Clipboard unavailable ({e}); printing to stdout", style="yellow", markup=False
            )
    sys.stdout.write(content)
    sys.stdout.flush()
    return False


def report(result: ProcessResult, verbose: bool, copied: bool) -> None:
    for warning in result.warnings:
        console.print(warning, style="yellow", markup=False)

    if verbose and result.included_files:
        table = Table(title="Included")
        table.add_column("Resource")
        table.add_column("Tokens", justify="right")
        for label, tokens in sorted(
            result.included_files.items(), key=lambda item: item[1], reverse=True
        ):
            table.add_row(label, f"{tokens:,}")
        console.print(table)

    action = "Copied to clipboard" if copied else "Expanded"
    console.print(f"{action}: {result.total_tokens:,} tokens", style="green")


async def run(args: argparse.Namespace) -> ProcessResult:
    processor = PromptProcessor()
    if args.command in ("template", "t"):
        return await processor.process_prompt_file(args.file)
    return await processor.copy_resource(args.path, split_patterns(args.exclude))


def main(argv: Sequence[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    setup_logging(get_settings())
    logger = get_logger(__name__)

    try:
        result = asyncio.run(run(args))
    except CopaError as e:
        logger.error("copa failed", error=str(e))
        console.print(f"Error: {e}", style="red", markup=False)
        return 1
    except KeyboardInterrupt:
        return 130

    if not result.content and result.warnings:
        for warning in result.warnings:
            console.print(warning, style="yellow", markup=False)
        console.print("Error: nothing to copy", style="red", markup=False)
        return 1

    copied = emit(result.content, args.stdout)
    report(result, args.verbose, copied=copied)
    return 0


if __name__ == "__main__":
    sys.exit(main())
