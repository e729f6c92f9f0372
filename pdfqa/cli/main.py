"""Standalone CLI for managing and querying pdfqa documents.

Usage::

    python -m pdfqa.cli upload --file ./reports/My Report.pdf
    python -m pdfqa.cli list
    python -m pdfqa.cli ingest --id 3f2a...
    python -m pdfqa.cli ask --id 3f2a... --query "What was the Q3 revenue?"

Configuration comes from the same ``.env`` / ``config/config.yaml`` as the
web server, so both share one document database and vector index.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from pdfqa.utils.errors import PdfQAError

# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_list(args: argparse.Namespace, components: dict[str, Any]) -> int:
    documents = await components["document_service"].list_documents()
    if not documents:
        print("No documents uploaded yet.")
        return 0

    print(f"{'ID':<34}{'PROCESSED':<11}{'NAMESPACE':<30}NAME")
    for doc in documents:
        processed = "yes" if doc.processed else "no"
        print(f"{doc.id:<34}{processed:<11}{doc.namespace:<30}{doc.display_name}")
    return 0


async def _handle_upload(args: argparse.Namespace, components: dict[str, Any]) -> int:
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1

    document = await components["document_service"].upload(path.name, path.read_bytes())
    print("Upload complete:")
    print(f"  Document ID: {document.id}")
    print(f"  Namespace:   {document.namespace}")
    print(f"  Location:    {document.source_location}")
    return 0


async def _handle_ingest(args: argparse.Namespace, components: dict[str, Any]) -> int:
    print(f"Ingesting document: {args.id}")
    result = await components["ingestion_service"].ingest(args.id)
    print("\nIngestion complete:")
    print(f"  Pages indexed: {result.pages_indexed}")
    print(f"  Namespace:     {result.namespace}")
    print(f"  Time:          {result.ingestion_time:.2f}s")
    return 0


async def _handle_ask(args: argparse.Namespace, components: dict[str, Any]) -> int:
    result = await components["qa_service"].answer(args.id, args.query)
    print(result.answer)
    return 0


_HANDLERS = {
    "list": _handle_list,
    "upload": _handle_upload,
    "ingest": _handle_ingest,
    "ask": _handle_ask,
}


async def run_command(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Run one parsed command against *components*; returns the exit code.

    Application errors are printed to stderr and turned into exit code 1.
    """
    try:
        await components["document_store"].initialize()
        return await _HANDLERS[args.command](args, components)
    except PdfQAError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1


async def _run(args: argparse.Namespace) -> int:
    # Deferred import: building the app module configures logging and
    # reads settings, which --help does not need.
    from pdfqa.main import build_components, close_components, config, settings

    components = build_components(settings, config)
    try:
        return await run_command(args, components)
    finally:
        await close_components(components)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the pdfqa CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m pdfqa.cli",
        description="Upload, index and query PDF documents.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("list", help="List uploaded documents")

    upload_parser = subparsers.add_parser("upload", help="Upload a PDF document")
    upload_parser.add_argument("--file", required=True, help="Path to the PDF file")

    ingest_parser = subparsers.add_parser("ingest", help="Extract, embed and index a document")
    ingest_parser.add_argument("--id", required=True, help="Document id")

    ask_parser = subparsers.add_parser("ask", help="Ask a question about a document")
    ask_parser.add_argument("--id", required=True, help="Document id")
    ask_parser.add_argument("--query", required=True, help="Question to answer")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    return asyncio.run(_run(args))
