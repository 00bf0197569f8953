"""
Command-line interface for MultiSign Python SDK
Offline hashing, attestation message rendering and verification of exported documents
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .canonical.hashing import hash_content
from .config import configure_logging, load_config
from .documents import lifecycle
from .documents.types import BinaryContent, ContentKind, Document, DocumentStatus, StructuredContent, TextContent
from .exceptions import MultiSignSDKError, ValidationError
from .signing.message import build_message
from .storage import JsonFileDocumentStore, loads_documents
from .verification import VerificationEngine


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='multisign',
        description='MultiSign command-line interface for offline document hashing and verification'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'MultiSign Python SDK {__version__}'
    )
    parser.add_argument('--config', help='JSON configuration file')
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Override the configured log level'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_hash_parser(subparsers)
    setup_document_parsers(subparsers)
    setup_list_parser(subparsers)

    return parser


def setup_hash_parser(subparsers):
    """Setup hash subcommand."""
    hash_parser = subparsers.add_parser('hash', help='Compute the content hash of a file')
    hash_parser.add_argument('file', help='File to hash')
    hash_parser.add_argument(
        '--kind',
        choices=[k.value for k in ContentKind],
        default=ContentKind.TEXT.value,
        help='How to interpret the file (default: text)'
    )


def add_document_source(parser: argparse.ArgumentParser):
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--document', help='Exported document JSON file')
    source.add_argument('--store', help='Document store JSON file (requires --id)')
    parser.add_argument('--id', dest='document_id', help='Document id within the store')


def setup_document_parsers(subparsers):
    """Setup message, verify and status subcommands."""
    message_parser = subparsers.add_parser('message', help='Print the attestation message of a document')
    add_document_source(message_parser)

    verify_parser = subparsers.add_parser('verify', help='Verify a document offline')
    add_document_source(verify_parser)
    verify_parser.add_argument('--json', action='store_true', help='Print the full report as JSON')

    status_parser = subparsers.add_parser('status', help='Show signature coverage of a document')
    add_document_source(status_parser)


def setup_list_parser(subparsers):
    """Setup list subcommand."""
    list_parser = subparsers.add_parser('list', help='List documents in a store file')
    list_parser.add_argument('--store', required=True, help='Document store JSON file')
    list_parser.add_argument(
        '--status',
        action='append',
        choices=[s.value for s in DocumentStatus],
        help='Only show documents with this status (repeatable)'
    )


def load_document(args) -> Document:
    """
    Load the document named by --document or --store/--id.

    Raises:
        ValidationError: If the arguments or the file are invalid
    """
    if args.document:
        try:
            text = Path(args.document).read_text(encoding='utf-8')
        except OSError as e:
            raise ValidationError(f"Cannot read document file: {e}")

        documents = loads_documents(text)
        if args.document_id:
            documents = [d for d in documents if d.id == args.document_id]
        if len(documents) != 1:
            raise ValidationError(
                f"Expected exactly one document in {args.document}, found {len(documents)}; use --id to select one"
            )
        return documents[0]

    if not args.document_id:
        raise ValidationError("--store requires --id")

    return JsonFileDocumentStore(args.store).get(args.document_id)


def handle_hash_command(args) -> int:
    """Handle hash command."""
    path = Path(args.file)
    kind = ContentKind(args.kind)

    if kind == ContentKind.BINARY:
        content = BinaryContent.from_bytes(path.read_bytes(), filename=path.name)
    elif kind == ContentKind.STRUCTURED:
        try:
            content = StructuredContent(json.loads(path.read_text(encoding='utf-8')))
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON format: {e}")
    else:
        # Decode the raw bytes so line endings are hashed as stored
        try:
            content = TextContent(path.read_bytes().decode('utf-8'))
        except UnicodeDecodeError as e:
            raise ValidationError(f"Text file is not valid UTF-8: {e}")

    print(hash_content(content))
    return 0


def handle_message_command(args) -> int:
    """Handle message command."""
    print(build_message(load_document(args)))
    return 0


def handle_verify_command(args, verifier: VerificationEngine) -> int:
    """Handle verify command."""
    document = load_document(args)
    report = verifier.verify_document(document)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        mark = "✓" if report.valid else "✗"
        print(f"{mark} Document {document.id}: {'VALID' if report.valid else 'INVALID'}")
        print(f"  Content hash valid: {report.content_hash_valid}")
        print(f"  Signatures valid: {report.signatures_valid} ({len(report.signature_results)} signatures)")
        print(f"  All required signers present: {report.all_signers_present}")
        for error in report.errors:
            print(f"  Error: {error}")

    return 0 if report.valid else 1


def handle_status_command(args) -> int:
    """Handle status command."""
    document = load_document(args)
    status = lifecycle.signature_status(document)

    print(f"Document: {document.id}")
    print(f"Status: {document.status.value}")
    print(f"Signed: {status.signed}/{status.total} ({status.percentage}%)")
    if status.pending:
        print(f"Pending: {', '.join(status.pending)}")
    return 0


def handle_list_command(args) -> int:
    """Handle list command."""
    documents = JsonFileDocumentStore(args.store).load_all()
    if args.status:
        documents = [d for d in documents if d.status.value in args.status]

    if not documents:
        print("No documents found")
        return 0

    for doc in documents:
        status = lifecycle.signature_status(doc)
        print(f"{doc.id}  {doc.status.value:<9}  {doc.content.kind.value:<10}  {status.signed}/{status.total}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        if args.log_level:
            config.logging.level = args.log_level
        configure_logging(config.logging)

        if args.command == 'hash':
            return handle_hash_command(args)
        elif args.command == 'message':
            return handle_message_command(args)
        elif args.command == 'verify':
            return handle_verify_command(args, VerificationEngine(config.verification.max_workers))
        elif args.command == 'status':
            return handle_status_command(args)
        elif args.command == 'list':
            return handle_list_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except MultiSignSDKError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
