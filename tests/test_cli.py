"""
Unit tests for the command-line interface
"""

import json
import logging

import pytest

from multisign_sdk.canonical import keccak256_hex
from multisign_sdk.cli import main
from multisign_sdk.documents.types import TextContent
from multisign_sdk.signing.coordinator import SignatureCoordinator
from multisign_sdk.signing.message import build_message
from multisign_sdk.storage import JsonFileDocumentStore, document_to_dict


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the handler main() installs so later tests do not write to a closed capture stream"""
    yield
    logger = logging.getLogger("multisign_sdk")
    for handler in list(logger.handlers):
        if getattr(handler, "_multisign_handler", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def signed_document(make_document, alice, alice_signer, bob, bob_signer):
    document = make_document()
    coordinator = SignatureCoordinator()
    coordinator.sign(document, alice, alice_signer)
    coordinator.sign(document, bob, bob_signer)
    return document


@pytest.fixture
def export_file(tmp_path, signed_document):
    path = tmp_path / "export.json"
    path.write_text(json.dumps(document_to_dict(signed_document)), encoding='utf-8')
    return path


class TestHashCommand:
    """Test the hash command"""

    def test_text(self, tmp_path, capsys):
        path = tmp_path / "note.txt"
        path.write_bytes(b"hello")
        assert main(['hash', str(path)]) == 0
        assert capsys.readouterr().out.strip() == keccak256_hex(b"hello")

    def test_text_line_endings_hashed_verbatim(self, tmp_path, capsys):
        path = tmp_path / "crlf.txt"
        path.write_bytes(b"line1\r\nline2\r")
        assert main(['hash', str(path)]) == 0
        assert capsys.readouterr().out.strip() == keccak256_hex(b"line1\r\nline2\r")

    def test_text_not_utf8(self, tmp_path, capsys):
        path = tmp_path / "latin1.txt"
        path.write_bytes(b"caf\xe9")
        assert main(['hash', str(path)]) == 2
        assert "not valid UTF-8" in capsys.readouterr().err

    def test_structured(self, tmp_path, capsys):
        path = tmp_path / "data.json"
        path.write_text('{ "b": 1, "a": 2 }')
        assert main(['hash', '--kind', 'structured', str(path)]) == 0
        assert capsys.readouterr().out.strip() == keccak256_hex(b'{"a":2,"b":1}')

    def test_binary(self, tmp_path, capsys):
        path = tmp_path / "file.pdf"
        path.write_bytes(b"%PDF")
        assert main(['hash', '--kind', 'binary', str(path)]) == 0
        assert capsys.readouterr().out.strip() == keccak256_hex(b"JVBERg==")

    def test_missing_file(self, tmp_path):
        assert main(['hash', str(tmp_path / "absent.txt")]) == 2


class TestVerifyCommand:
    """Test offline verification"""

    def test_valid(self, export_file, capsys):
        assert main(['verify', '--document', str(export_file)]) == 0
        assert "VALID" in capsys.readouterr().out

    def test_tampered(self, tmp_path, signed_document, capsys):
        signed_document.content.data = TextContent("hellp")
        path = tmp_path / "tampered.json"
        path.write_text(json.dumps(document_to_dict(signed_document)), encoding='utf-8')

        assert main(['verify', '--document', str(path)]) == 1
        out = capsys.readouterr().out
        assert "INVALID" in out
        assert "Invalid signature from alice" in out

    def test_json_report(self, export_file, capsys):
        assert main(['verify', '--json', '--document', str(export_file)]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report['valid'] is True
        assert len(report['signatureResults']) == 2

    def test_from_store(self, tmp_path, signed_document):
        path = tmp_path / "store.json"
        JsonFileDocumentStore(path).save_all([signed_document])
        assert main(['verify', '--store', str(path), '--id', signed_document.id]) == 0

    def test_store_requires_id(self, tmp_path):
        assert main(['verify', '--store', str(tmp_path / "store.json")]) == 2

    def test_unknown_id(self, tmp_path, signed_document):
        path = tmp_path / "store.json"
        JsonFileDocumentStore(path).save_all([signed_document])
        assert main(['verify', '--store', str(path), '--id', 'doc_missing']) == 2


class TestOtherCommands:
    """Test message, status and list commands"""

    def test_message(self, export_file, signed_document, capsys):
        assert main(['message', '--document', str(export_file)]) == 0
        assert capsys.readouterr().out == build_message(signed_document) + "\n"

    def test_status(self, export_file, capsys):
        assert main(['status', '--document', str(export_file)]) == 0
        out = capsys.readouterr().out
        assert "Status: complete" in out
        assert "Signed: 2/2 (100%)" in out

    def test_list(self, tmp_path, signed_document, make_document, capsys):
        pending = make_document()
        pending.id = "doc_pending"
        path = tmp_path / "store.json"
        JsonFileDocumentStore(path).save_all([signed_document, pending])

        assert main(['list', '--store', str(path), '--status', 'pending']) == 0
        out = capsys.readouterr().out
        assert "doc_pending" in out
        assert signed_document.id not in out

    def test_list_empty(self, tmp_path, capsys):
        assert main(['list', '--store', str(tmp_path / "none.json")]) == 0
        assert "No documents found" in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == 1
