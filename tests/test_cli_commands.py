"""Tests for CLI command handlers."""

import pytest
from unittest.mock import Mock

from cli.commands import handle_decode, handle_encode, handle_qr, handle_text
from cli.models import DecodeCommand, EncodeCommand, QRCommand, TextCommand
from cli.relay_client import RelayClient
from cli.repl import dispatch_command, run_builtin


def test_handle_encode():
    """Test encode command handler with mocked client."""
    mock_client = Mock(spec=RelayClient)
    mock_client.encode_files.return_value = "Encoded successfully!"

    cmd = EncodeCommand(file_list=("a.txt", "b.txt"), durable=True, password="hunter22")
    result = handle_encode(cmd, client=mock_client)

    assert "Encoded successfully" in result
    mock_client.encode_files.assert_called_once_with(["a.txt", "b.txt"], durable=True, password="hunter22")


def test_handle_text():
    mock_client = Mock(spec=RelayClient)
    mock_client.encode_text.return_value = "Encoded successfully!"

    handle_text(TextCommand(text="hello there"), client=mock_client)

    mock_client.encode_text.assert_called_once_with("hello there")


def test_handle_decode():
    """Test decode command handler with mocked client."""
    mock_client = Mock(spec=RelayClient)
    mock_client.decode.return_value = "Decoded successfully!"

    cmd = DecodeCommand(reference="CACHE:1-2", output_dir="out")
    result = handle_decode(cmd, client=mock_client)

    assert "Decoded" in result
    mock_client.decode.assert_called_once_with("CACHE:1-2", output_dir="out", password=None)


def test_handle_qr():
    mock_client = Mock(spec=RelayClient)
    mock_client.save_qr.return_value = "QR code saved to share.png"

    result = handle_qr(QRCommand(reference="DB:abc", output_path="share.png"), client=mock_client)

    assert "share.png" in result
    mock_client.save_qr.assert_called_once_with("DB:abc", output_path="share.png")


def test_dispatch_routes_by_command_type(monkeypatch):
    calls = []
    monkeypatch.setattr("cli.commands.handle_text", lambda cmd: calls.append(cmd) or "ok")

    assert dispatch_command(TextCommand(text="hi")) == "ok"
    assert calls == [TextCommand(text="hi")]


def test_dispatch_unknown_type():
    assert "Unknown command type" in dispatch_command(object())


def test_builtin_commands(capsys):
    assert run_builtin("help") is True
    assert "Available commands" in capsys.readouterr().out
    assert run_builtin("encode a.txt") is False

    with pytest.raises(EOFError):
        run_builtin("exit")
