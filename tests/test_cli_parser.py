"""Tests for CLI command parsing."""

import pytest

from cli.models import DecodeCommand, EncodeCommand, QRCommand, TextCommand
from cli.parser import ParseError, parse_command


class TestEncode:
    def test_files(self):
        cmd = parse_command("encode a.txt 'my photo.png'")
        assert cmd == EncodeCommand(file_list=("a.txt", "my photo.png"))

    def test_options(self):
        cmd = parse_command("encode a.txt --durable --password hunter22")
        assert cmd.durable is True
        assert cmd.password == "hunter22"
        assert cmd.file_list == ("a.txt",)

    def test_requires_file(self):
        with pytest.raises(ParseError):
            parse_command("encode --durable")

    def test_password_requires_value(self):
        with pytest.raises(ParseError):
            parse_command("encode a.txt --password")

    def test_unknown_option(self):
        with pytest.raises(ParseError):
            parse_command("encode a.txt --fast")


class TestText:
    def test_keeps_line_verbatim(self):
        cmd = parse_command('text meet "me"  at noon')
        assert cmd == TextCommand(text='meet "me"  at noon')

    def test_requires_text(self):
        with pytest.raises(ParseError):
            parse_command("text   ")


class TestDecode:
    def test_reference_only(self):
        assert parse_command("decode CACHE:1-2") == DecodeCommand(reference="CACHE:1-2")

    def test_output_dir_and_password(self):
        cmd = parse_command("decode DB:abc out --password hunter22")
        assert cmd == DecodeCommand(reference="DB:abc", output_dir="out", password="hunter22")

    def test_too_many_arguments(self):
        with pytest.raises(ParseError):
            parse_command("decode a b c")


class TestQR:
    def test_output_path(self):
        assert parse_command("qr DB:abc share.png") == QRCommand(reference="DB:abc", output_path="share.png")

    def test_requires_reference(self):
        with pytest.raises(ParseError):
            parse_command("qr")


def test_unknown_command():
    with pytest.raises(ParseError):
        parse_command("upload a.txt")


def test_empty_command():
    with pytest.raises(ParseError):
        parse_command("   ")


def test_unbalanced_quotes():
    with pytest.raises(ParseError):
        parse_command("encode 'a.txt")
