"""Command parser for CLI input."""

import shlex
from typing import Optional

from cli.models import (
    CommandRequest,
    DecodeCommand,
    EncodeCommand,
    QRCommand,
    TextCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Encode/Text/Decode/QR)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    command_name, _, remainder = input_line.strip().partition(" ")

    # text keeps the rest of the line verbatim, quotes included
    if command_name == "text":
        return _parse_text(remainder)

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if command_name == "encode":
        return _parse_encode(tokens[1:])
    elif command_name == "decode":
        return _parse_decode(tokens[1:])
    elif command_name == "qr":
        return _parse_qr(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _pop_option(args: list[str], flag: str) -> tuple[list[str], Optional[str]]:
    """Remove '<flag> <value>' from args and return the value."""
    if flag not in args:
        return args, None

    index = args.index(flag)
    if index + 1 >= len(args):
        raise ParseError(f"{flag} requires a value")

    value = args[index + 1]
    return args[:index] + args[index + 2:], value


def _parse_encode(args: list[str]) -> EncodeCommand:
    """Parse 'encode <file...> [--durable] [--password <pw>]' command."""
    args, password = _pop_option(args, "--password")

    durable = "--durable" in args
    file_list = [arg for arg in args if arg != "--durable"]

    unknown = [arg for arg in file_list if arg.startswith("--")]
    if unknown:
        raise ParseError(f"Unknown option: {unknown[0]}")
    if not file_list:
        raise ParseError("encode requires at least one file")

    return EncodeCommand(file_list=tuple(file_list), durable=durable, password=password)


def _parse_text(remainder: str) -> TextCommand:
    """Parse 'text <words...>' command."""
    text = remainder.strip()
    if not text:
        raise ParseError("text requires something to encode")
    return TextCommand(text=text)


def _parse_decode(args: list[str]) -> DecodeCommand:
    """Parse 'decode <reference> [output_dir] [--password <pw>]' command."""
    args, password = _pop_option(args, "--password")

    if not 1 <= len(args) <= 2:
        raise ParseError("decode requires 1 or 2 arguments: <reference> [output_dir]")

    reference = args[0]
    output_dir = args[1] if len(args) > 1 else None
    return DecodeCommand(reference=reference, output_dir=output_dir, password=password)


def _parse_qr(args: list[str]) -> QRCommand:
    """Parse 'qr <reference> [output.png]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("qr requires 1 or 2 arguments: <reference> [output.png]")

    output_path = args[1] if len(args) > 1 else None
    return QRCommand(reference=args[0], output_path=output_path)
