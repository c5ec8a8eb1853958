"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["encode", "text", "decode", "qr", "clear", "exit", "help", "--durable", "--password"]

STYLE = Style.from_dict(
    {
        "prompt": "#00ff00 bold",
        "command": "#0088ff bold",
    }
)

GREEN = "\033[38;2;0;255;0m"
RESET = "\033[0m"

LOGO = f"""{GREEN}
  ██████╗ ██████╗ ██████╗ ██████╗  ██████╗ ██████╗
 ██╔═══██╗██╔══██╗██╔══██╗██╔══██╗██╔═══██╗██╔══██╗
 ██║   ██║██████╔╝██║  ██║██████╔╝██║   ██║██████╔╝
 ██║▄▄ ██║██╔══██╗██║  ██║██╔══██╗██║   ██║██╔═══╝
 ╚██████╔╝██║  ██║██████╔╝██║  ██║╚██████╔╝██║
  ╚══▀▀═╝ ╚═╝  ╚═╝╚═════╝ ╚═╝  ╚═╝ ╚═════╝ ╚═╝
{RESET}"""

WELCOME_TITLE = "QRDrop CLI - share files through QR codes"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "qrdrop> "

HELP_TEXT = """Available commands:
  encode <file...> [--durable] [--password <pw>]   Encode files into a shareable reference
  text <words...>                                  Encode typed text as message.txt
  decode <reference> [output_dir] [--password <pw>]
                                                   Decode a reference, URL or pasted string
  qr <reference> [output.png]                      Save a QR code for a reference
  clear                                            Clear screen and redisplay welcome message
  help                                             Show this help
  exit                                             Exit REPL

Small payloads are embedded in the reference itself; larger ones are stored
on the relay and the reference points at them. --durable skips the
short-lived in-memory cache so the reference survives a relay restart.
Examples:
  encode notes.txt photo.png
  encode report.pdf --durable --password hunter22
  text meet me at noon
  decode DB:3f1c2e3a-... downloads/
  qr CACHE:18f3a2b4c5d-9f1c2e3a share.png"""

TEXT_MIME_TYPES = (
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-sh",
    "application/x-yaml",
)

MAX_FILE_SIZE = 10 * 1024 * 1024
MAX_TOTAL_SIZE = 50 * 1024 * 1024
