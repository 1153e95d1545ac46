import sys
from typing import Optional, TextIO

COLORS = {
    "RESET": "\033[0m",
    "RED": "\033[91m",
    "GREEN": "\033[92m",
    "YELLOW": "\033[93m",
    "CYAN": "\033[96m",
}


def color(text: str, color_name: str, stream: TextIO) -> str:
    isatty = getattr(stream, "isatty", None)
    if isatty is None or not isatty():
        return text
    return f"{COLORS.get(color_name, '')}{text}{COLORS['RESET']}"


def print_error(message: str, stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stderr
    print(color(message, "RED", stream), file=stream, flush=True)


def print_status(message: str, stream: Optional[TextIO] = None, color_name: str = "GREEN") -> None:
    stream = stream or sys.stdout
    print(color(message, color_name, stream), file=stream, flush=True)
