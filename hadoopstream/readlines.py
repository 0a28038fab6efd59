"""Command that prints the bytes of every complete input line."""

from __future__ import annotations

import sys
from typing import Iterable

from .utils import read_lines


def format_line(data: bytes) -> str:
    """Render bytes as a bracketed list of their decimal values."""
    return "[" + " ".join(str(byte) for byte in data) + "]"


def _complete_lines(stream: Iterable[bytes]) -> Iterable[bytes]:
    for line in stream:
        if not line.endswith(b"\n"):
            return
        yield line


def main(argv: list[str] | None = None) -> int:
    """Print each newline-terminated line of standard input as byte values.

    A last line without a newline is not printed.
    """
    for line in read_lines(_complete_lines(sys.stdin.buffer)):
        print(format_line(line))
    return 0


if __name__ == "__main__":
    sys.exit(main())