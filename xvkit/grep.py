"""A tiny grep supporting the ^ . * $ operators."""

from __future__ import annotations

import sys
from typing import IO

# Lines are gathered in a buffer of this many characters, less one.
BUFFER_SIZE = 1024


def match(re: str, text: str) -> bool:
    """Return whether ``re`` matches anywhere in ``text``."""
    if re.startswith("^"):
        return _match_here(re, 1, text, 0)
    for start in range(len(text) + 1):
        if _match_here(re, 0, text, start):
            return True
    return False


def _match_here(re: str, ri: int, text: str, ti: int) -> bool:
    if ri == len(re):
        return True
    if ri + 1 < len(re) and re[ri + 1] == "*":
        return _match_star(re[ri], re, ri + 2, text, ti)
    if re[ri] == "$" and ri + 1 == len(re):
        return ti == len(text)
    if ti < len(text) and (re[ri] == "." or re[ri] == text[ti]):
        return _match_here(re, ri + 1, text, ti + 1)
    return False


def _match_star(c: str, re: str, ri: int, text: str, ti: int) -> bool:
    while True:
        if _match_here(re, ri, text, ti):
            return True
        if not (ti < len(text) and (text[ti] == c or c == ".")):
            return False
        ti += 1


def grep(pattern: str, stream: IO[str], out: IO[str]) -> None:
    """Write to ``out`` each newline-terminated line of ``stream`` that matches.

    A final line without a newline is not printed, and reading stops
    once a line fills the whole buffer.
    """
    pending = ""
    while True:
        room = BUFFER_SIZE - 1 - len(pending)
        if room <= 0:
            break
        chunk = stream.read(room)
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split("\n")
        for line in lines:
            if match(pattern, line):
                out.write(line + "\n")


def main(argv: list[str] | None = None) -> int:
    """Command entry point: ``grep pattern [file ...]``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern, files = args[0], args[1:]
    if not files:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for name in files:
        try:
            stream = open(name, encoding="latin-1", newline="")
        except OSError:
            sys.stdout.write(f"grep: cannot open {name}\n")
            return 1
        with stream:
            grep(pattern, stream, sys.stdout)
    return 0