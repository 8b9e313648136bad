"""Small file and process utilities: cat, echo, wc, ls, ln, mkdir, rm, kill."""

from __future__ import annotations

import os
import signal
import stat as _stat_mod
import sys
from dataclasses import dataclass
from typing import IO

from xvkit.layout import FileType
from xvkit.printf import format_printf
from xvkit.ulib import atoi

# Longest name a directory entry holds.
DIRSIZ = 14

_CHUNK = 512
_LS_PATH_LIMIT = 512
# A NUL byte also separates words.
_WC_SPACE = " \r\t\n\v\0"
_KILL_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)


def _args(argv: list[str] | None) -> list[str]:
    return sys.argv[1:] if argv is None else list(argv)


def _open_text(name: str) -> IO[str]:
    return open(name, encoding="latin-1", newline="")


def _as_text(chunk: str | bytes) -> str:
    if isinstance(chunk, (bytes, bytearray)):
        return bytes(chunk).decode("latin-1")
    return chunk


def cat(src: IO, out: IO) -> None:
    """Copy everything from ``src`` to ``out``.

    Raises :class:`OSError` naming a read or write error.
    """
    while True:
        try:
            chunk = src.read(_CHUNK)
        except OSError as exc:
            raise OSError("cat: read error") from exc
        if not chunk:
            return
        try:
            written = out.write(chunk)
        except OSError as exc:
            raise OSError("cat: write error") from exc
        if written is not None and written != len(chunk):
            raise OSError("cat: write error")


def cat_main(argv: list[str] | None = None) -> int:
    """Command entry point: ``cat [file ...]``."""
    args = _args(argv)
    try:
        if not args:
            cat(sys.stdin, sys.stdout)
            return 0
        for name in args:
            try:
                stream = _open_text(name)
            except OSError:
                sys.stderr.write(f"cat: cannot open {name}\n")
                return 1
            with stream:
                cat(stream, sys.stdout)
    except OSError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    return 0


def echo(args: list[str], out: IO[str]) -> None:
    """Write ``args`` separated by spaces, ending with a newline.

    Nothing at all is written when ``args`` is empty.
    """
    if args:
        out.write(" ".join(args) + "\n")


def echo_main(argv: list[str] | None = None) -> int:
    """Command entry point: ``echo [word ...]``."""
    echo(_args(argv), sys.stdout)
    return 0


@dataclass(frozen=True)
class WcCounts:
    """Line, word and character counts of one input."""

    lines: int = 0
    words: int = 0
    chars: int = 0


def wc(stream: IO) -> WcCounts:
    """Count lines, words and characters read from ``stream``."""
    lines = words = chars = 0
    in_word = False
    while True:
        chunk = _as_text(stream.read(_CHUNK))
        if not chunk:
            break
        chars += len(chunk)
        for ch in chunk:
            if ch == "\n":
                lines += 1
            if ch in _WC_SPACE:
                in_word = False
            elif not in_word:
                words += 1
                in_word = True
    return WcCounts(lines=lines, words=words, chars=chars)


def _wc_line(counts: WcCounts, name: str) -> str:
    return format_printf("%d %d %d %s\n", counts.lines, counts.words, counts.chars, name)


def wc_main(argv: list[str] | None = None) -> int:
    """Command entry point: ``wc [file ...]``."""
    args = _args(argv)
    try:
        if not args:
            sys.stdout.write(_wc_line(wc(sys.stdin), ""))
            return 0
        for name in args:
            try:
                stream = _open_text(name)
            except OSError:
                sys.stdout.write(f"wc: cannot open {name}\n")
                return 1
            with stream:
                counts = wc(stream)
            sys.stdout.write(_wc_line(counts, name))
    except OSError:
        sys.stdout.write("wc: read error\n")
        return 1
    return 0


def print_num_reverse(num: int, out: IO[str]) -> None:
    """Write the decimal digits of ``num`` least significant first.

    Zero prints ``0``; a negative number prints nothing.
    """
    if num == 0:
        out.write("0")
        return
    n = num
    while n > 0:
        n, digit = divmod(n, 10)
        out.write(chr(ord("0") + digit))


def hello_main(argv: list[str] | None = None) -> int:
    """Command entry point: print a greeting and a reversed number."""
    sys.stdout.write("Hello World xv6\n")
    print_num_reverse(1542, sys.stdout)
    sys.stdout.write("\n")
    return 0


def fmtname(path: str) -> str:
    """The last component of ``path``, blank-padded to ``DIRSIZ`` if shorter."""
    name = path.rsplit("/", 1)[-1]
    if len(name) >= DIRSIZ:
        return name
    return name + " " * (DIRSIZ - len(name))


def _file_info(path: str) -> tuple[int, int, int]:
    info = os.stat(path)
    if _stat_mod.S_ISDIR(info.st_mode):
        kind = FileType.DIR
    elif _stat_mod.S_ISREG(info.st_mode):
        kind = FileType.FILE
    else:
        kind = FileType.DEVICE
    return int(kind), info.st_ino, info.st_size


def ls(path: str, out: IO[str], err: IO[str]) -> None:
    """List ``path``: one line for a file, one per entry for a directory."""
    try:
        kind, ino, size = _file_info(path)
    except OSError:
        err.write(f"ls: cannot open {path}\n")
        return
    if kind != FileType.DIR:
        out.write(format_printf("%s %d %d %l\n", fmtname(path), kind, ino, size))
        return
    if len(path) + 1 + DIRSIZ + 1 > _LS_PATH_LIMIT:
        out.write("ls: path too long\n")
        return
    try:
        names = sorted(os.listdir(path))
    except OSError:
        err.write(f"ls: cannot open {path}\n")
        return
    for name in (".", "..", *names):
        full = f"{path}/{name}"
        try:
            kind, ino, size = _file_info(full)
        except OSError:
            out.write(f"ls: cannot stat {full}\n")
            continue
        out.write(format_printf("%s %d %d %d\n", fmtname(full), kind, ino, size))


def ls_main(argv: list[str] | None = None) -> int:
    """Command entry point: ``ls [path ...]``."""
    args = _args(argv)
    for path in args or ["."]:
        ls(path, sys.stdout, sys.stderr)
    return 0


def ln_main(argv: list[str] | None = None) -> int:
    """Command entry point: ``ln old new``."""
    args = _args(argv)
    if len(args) != 2:
        sys.stderr.write("Usage: ln old new\n")
        return 1
    old, new = args
    try:
        os.link(old, new)
    except OSError:
        sys.stderr.write(f"link {old} {new}: failed\n")
    return 0


def mkdir_main(argv: list[str] | None = None) -> int:
    """Command entry point: ``mkdir dir ...``; stops at the first failure."""
    args = _args(argv)
    if not args:
        sys.stderr.write("Usage: mkdir files...\n")
        return 1
    for name in args:
        try:
            os.mkdir(name)
        except OSError:
            sys.stderr.write(f"mkdir: {name} failed to create\n")
            break
    return 0


def rm_main(argv: list[str] | None = None) -> int:
    """Command entry point: ``rm file ...``; stops at the first failure."""
    args = _args(argv)
    if not args:
        sys.stderr.write("Usage: rm files...\n")
        return 1
    for name in args:
        try:
            if os.path.isdir(name) and not os.path.islink(name):
                os.rmdir(name)
            else:
                os.unlink(name)
        except OSError:
            sys.stderr.write(f"rm: {name} failed to delete\n")
            break
    return 0


def kill_main(argv: list[str] | None = None) -> int:
    """Command entry point: ``kill pid ...``.

    Each argument is read with :func:`atoi`; ids that are not positive
    name no process and are skipped, and failures are ignored.
    """
    args = _args(argv)
    if not args:
        sys.stderr.write("usage: kill pid...\n")
        return 1
    for arg in args:
        pid = atoi(arg)
        if pid <= 0:
            continue
        try:
            os.kill(pid, _KILL_SIGNAL)
        except OSError:
            pass
    return 0