"""Tokenizer and recursive-descent parser for the command shell's syntax."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from xvkit.layout import OpenFlag

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
# An exec command holds fewer than this many arguments.
MAXARGS = 10

WORD = "word"
_REDIRECTS = ("<", ">", ">>")


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""

    def __init__(self, message: str, leftovers: str = "") -> None:
        super().__init__(message)
        self.leftovers = leftovers


@dataclass
class ExecCommand:
    """Run a program with arguments; ``argv[0]`` names the program."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCommand:
    """Run ``cmd`` with file descriptor ``fd`` reopened on ``file``."""

    cmd: "Command"
    file: str
    mode: int
    fd: int


@dataclass
class PipeCommand:
    """Connect the output of ``left`` to the input of ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class ListCommand:
    """Run ``left`` to completion, then ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class BackCommand:
    """Run ``cmd`` without waiting for it."""

    cmd: "Command"


Command = Union[ExecCommand, RedirCommand, PipeCommand, ListCommand, BackCommand]


def tokenize(line: str) -> list[tuple[str, str]]:
    """Split ``line`` into ``(kind, text)`` tokens.

    ``kind`` is ``"word"`` for a word, otherwise the operator itself:
    one of ``| ( ) ; & < >`` or ``>>``.
    """
    tokens: list[tuple[str, str]] = []
    end = len(line)
    i = 0
    while True:
        while i < end and line[i] in WHITESPACE:
            i += 1
        if i >= end:
            return tokens
        c = line[i]
        if c == ">":
            if i + 1 < end and line[i + 1] == ">":
                tokens.append((">>", ">>"))
                i += 2
            else:
                tokens.append((">", ">"))
                i += 1
        elif c in SYMBOLS:
            tokens.append((c, c))
            i += 1
        else:
            start = i
            while i < end and line[i] not in WHITESPACE and line[i] not in SYMBOLS:
                i += 1
            tokens.append((WORD, line[start:i]))


class _Parser:
    def __init__(self, line: str) -> None:
        self.line = line
        self.tokens = tokenize(line)
        self.pos = 0

    def peek(self, *kinds: str) -> bool:
        return self.pos < len(self.tokens) and self.tokens[self.pos][0] in kinds

    def next(self) -> tuple[str, str] | None:
        if self.pos >= len(self.tokens):
            return None
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def leftovers(self) -> str:
        return " ".join(text for _, text in self.tokens[self.pos:])

    def parse_line(self) -> Command:
        cmd = self.parse_pipe()
        while self.peek("&"):
            self.next()
            cmd = BackCommand(cmd)
        if self.peek(";"):
            self.next()
            cmd = ListCommand(cmd, self.parse_line())
        return cmd

    def parse_pipe(self) -> Command:
        cmd = self.parse_exec()
        if self.peek("|"):
            self.next()
            cmd = PipeCommand(cmd, self.parse_pipe())
        return cmd

    def parse_redirs(self, cmd: Command) -> Command:
        while self.peek(*_REDIRECTS):
            kind, _ = self.next()  # type: ignore[misc]
            target = self.next()
            if target is None or target[0] != WORD:
                raise ShellSyntaxError("missing file for redirection")
            name = target[1]
            if kind == "<":
                cmd = RedirCommand(cmd, name, OpenFlag.RDONLY, 0)
            elif kind == ">":
                cmd = RedirCommand(
                    cmd, name, OpenFlag.WRONLY | OpenFlag.CREATE | OpenFlag.TRUNC, 1
                )
            else:
                cmd = RedirCommand(cmd, name, OpenFlag.WRONLY | OpenFlag.CREATE, 1)
        return cmd

    def parse_block(self) -> Command:
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.next()
        cmd = self.parse_line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.next()
        return self.parse_redirs(cmd)

    def parse_exec(self) -> Command:
        if self.peek("("):
            return self.parse_block()
        exec_cmd = ExecCommand()
        ret = self.parse_redirs(exec_cmd)
        while not self.peek("|", ")", "&", ";"):
            token = self.next()
            if token is None:
                break
            kind, text = token
            if kind != WORD:
                raise ShellSyntaxError("syntax")
            exec_cmd.argv.append(text)
            if len(exec_cmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.parse_redirs(ret)
        return ret


def parse_command(line: str) -> Command:
    """Parse a whole command line into a command tree.

    Raises :class:`ShellSyntaxError` on malformed input, including
    tokens left over after a complete command.
    """
    nul = line.find("\0")
    if nul >= 0:
        line = line[:nul]
    parser = _Parser(line)
    cmd = parser.parse_line()
    if parser.pos != len(parser.tokens):
        raise ShellSyntaxError("syntax", leftovers=parser.leftovers())
    return cmd