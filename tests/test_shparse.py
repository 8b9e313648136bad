import pytest
from hypothesis import given, strategies as st

from xvkit.layout import OpenFlag
from xvkit.shparse import (
    BackCommand,
    ExecCommand,
    ListCommand,
    PipeCommand,
    RedirCommand,
    ShellSyntaxError,
    parse_command,
    tokenize,
)


def test_tokenize_words_and_operators():
    assert tokenize("echo hi>>out | cat<in;") == [
        ("word", "echo"),
        ("word", "hi"),
        (">>", ">>"),
        ("word", "out"),
        ("|", "|"),
        ("word", "cat"),
        ("<", "<"),
        ("word", "in"),
        (";", ";"),
    ]


def test_tokenize_whitespace_only_is_empty():
    assert tokenize(" \t\r\n\v ") == []


def test_tokenize_single_greater():
    assert tokenize("a > b") == [("word", "a"), (">", ">"), ("word", "b")]


def test_simple_exec():
    assert parse_command("echo hello world\n") == ExecCommand(["echo", "hello", "world"])


def test_empty_line_gives_empty_exec():
    assert parse_command("\n") == ExecCommand([])


def test_input_redirection():
    cmd = parse_command("cat < README")
    assert cmd == RedirCommand(ExecCommand(["cat"]), "README", OpenFlag.RDONLY, 0)


def test_output_redirections_modes():
    trunc = parse_command("echo x > f")
    append = parse_command("echo x >> f")
    assert trunc.mode == OpenFlag.WRONLY | OpenFlag.CREATE | OpenFlag.TRUNC
    assert trunc.fd == 1
    assert append.mode == OpenFlag.WRONLY | OpenFlag.CREATE
    assert append.fd == 1


def test_later_redirection_wraps_outermost():
    cmd = parse_command("cat < in > out")
    assert isinstance(cmd, RedirCommand)
    assert cmd.file == "out"
    assert cmd.cmd.file == "in"
    assert cmd.cmd.cmd == ExecCommand(["cat"])


def test_redirection_between_arguments():
    cmd = parse_command("grep < in pat")
    assert cmd.cmd == ExecCommand(["grep", "pat"])


def test_pipe_is_right_associative():
    cmd = parse_command("a | b | c")
    assert cmd == PipeCommand(
        ExecCommand(["a"]), PipeCommand(ExecCommand(["b"]), ExecCommand(["c"]))
    )


def test_list_and_background():
    cmd = parse_command("a & ; b")
    assert cmd == ListCommand(BackCommand(ExecCommand(["a"])), ExecCommand(["b"]))


def test_double_background():
    assert parse_command("a & &") == BackCommand(BackCommand(ExecCommand(["a"])))


def test_block_with_redirection():
    cmd = parse_command("(echo a; echo b) > out")
    assert isinstance(cmd, RedirCommand)
    assert cmd.file == "out"
    assert cmd.cmd == ListCommand(ExecCommand(["echo", "a"]), ExecCommand(["echo", "b"]))


def test_nine_args_allowed_ten_rejected():
    words = [f"w{i}" for i in range(9)]
    assert parse_command(" ".join(words)) == ExecCommand(words)
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse_command(" ".join(words + ["extra"]))


def test_missing_redirection_file():
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse_command("cat <")
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse_command("cat > |")


def test_missing_close_paren():
    with pytest.raises(ShellSyntaxError, match="missing \\)"):
        parse_command("(echo a")


def test_leftovers_reported():
    with pytest.raises(ShellSyntaxError) as info:
        parse_command("echo a )")
    assert str(info.value) == "syntax"
    assert info.value.leftovers == ")"


def test_open_paren_inside_args_is_syntax_error():
    with pytest.raises(ShellSyntaxError, match="^syntax$"):
        parse_command("echo (a)")


def test_text_after_nul_is_ignored():
    assert parse_command("echo a\0| broken (") == ExecCommand(["echo", "a"])


_word = st.text(alphabet="abcxyz019./_-", min_size=1, max_size=6)


@given(st.lists(_word, min_size=1, max_size=9))
def test_words_roundtrip(words):
    line = " ".join(words)
    assert [text for _, text in tokenize(line)] == words
    assert parse_command(line) == ExecCommand(words)


@given(st.lists(st.lists(_word, min_size=1, max_size=3), min_size=1, max_size=4))
def test_pipeline_preserves_stage_order(stages):
    cmd = parse_command(" | ".join(" ".join(s) for s in stages))
    seen = []
    while isinstance(cmd, PipeCommand):
        seen.append(cmd.left.argv)
        cmd = cmd.right
    seen.append(cmd.argv)
    assert seen == stages