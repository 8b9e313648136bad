import io

import pytest
from hypothesis import given
from hypothesis import strategies as st

from xvkit.printf import format_printf, fprintf, printf


def test_plain_text_passes_through():
    assert format_printf("hello world\n") == "hello world\n"


def test_signed_decimal():
    assert format_printf("%d", -42) == "-42"
    assert format_printf("a%db", 7) == "a7b"


@given(st.integers(min_value=-(2**31), max_value=2**31 - 1))
def test_decimal_round_trip(n):
    assert int(format_printf("%d", n)) == n


@given(st.integers(min_value=-(2**40), max_value=2**40))
def test_hex_is_low_32_bits_unsigned(n):
    text = format_printf("%x", n)
    assert text == text.upper()
    assert int(text, 16) == n & 0xFFFFFFFF


def test_hex_of_minus_one():
    assert format_printf("%x", -1) == "FFFFFFFF"


def test_long_is_truncated_to_32_bits():
    assert format_printf("%l", 2**32 + 5) == "5"


@given(st.integers(min_value=0, max_value=2**64 - 1))
def test_pointer_round_trip(n):
    text = format_printf("%p", n)
    assert text.startswith("0x")
    assert len(text) == 18
    assert int(text, 16) == n


def test_string_and_null():
    assert format_printf("%s!", "hi") == "hi!"
    assert format_printf("%s", None) == "(null)"


def test_char_conversion():
    assert format_printf("%c%c", "o", ord("k")) == "ok"


def test_percent_and_unknown():
    assert format_printf("100%%") == "100%"
    assert format_printf("%q") == "%q"


def test_trailing_percent_prints_nothing():
    assert format_printf("abc%") == "abc"


def test_missing_argument_raises():
    with pytest.raises(TypeError):
        format_printf("%d %d", 1)


def test_fprintf_writes_to_stream():
    stream = io.StringIO()
    fprintf(stream, "%s: %d\n", "cat", 3)
    assert stream.getvalue() == "cat: 3\n"


def test_printf_writes_to_stdout(capsys):
    printf("init: starting %s\n", "sh")
    assert capsys.readouterr().out == "init: starting sh\n"