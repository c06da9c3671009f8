import pytest

from minishell.textutil import atoi, is_n_flag, parse_exit_code, skip_to, split


@pytest.mark.parametrize(
    "text, expected",
    [
        ("42", 42),
        ("   -17", -17),
        ("\t\n+5", 5),
        ("12abc", 12),
        ("+-5", 0),
        ("abc", 0),
        ("", 0),
    ],
)
def test_atoi(text, expected):
    assert atoi(text) == expected


def test_atoi_round_trips_small_numbers():
    for number in range(-300, 300):
        assert atoi(str(number)) == number


@pytest.mark.parametrize(
    "text, delimiter, expected",
    [
        ("  a  b c ", " ", ["a", "b", "c"]),
        ("/bin:/usr/bin", ":", ["/bin", "/usr/bin"]),
        ("abc", ":", ["abc"]),
        ("::", ":", []),
        ("", " ", []),
    ],
)
def test_split(text, delimiter, expected):
    assert split(text, delimiter) == expected


def test_split_never_yields_empty_pieces():
    pieces = split("::a:::b::c:", ":")
    assert all(pieces)
    assert ":".join(pieces) == "a:b:c"


@pytest.mark.parametrize(
    "text, expected",
    [("42", 42), (" +7", 7), ("-1", -1), ("0", 0)],
)
def test_parse_exit_code_values(text, expected):
    assert parse_exit_code(text) == expected


def test_parse_exit_code_round_trips_status_range():
    for number in range(256):
        assert parse_exit_code(str(number)) == number


def test_parse_exit_code_wraps_by_256():
    for number in range(0, 256, 17):
        assert parse_exit_code(str(number + 256)) == parse_exit_code(str(number))


@pytest.mark.parametrize("text", ["", "abc", "12a", "+", "-", "   ", "1" * 22])
def test_parse_exit_code_rejects_non_numeric(text):
    with pytest.raises(ValueError, match="numeric argument required"):
        parse_exit_code(text)


@pytest.mark.parametrize("arg", ["-n", "-nnn"])
def test_is_n_flag_accepts(arg):
    assert is_n_flag(arg) is True


@pytest.mark.parametrize("arg", ["-", "-na", "n", "", "--n"])
def test_is_n_flag_rejects(arg):
    assert is_n_flag(arg) is False


def test_skip_to_finds_character():
    line = "echo 'hi there' x"
    index = skip_to(line, 6, "'")
    assert line[index] == "'"
    assert index > 6


def test_skip_to_returns_length_when_missing():
    line = "no quotes here"
    assert skip_to(line, 0, '"') == len(line)