import pytest

from cgiprogram.decode import get_vars
from cgiprogram.errors import UsageError
from cgiprogram.switches import MAX_ARGV, SWITCH_BUFFER_SIZE, get_argv, parse_flags


def test_real_argv_when_no_switches():
    argv = ["cgiProgram", "-a"]
    resolved = get_argv(argv, [], {})
    assert resolved == argv
    assert resolved is not argv


def test_switches_from_query():
    query = get_vars(b"x=1&HTTP_SWITCHES=-a+-e%09-q")
    assert get_argv(["prog", "-n"], query, {}) == ["prog", "-a", "-e", "-q"]


def test_query_wins_over_environment():
    query = get_vars(b"HTTP_SWITCHES=-q")
    assert get_argv(["prog"], query, {"HTTP_SWITCHES": "-a"}) == ["prog", "-q"]


def test_switches_from_environment():
    assert get_argv(["prog"], [], {"HTTP_SWITCHES": "-b 100\n-s %32%30%30"}) == \
        ["prog", "-b", "100", "-s", "200"]


def test_query_key_without_value_falls_back():
    query = get_vars(b"HTTP_SWITCHES")
    assert get_argv(["prog"], query, {"HTTP_SWITCHES": "-e"}) == ["prog", "-e"]


def test_empty_switches_leave_only_program_name():
    assert get_argv(["prog", "-a"], [], {"HTTP_SWITCHES": ""}) == ["prog"]


def test_too_many_tokens_dropped():
    switches = " ".join(["-a"] * 100)
    argv = get_argv(["prog"], [], {"HTTP_SWITCHES": switches})
    assert len(argv) == MAX_ARGV - 1


def test_long_switch_string_truncated():
    switches = "-a " + "x" * 2000
    argv = get_argv(["prog"], [], {"HTTP_SWITCHES": switches})
    assert argv[1] == "-a"
    assert len(argv[2]) == SWITCH_BUFFER_SIZE - 1 - len("-a ")


def test_default_flags():
    flags = parse_flags(["cgiProgram"])
    assert flags.nothing_requested()
    assert not flags.non_parsed_header


def test_combined_letters():
    flags = parse_flags(["cgiProgram", "-aeqp"])
    assert flags.output_args and flags.output_env and flags.output_query and flags.output_post


def test_arguments_consumed_in_order():
    flags = parse_flags(["cgiProgram", "-bs", "100", "404"])
    assert flags.output_bytes == 100
    assert flags.response_status == 404


def test_non_switch_tokens_ignored():
    flags = parse_flags(["cgiProgram", "keyword", "-a"])
    assert flags.output_args


def test_header_lines_force_nph():
    flags = parse_flags(["cgiProgram", "-h", "3"])
    assert flags.output_header_lines == 3
    assert flags.non_parsed_header


def test_nph_from_program_name():
    assert parse_flags(["/cgi-bin/nph-cgiProgram"]).non_parsed_header
    assert parse_flags(["cgiProgram", "-n"]).non_parsed_header


def test_location_defaults_status():
    flags = parse_flags(["cgiProgram", "-l", "/new"])
    assert flags.output_location == "/new"
    assert flags.response_status == 302


def test_location_keeps_explicit_status():
    flags = parse_flags(["cgiProgram", "-s", "301", "-l", "/new"])
    assert flags.response_status == 301


def test_timeout_parsed():
    assert parse_flags(["cgiProgram", "-t", "30"]).timeout == 30


def test_non_numeric_argument_is_zero():
    assert parse_flags(["cgiProgram", "-b", "lots"]).output_bytes == 0


@pytest.mark.parametrize("argv", [
    ["cgiProgram", "-b"],
    ["cgiProgram", "-a", "-s"],
    ["cgiProgram", "-l"],
])
def test_missing_argument(argv):
    with pytest.raises(UsageError, match="Missing argument"):
        parse_flags(argv)


def test_unknown_switch():
    with pytest.raises(UsageError) as exc:
        parse_flags(["cgiProgram", "-ax"])
    assert exc.value.switch == "x"


def test_plus_separates_environment_switches():
    assert get_argv(["prog"], [], {"HTTP_SWITCHES": "-a+-e"}) == ["prog", "-a", "-e"]
