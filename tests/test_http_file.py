"""Request-file parser tests."""

import pytest

from rq_console.core import http_file
from rq_console.core.errors import ParseError
from rq_console.core.model import HttpRequest


def test_parses_example_file(example_http_file):
    requests = http_file.load(str(example_http_file))

    assert [r.method for r in requests] == ["GET", "POST", "DELETE"]
    get, post, delete = requests
    assert get == HttpRequest(
        method="GET",
        url="https://httpbin.org/get",
        version="HTTP/1.1",
        headers=(("Accept", "application/json"),),
        body="",
    )
    assert post.version == "HTTP/1.1"
    assert post.headers == (("Content-Type", "application/json"),)
    assert post.body == '{"hello": "world"}'
    assert delete.url == "https://httpbin.org/delete"
    assert delete.version == "HTTP/1"


def test_empty_file_yields_no_requests():
    assert http_file.parse("") == []
    assert http_file.parse("\n\n   \n") == []
    assert http_file.parse("# only a comment\n// another\n") == []


def test_missing_version_defaults_to_http_1_1():
    [request] = http_file.parse("GET http://x\n")
    assert request.version == "HTTP/1.1"
    assert request.request_line() == "GET http://x HTTP/1.1"


@pytest.mark.parametrize("raw, expected", [
    ("HTTP/1.1", "HTTP/1.1"),
    ("HTTP/2", "HTTP/2"),
    ("1.1", "HTTP/1.1"),
    ("http/1.0", "HTTP/1.0"),
])
def test_version_normalization(raw, expected):
    [request] = http_file.parse("GET http://x {}\n".format(raw))
    assert request.version == expected


def test_body_stops_at_next_request_line_without_separator():
    text = (
        "POST http://x/a\n"
        "\n"
        "line one\n"
        "line two\n"
        "\n"
        "\n"
        "GET http://x/b\n"
    )
    first, second = http_file.parse(text)
    assert first.body == "line one\nline two"
    assert second.method == "GET"
    assert second.url == "http://x/b"


def test_hash_lines_inside_body_are_body_text():
    text = "POST http://x\n\n# not a comment\nvalue\n###\n"
    [request] = http_file.parse(text)
    assert request.body == "# not a comment\nvalue"


def test_duplicate_headers_keep_order():
    text = "GET http://x\nX-A: 1\nX-B: 2\nX-A: 3\n"
    [request] = http_file.parse(text)
    assert request.headers == (("X-A", "1"), ("X-B", "2"), ("X-A", "3"))
    assert request.header_dict() == {"X-A": "1, 3", "X-B": "2"}


def test_comments_between_requests_are_skipped():
    text = "// first\nGET http://x/1\n###\n# second\nGET http://x/2\n"
    assert [r.url for r in http_file.parse(text)] == ["http://x/1", "http://x/2"]


def test_garbage_where_request_expected_names_the_line():
    with pytest.raises(ParseError) as excinfo:
        http_file.parse("\n\nhello world\n")
    assert excinfo.value.line == 3
    assert str(excinfo.value).startswith("line 3:")


def test_unknown_method_is_a_parse_error():
    with pytest.raises(ParseError) as excinfo:
        http_file.parse("FETCH http://x\n")
    assert excinfo.value.line == 1


def test_malformed_header_is_a_parse_error():
    with pytest.raises(ParseError) as excinfo:
        http_file.parse("GET http://x\nAccept application/json\n")
    assert excinfo.value.line == 2
    assert "malformed header" in str(excinfo.value)


def test_load_missing_file_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        http_file.load(str(tmp_path / "missing.http"))
