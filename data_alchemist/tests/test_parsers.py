"""Tests for CSV upload parsing and CSV export."""

from __future__ import annotations

import pytest

from data_alchemist.backend import parsers
from data_alchemist.backend.errors import CSVParseError


def test_parse_upload_keeps_values_as_strings() -> None:
    content = b"ClientID,PriorityLevel,AttributesJSON\nC1,3,\"{\"\"a\"\": 1}\"\n\nC2,007,\n"
    rows = parsers.parse_upload(content)
    assert rows == [
        {'ClientID': 'C1', 'PriorityLevel': '3', 'AttributesJSON': '{"a": 1}'},
        {'ClientID': 'C2', 'PriorityLevel': '007', 'AttributesJSON': ''},
    ]


def test_parse_upload_strips_byte_order_mark() -> None:
    rows = parsers.parse_upload(b'\xef\xbb\xbfTaskID,TaskName\nT1,Build\n')
    assert list(rows[0].keys()) == ['TaskID', 'TaskName']


def test_short_rows_are_padded_with_empty_strings() -> None:
    rows = parsers.parse_upload(b"A,B,C\n1\n2,3,4\n")
    assert rows[0] == {'A': '1', 'B': '', 'C': ''}
    assert rows[1] == {'A': '2', 'B': '3', 'C': '4'}


def test_na_like_text_is_not_converted() -> None:
    rows = parsers.parse_upload(b"A,B\nNA,null\n")
    assert rows == [{'A': 'NA', 'B': 'null'}]


def test_header_only_file_has_no_rows() -> None:
    assert parsers.parse_upload(b"WorkerID,WorkerName\n") == []


def test_trailing_delimiters_keep_columns_aligned() -> None:
    """A trailing comma on every data row must not shift values left."""
    rows = parsers.parse_upload(b"ClientID,ClientName\nC1,Acme,\nC2,Globex,\n")
    assert rows == [
        {'ClientID': 'C1', 'ClientName': 'Acme'},
        {'ClientID': 'C2', 'ClientName': 'Globex'},
    ]


def test_extra_field_is_dropped_not_shifted() -> None:
    rows = parsers.parse_upload(b"A,B\n1,2,3\n")
    assert rows[0]['A'] == '1'
    assert rows[0]['B'] == '2'


def test_header_names_are_kept_verbatim() -> None:
    rows = parsers.parse_upload(b" ClientID ,Name\nC1,x\n")
    assert list(rows[0].keys()) == [' ClientID ', 'Name']


def test_unterminated_quote_raises_parse_error() -> None:
    with pytest.raises(CSVParseError):
        parsers.parse_upload(b'A,B\n"1,2\n')


@pytest.mark.parametrize('filename, content_type, expected', [
    ('clients.csv', 'text/csv', True),
    ('clients.CSV', 'application/vnd.ms-excel', True),
    ('clients.txt', 'text/csv; charset=utf-8', True),
    ('clients.txt', 'text/plain', False),
    ('clients.xlsx', None, False),
    (None, None, False),
])
def test_is_csv_upload(filename, content_type, expected) -> None:
    assert parsers.is_csv_upload(filename, content_type) is expected


def test_export_then_reimport_round_trips_strings() -> None:
    """Quoted commas, quotes and newlines survive a round trip."""
    rows = [
        {'TaskID': 'T1', 'TaskName': 'Load, then clean', 'RequiredSkills': 'say "hi"'},
        {'TaskID': 'T2', 'TaskName': 'Two\nlines', 'RequiredSkills': ''},
    ]
    csv_text = parsers.rows_to_csv(rows)
    assert parsers.parse_upload(csv_text.encode('utf-8')) == rows


def test_export_numbers_come_back_as_strings() -> None:
    rows = [{'ClientID': 'C1', 'PriorityLevel': 5}, {'ClientID': 'C2', 'PriorityLevel': 2}]
    reimported = parsers.parse_upload(parsers.rows_to_csv(rows).encode('utf-8'))
    assert reimported == [
        {'ClientID': 'C1', 'PriorityLevel': '5'},
        {'ClientID': 'C2', 'PriorityLevel': '2'},
    ]


def test_export_header_is_union_of_row_keys() -> None:
    csv_text = parsers.rows_to_csv([{'A': '1'}, {'B': '2', 'A': '3'}])
    lines = csv_text.splitlines()
    assert lines[0] == 'A,B'
    assert lines[1] == '1,'
    assert lines[2] == '3,2'
